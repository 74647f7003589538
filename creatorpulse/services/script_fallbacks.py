"""
Deterministic stand-ins for generation calls that failed.

Same inputs always produce the same output, so degraded results are stable
across retries and easy to assert on in tests.
"""

import math
from typing import Sequence

from ..core.models import (
    EnhancedScenePrompt,
    ImagePromptSet,
    ImageTechnicalSettings,
    MotionEngine,
    OptimizedScene,
    Scene,
    VideoScript,
    VoiceInstructions,
    VoiceoverPlan,
    VoiceProfile,
    VoiceSettings,
)

MIN_SCENES = 3
MAX_SCENES = 8
SECONDS_PER_SCENE = 5

_EMOTIONS = ("calm", "energetic", "inspiring")
_LIGHTING = ("natural", "dramatic", "golden hour")
_CAMERA_ANGLES = ("wide", "close-up")

FALLBACK_VISUAL_ELEMENTS = [
    "cinematic lighting",
    "professional composition",
    "high quality",
    "engaging visuals",
]
FALLBACK_NEGATIVE_PROMPT = "blurry, low quality, distorted, watermark, text, worst quality"


def fallback_scene_count(duration: int) -> int:
    """
    Scene count for a duration: one scene per 5 seconds, clamped to 3-8.

    Example:
        >>> fallback_scene_count(17)
        4
    """
    return min(max(math.ceil(duration / SECONDS_PER_SCENE), MIN_SCENES), MAX_SCENES)


def build_fallback_script(
    prompt: str,
    duration: int,
    visual_style: str,
    tone: str,
    voice_gender: str = "Female",
    language: str = "English",
    accent: str = "American"
) -> VideoScript:
    """
    Build a complete placeholder script.

    Every scene gets floor(duration / scene_count) seconds, so the scene
    total can fall short of the requested duration.
    """
    scene_count = fallback_scene_count(duration)
    scene_length = duration // scene_count

    scenes = []
    for i in range(scene_count):
        number = i + 1
        scenes.append(Scene(
            id=f"scene_{number}",
            duration=scene_length,
            narration=(
                f"Scene {number}: This is a {tone} segment about {prompt}. The {visual_style} "
                f"style creates engaging content that captures the viewer's attention and "
                f"delivers the message effectively."
            ),
            visual_description=(
                f"{visual_style} cinematography showing {prompt} - Scene {number}. High quality, "
                f"professional production with excellent lighting and composition. "
                f"Cinematic, photorealistic, 8K resolution."
            ),
            voice_instructions=VoiceInstructions(
                emotion=_EMOTIONS[i % 3],
                pace="medium",
                emphasis="key words" if i % 2 == 0 else "natural flow",
                pause="natural pause points",
            ),
            visual_elements=list(FALLBACK_VISUAL_ELEMENTS),
            camera_angle=_CAMERA_ANGLES[i % 2],
            lighting=_LIGHTING[i % 3],
        ))

    return VideoScript(
        title=f"{prompt} - AI Generated Video",
        description=f"A {duration}-second video about {prompt} with {visual_style} style and {tone} tone",
        total_duration=duration,
        voice_profile=VoiceProfile(
            gender=voice_gender,
            language=language,
            accent=accent,
            tone=tone,
            pace="medium",
            emphasis="natural",
        ),
        scenes=scenes,
        motion_engine=MotionEngine(
            recommendation="AnimateDiff",
            reason="Fallback script - using budget-friendly option",
        ),
    )


def build_fallback_voiceover(scenes: Sequence[Scene], total_duration: float) -> VoiceoverPlan:
    """Echo each scene's narration with neutral delivery notes."""
    return VoiceoverPlan(
        optimized_scenes=[
            OptimizedScene(
                id=scene.id,
                optimized_narration=scene.narration,
                pronunciation_guide="",
                timing_notes="natural pace",
                emotional_cues=scene.voice_instructions.emotion or "natural",
            )
            for scene in scenes
        ],
        total_estimated_duration=total_duration,
        voice_settings=VoiceSettings(),
    )


def build_fallback_image_prompts(scenes: Sequence[Scene], visual_style: str) -> ImagePromptSet:
    """Scene visual description plus style name and generic quality boilerplate."""
    return ImagePromptSet(
        enhanced_scenes=[
            EnhancedScenePrompt(
                id=scene.id,
                positive_prompt=(
                    f"{scene.visual_description}, {visual_style}, cinematic, high quality, "
                    f"8K, photorealistic"
                ),
                negative_prompt=FALLBACK_NEGATIVE_PROMPT,
                style_notes=f"Maintain {visual_style} consistency",
                technical_settings=ImageTechnicalSettings(),
            )
            for scene in scenes
        ],
        overall_style_guide=f"Maintain consistent {visual_style} style throughout all scenes",
    )
