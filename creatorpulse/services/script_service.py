"""
Script Generation Service - Video scripts, voiceover direction and image prompts.

Uses an OpenAI chat model (JSON mode) to:
1. Generate a full video script broken into timed scenes
2. Optimize scene narration for text-to-speech
3. Turn scene visuals into image-generation prompts
4. Regenerate a single scene while keeping its neighbours' flow

Operations 1-3 never fail on backend trouble: they return a deterministic
local substitute flagged as a fallback. Scene regeneration has no safe
substitute and raises instead.
"""

import json
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence

from openai import AsyncOpenAI

from ..core.config import Config
from ..core.errors import GenerationParseError, SceneNotFoundError, SceneRegenerationError
from ..core.llm import create_openai_client
from ..core.models import (
    GenerationResult,
    ImagePromptSet,
    Scene,
    VideoScript,
    VoiceInstructions,
    VoiceoverPlan,
    VoiceProfile,
)
from ..core.observability import get_logfire
from .script_fallbacks import (
    build_fallback_image_prompts,
    build_fallback_script,
    build_fallback_voiceover,
)

logger = logging.getLogger(__name__)


class ScriptGenerationService:
    """
    Service for drafting video scripts and their production assets.

    The OpenAI client is injected, or built by ``client_factory`` on first
    use. A missing API key raises ConfigurationError at that point and is
    never turned into a fallback.
    """

    # (temperature, max_tokens) per operation
    SCRIPT_PARAMS = (0.8, 3000)
    VOICEOVER_PARAMS = (0.3, 2000)
    IMAGE_PROMPT_PARAMS = (0.7, 2500)
    REGENERATION_PARAMS = (0.9, 500)

    SCRIPT_PROMPT = """You are an expert video scriptwriter preparing a script for an AI video production pipeline.

The script will drive:
1. AI image generation for every scene
2. Text-to-speech voiceover generation
3. Final video assembly

REQUIREMENTS:
- Total video duration: {duration} seconds
- Visual style: {visual_style}
- Tone: {tone}
- Voice: {voice_gender} voice with {accent} accent in {language}
- Split the video into 3-8 scenes depending on the duration
- Keep each scene between 3 and 8 seconds
- Give every scene a detailed visual description usable as an image prompt
- Write narration that reads naturally when spoken aloud
- Add delivery instructions (emotion, pace, emphasis, pauses) for each scene

OUTPUT FORMAT:
Return a JSON object with exactly this structure:
{{
  "title": "Compelling video title",
  "description": "Brief video description",
  "totalDuration": {duration},
  "voiceProfile": {{
    "gender": "{voice_gender}",
    "language": "{language}",
    "accent": "{accent}",
    "tone": "{tone}",
    "pace": "medium",
    "emphasis": "natural"
  }},
  "scenes": [
    {{
      "id": "scene_1",
      "duration": 5,
      "narration": "Narration text for the voiceover",
      "visualDescription": "Detailed visual description for image generation",
      "voiceInstructions": {{
        "emotion": "calm|energetic|dramatic|inspiring",
        "pace": "slow|medium|fast",
        "emphasis": "words to emphasize",
        "pause": "natural pause points"
      }},
      "visualElements": ["element 1", "element 2", "element 3"],
      "cameraAngle": "wide|close-up|medium|aerial",
      "lighting": "natural|dramatic|soft|golden hour"
    }}
  ],
  "motionEngine": {{
    "recommendation": "RunwayGen2|AnimateDiff",
    "reason": "Why this engine suits the scene complexity"
  }}
}}"""

    VOICEOVER_PROMPT = """You are a voiceover optimization expert. Refine scene narration so it performs well with AI text-to-speech.

REQUIREMENTS:
- Fit the pacing to {total_duration} seconds in total
- Voice profile: {gender} voice, {language} language, {accent} accent
- Tone: {tone}
- Mark natural pauses and emphasis, add pronunciation guides where needed
- Keep transitions between scenes smooth and the emotion consistent

OUTPUT FORMAT:
Return a JSON object with this structure:
{{
  "optimizedScenes": [
    {{
      "id": "scene_1",
      "optimizedNarration": "Narration with (pause) and *emphasis* markers",
      "pronunciationGuide": "difficult-word: pronunciation",
      "timingNotes": "Speed up / slow down instructions",
      "emotionalCues": "Emotional direction for this scene"
    }}
  ],
  "totalEstimatedDuration": {total_duration},
  "voiceSettings": {{
    "stability": 0.75,
    "similarity_boost": 0.8,
    "style": 0.6
  }}
}}"""

    IMAGE_PROMPT_PROMPT = """You are an expert prompt engineer for SDXL-class image generation models.

REQUIREMENTS:
- Visual style: {visual_style}
- Overall theme: {overall_theme}
- 50-100 words per positive prompt, with concrete technical detail
- Negative prompts that rule out common artifacts
- Visual consistency across all scenes

OUTPUT FORMAT:
Return a JSON object with this structure:
{{
  "enhancedScenes": [
    {{
      "id": "scene_1",
      "positivePrompt": "Detailed prompt with style specifications",
      "negativePrompt": "Elements to avoid",
      "styleNotes": "Consistency requirements",
      "technicalSettings": {{
        "width": 1024,
        "height": 1024,
        "steps": 30,
        "guidance_scale": 7.5
      }}
    }}
  ],
  "overallStyleGuide": "Consistency guidelines for all scenes"
}}"""

    REGENERATION_PROMPT = """You are rewriting one scene of an existing video script.

Original video concept: {original_prompt}
Visual style: {visual_style}
Tone: {tone}
Scene duration: {duration} seconds

Context:
{context_before}
Current scene to regenerate: "{current_narration}"
{context_after}

Write a new version of the current scene that:
- Flows naturally from the previous scene into the next one
- Keeps the same duration ({duration} seconds)
- Matches the visual style and tone
- Brings fresh content while staying on topic

OUTPUT FORMAT:
Return a JSON object with exactly this structure:
{{
  "id": "{scene_id}",
  "duration": {duration},
  "narration": "New narration text",
  "visualDescription": "New detailed visual description for image generation",
  "voiceInstructions": {{
    "emotion": "appropriate emotion",
    "pace": "slow|medium|fast",
    "emphasis": "words to emphasize",
    "pause": "natural pause points"
  }},
  "visualElements": ["element1", "element2", "element3"],
  "cameraAngle": "wide|close-up|medium|aerial",
  "lighting": "natural|dramatic|soft|golden hour"
}}"""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
        client_factory: Callable[[], AsyncOpenAI] = create_openai_client
    ):
        """
        Initialize the ScriptGenerationService.

        Args:
            client: OpenAI client (built with client_factory on first use when omitted)
            model: Chat model (defaults to Config.get_model("script"))
            client_factory: Zero-argument callable returning an AsyncOpenAI client
        """
        self._client = client
        self._client_factory = client_factory
        self.model = model or Config.get_model("script")

    def _ensure_client(self) -> AsyncOpenAI:
        """Return the client, building it on first use (may raise ConfigurationError)."""
        if self._client is None:
            self._client = self._client_factory()
        return self._client

    async def _complete_json(
        self,
        client: AsyncOpenAI,
        system_prompt: str,
        user_message: str,
        params: tuple
    ) -> Dict[str, Any]:
        """Send one JSON-mode chat request and parse the reply."""
        temperature, max_tokens = params
        response = await client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message}
            ],
            response_format={"type": "json_object"},
            temperature=temperature,
            max_tokens=max_tokens
        )

        content = response.choices[0].message.content or "{}"
        return self._parse_json_response(content)

    # =========================================================================
    # Full Script
    # =========================================================================

    async def generate_video_script(
        self,
        prompt: str,
        duration: int,
        visual_style: str,
        tone: str,
        voice_gender: str = "Female",
        language: str = "English",
        accent: str = "American"
    ) -> GenerationResult[VideoScript]:
        """
        Generate a complete video script with scenes and voice direction.

        Args:
            prompt: What the video is about
            duration: Total duration in seconds (>= 1)
            visual_style: Visual style name (e.g. "cinematic")
            tone: Narrative tone (e.g. "inspiring")
            voice_gender: Narrator voice gender
            language: Narration language
            accent: Narrator accent

        Returns:
            GenerationResult wrapping the VideoScript; a fallback script when
            the backend call or its response failed
        """
        if duration < 1:
            raise ValueError(f"duration must be at least 1 second, got {duration}")

        client = self._ensure_client()

        logger.info(f"Generating video script: {duration}s, style={visual_style}, tone={tone}")

        system_prompt = self.SCRIPT_PROMPT.format(
            duration=duration,
            visual_style=visual_style,
            tone=tone,
            voice_gender=voice_gender,
            language=language,
            accent=accent
        )
        default_profile = VoiceProfile(gender=voice_gender, language=language, accent=accent, tone=tone)

        with get_logfire().span("generate_video_script", duration=duration, visual_style=visual_style):
            try:
                raw = await self._complete_json(
                    client,
                    system_prompt,
                    f"Create a complete video production script for: {prompt}",
                    self.SCRIPT_PARAMS
                )
                script = self._normalize_script(raw, duration, default_profile)

            except Exception as e:
                logger.error(f"Script generation failed, using fallback script: {e}")
                fallback = build_fallback_script(
                    prompt, duration, visual_style, tone,
                    voice_gender=voice_gender, language=language, accent=accent
                )
                return GenerationResult.fallback(fallback, reason=str(e))

        logger.info(f"Generated script '{script.title}' with {len(script.scenes)} scenes")
        return GenerationResult.remote(script)

    @staticmethod
    def _normalize_script(
        raw: Dict[str, Any],
        duration: int,
        default_profile: VoiceProfile
    ) -> VideoScript:
        """
        Validate a raw script, filling in scene ids and voice instructions.

        Scenes without an id (or repeating an earlier one) get scene_{index+1};
        scenes without voice instructions get the default block.
        """
        scenes = raw.get("scenes")
        if not isinstance(scenes, list) or not scenes:
            raise GenerationParseError("Response has no scenes")

        taken = set()
        normalized: List[Dict[str, Any]] = []
        for index, scene in enumerate(scenes):
            if not isinstance(scene, dict):
                raise GenerationParseError(f"Scene {index + 1} is not an object")

            scene = dict(scene)
            scene_id = str(scene.get("id") or "")
            if not scene_id or scene_id in taken:
                scene_id = f"scene_{index + 1}"
                suffix = 2
                while scene_id in taken:
                    scene_id = f"scene_{index + 1}_{suffix}"
                    suffix += 1
            taken.add(scene_id)
            scene["id"] = scene_id

            if not scene.get("voiceInstructions") and not scene.get("voice_instructions"):
                scene["voiceInstructions"] = VoiceInstructions().model_dump(by_alias=True)

            normalized.append(scene)

        data = dict(raw)
        data["scenes"] = normalized
        data.setdefault("totalDuration", duration)
        if not data.get("voiceProfile") and not data.get("voice_profile"):
            data["voiceProfile"] = default_profile.model_dump(by_alias=True)

        return VideoScript.model_validate(data)

    # =========================================================================
    # Voiceover
    # =========================================================================

    async def generate_voiceover_text(
        self,
        scenes: Sequence[Scene],
        voice_profile: VoiceProfile,
        total_duration: float
    ) -> GenerationResult[VoiceoverPlan]:
        """
        Optimize scene narration for text-to-speech.

        Args:
            scenes: Scenes whose narration should be optimized
            voice_profile: Narrator voice profile
            total_duration: Target total duration in seconds

        Returns:
            GenerationResult wrapping a VoiceoverPlan; on failure the original
            narration with neutral annotations
        """
        client = self._ensure_client()

        logger.info(f"Optimizing voiceover for {len(scenes)} scenes")

        system_prompt = self.VOICEOVER_PROMPT.format(
            total_duration=total_duration,
            gender=voice_profile.gender,
            language=voice_profile.language,
            accent=voice_profile.accent,
            tone=voice_profile.tone
        )

        with get_logfire().span("generate_voiceover_text", scene_count=len(scenes)):
            try:
                raw = await self._complete_json(
                    client,
                    system_prompt,
                    f"Optimize voiceover for scenes: {self._scenes_json(scenes)}",
                    self.VOICEOVER_PARAMS
                )
                raw.setdefault("totalEstimatedDuration", total_duration)
                plan = VoiceoverPlan.model_validate(raw)

            except Exception as e:
                logger.error(f"Voiceover optimization failed, using fallback: {e}")
                return GenerationResult.fallback(
                    build_fallback_voiceover(scenes, total_duration), reason=str(e)
                )

        logger.info("Voiceover optimization complete")
        return GenerationResult.remote(plan)

    # =========================================================================
    # Image Prompts
    # =========================================================================

    async def generate_scene_image_prompts(
        self,
        scenes: Sequence[Scene],
        visual_style: str,
        overall_theme: str
    ) -> GenerationResult[ImagePromptSet]:
        """
        Build positive/negative image prompts for every scene.

        Args:
            scenes: Scenes to illustrate
            visual_style: Visual style name
            overall_theme: Theme shared by all scenes

        Returns:
            GenerationResult wrapping an ImagePromptSet; on failure prompts
            assembled from each scene's visual description
        """
        client = self._ensure_client()

        logger.info(f"Generating image prompts for {len(scenes)} scenes")

        system_prompt = self.IMAGE_PROMPT_PROMPT.format(
            visual_style=visual_style,
            overall_theme=overall_theme
        )

        with get_logfire().span("generate_scene_image_prompts", scene_count=len(scenes)):
            try:
                raw = await self._complete_json(
                    client,
                    system_prompt,
                    f"Create optimized image prompts for scenes: {self._scenes_json(scenes)}",
                    self.IMAGE_PROMPT_PARAMS
                )
                prompts = ImagePromptSet.model_validate(raw)

            except Exception as e:
                logger.error(f"Image prompt generation failed, using fallback: {e}")
                return GenerationResult.fallback(
                    build_fallback_image_prompts(scenes, visual_style), reason=str(e)
                )

        logger.info("Image prompts generated")
        return GenerationResult.remote(prompts)

    # =========================================================================
    # Scene Regeneration
    # =========================================================================

    async def regenerate_scene(
        self,
        original_prompt: str,
        scene_id: str,
        visual_style: str,
        tone: str,
        current_script: VideoScript
    ) -> Scene:
        """
        Regenerate one scene, keeping its id and duration.

        The neighbouring scenes' narration is sent as continuity context.

        Args:
            original_prompt: Prompt the script was generated from
            scene_id: Id of the scene to replace
            visual_style: Visual style name
            tone: Narrative tone
            current_script: Script containing the scene

        Returns:
            Replacement Scene

        Raises:
            SceneNotFoundError: scene_id is not in current_script (no backend call is made)
            SceneRegenerationError: Backend call or response parsing failed
        """
        index = current_script.find_scene(scene_id)
        if index == -1:
            raise SceneNotFoundError(scene_id)

        client = self._ensure_client()

        logger.info(f"Regenerating scene: {scene_id}")

        scenes = current_script.scenes
        current = scenes[index]
        before = scenes[index - 1] if index > 0 else None
        after = scenes[index + 1] if index < len(scenes) - 1 else None

        system_prompt = self.REGENERATION_PROMPT.format(
            original_prompt=original_prompt,
            visual_style=visual_style,
            tone=tone,
            duration=current.duration,
            context_before=f'Previous scene: "{before.narration}"' if before else "This is the first scene",
            current_narration=current.narration,
            context_after=f'Next scene: "{after.narration}"' if after else "This is the last scene",
            scene_id=scene_id
        )

        with get_logfire().span("regenerate_scene", scene_id=scene_id):
            try:
                raw = await self._complete_json(
                    client,
                    system_prompt,
                    "Regenerate this scene with fresh content while maintaining the narrative flow.",
                    self.REGENERATION_PARAMS
                )
                scene = self._merge_regenerated_scene(current, raw)

            except Exception as e:
                logger.error(f"Scene regeneration failed for {scene_id}: {e}")
                raise SceneRegenerationError(scene_id, f"Failed to regenerate scene {scene_id}: {e}") from e

        logger.info(f"Scene regenerated: {scene_id}")
        return scene

    @staticmethod
    def _merge_regenerated_scene(current: Scene, raw: Dict[str, Any]) -> Scene:
        """
        Build the replacement scene from a raw response.

        id and duration always come from the current scene. Older response
        shapes ("description", "emotion") are accepted; presentation fields
        the response leaves out are carried over.
        """
        returned_duration = raw.get("duration")
        if returned_duration is not None and returned_duration != current.duration:
            logger.warning(
                f"Regenerated {current.id} came back with duration {returned_duration}, "
                f"keeping {current.duration}"
            )

        voice = raw.get("voiceInstructions") or raw.get("voice_instructions")
        if not voice:
            voice = current.voice_instructions.model_dump(by_alias=True)
            if raw.get("emotion"):
                voice["emotion"] = raw["emotion"]

        return Scene.model_validate({
            "id": current.id,
            "duration": current.duration,
            "narration": raw.get("narration"),
            "visualDescription": raw.get("visualDescription") or raw.get("description"),
            "voiceInstructions": voice,
            "visualElements": raw.get("visualElements") or current.visual_elements,
            "cameraAngle": raw.get("cameraAngle") or current.camera_angle,
            "lighting": raw.get("lighting") or current.lighting,
        })

    @staticmethod
    def replace_scene(script: VideoScript, scene: Scene) -> VideoScript:
        """Return a copy of script with the scene of the same id swapped in."""
        index = script.find_scene(scene.id)
        if index == -1:
            raise SceneNotFoundError(scene.id)

        scenes = list(script.scenes)
        scenes[index] = scene
        return script.model_copy(update={"scenes": scenes})

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _scenes_json(scenes: Sequence[Scene]) -> str:
        return json.dumps([scene.model_dump(by_alias=True) for scene in scenes])

    def _parse_json_response(self, content: str) -> Dict[str, Any]:
        """
        Parse JSON from LLM response, handling common formatting issues.

        Args:
            content: Raw response content

        Returns:
            Parsed JSON as dict
        """
        content = content.strip()

        # Remove markdown code blocks if present
        if content.startswith("```"):
            lines = content.split("\n")
            start_idx = 1 if lines[0].startswith("```") else 0
            end_idx = len(lines) - 1 if lines[-1].strip() == "```" else len(lines)
            content = "\n".join(lines[start_idx:end_idx])

        try:
            parsed = json.loads(content)
        except json.JSONDecodeError as e:
            logger.error(f"JSON parse error: {e}")
            logger.debug(f"Raw content: {content[:1000]}")
            raise GenerationParseError(f"Failed to parse LLM response as JSON: {e}")

        if not isinstance(parsed, dict):
            raise GenerationParseError("LLM response is not a JSON object")
        return parsed
