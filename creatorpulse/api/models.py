"""
API Request and Response Models.

Pydantic models for FastAPI request/response validation and
automatic OpenAPI documentation generation.

Request bodies accept camelCase or snake_case keys. Generated payloads
under ``data`` are returned camelCase; the envelope fields stay snake_case.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ..core.models import (
    CamelModel,
    ImagePromptSet,
    Scene,
    VideoScript,
    VoiceoverPlan,
    VoiceProfile,
)


# ============================================================================
# Script Generation Requests
# ============================================================================

class GenerateScriptRequest(CamelModel):
    """Request model for full script generation."""
    prompt: str = Field(
        ...,
        min_length=1,
        description="What the video is about",
        examples=["Morning routines of successful founders"]
    )
    duration: int = Field(
        default=30,
        ge=1,
        le=600,
        description="Total video duration in seconds"
    )
    visual_style: str = Field(default="cinematic", description="Visual style for every scene")
    tone: str = Field(default="inspiring", description="Narrative tone")
    voice_gender: str = Field(default="Female", description="Narrator voice gender")
    language: str = Field(default="English", description="Narration language")
    accent: str = Field(default="American", description="Narrator accent")


class VoiceoverRequest(CamelModel):
    """Request model for voiceover optimization."""
    scenes: List[Scene] = Field(..., min_length=1, description="Scenes to optimize")
    voice_profile: VoiceProfile = Field(
        default_factory=VoiceProfile,
        description="Narrator voice profile"
    )
    total_duration: float = Field(..., gt=0, description="Target total duration in seconds")


class ImagePromptRequest(CamelModel):
    """Request model for scene image prompt generation."""
    scenes: List[Scene] = Field(..., min_length=1, description="Scenes to illustrate")
    visual_style: str = Field(default="cinematic", description="Visual style name")
    overall_theme: str = Field(default="", description="Theme shared by all scenes")


class RegenerateSceneRequest(CamelModel):
    """Request model for regenerating a single scene."""
    original_prompt: str = Field(..., min_length=1, description="Prompt the script was generated from")
    scene_id: str = Field(..., min_length=1, description="Id of the scene to replace")
    visual_style: str = Field(default="cinematic", description="Visual style name")
    tone: str = Field(default="inspiring", description="Narrative tone")
    current_script: VideoScript = Field(..., description="Script containing the scene")


# ============================================================================
# Script Generation Responses
# ============================================================================

class ScriptResponse(BaseModel):
    """Generated script plus where it came from."""
    data: VideoScript
    source: str = Field(..., description="'remote' or 'fallback'")
    fallback_reason: Optional[str] = Field(None, description="Why the fallback was used")


class VoiceoverResponse(BaseModel):
    """Voiceover plan plus where it came from."""
    data: VoiceoverPlan
    source: str = Field(..., description="'remote' or 'fallback'")
    fallback_reason: Optional[str] = Field(None, description="Why the fallback was used")


class ImagePromptResponse(BaseModel):
    """Image prompts plus where they came from."""
    data: ImagePromptSet
    source: str = Field(..., description="'remote' or 'fallback'")
    fallback_reason: Optional[str] = Field(None, description="Why the fallback was used")


class SceneResponse(BaseModel):
    """Regenerated scene."""
    data: Scene


# ============================================================================
# System Models
# ============================================================================

class HealthResponse(BaseModel):
    """Health check response."""
    status: str = Field(..., description="Overall status: healthy or degraded")
    version: str = Field(..., description="API version")
    timestamp: datetime = Field(default_factory=datetime.now)
    services: Dict[str, str] = Field(
        default_factory=dict,
        description="Status of dependent services"
    )


class ErrorResponse(BaseModel):
    """Error response."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
    timestamp: str = Field(..., description="Error timestamp (ISO format)")
