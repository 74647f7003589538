"""
Pydantic models for dashboard data and generated video scripts

Wire payloads (internal analytics API, OpenAI JSON responses, HTTP API)
use camelCase keys; attributes are snake_case. Models accept either form
on input and dump camelCase with ``model_dump(by_alias=True)``.
"""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Generic, List, Optional, TypeVar

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model with camelCase aliases on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================================
# Enums
# ============================================================================

class Period(str, Enum):
    """Dashboard comparison period"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class ContentRating(str, Enum):
    """Content score rating, lowest to highest (NO_DATA sits outside the scale)"""
    POOR = "Poor"
    FAIR = "Fair"
    GOOD = "Good"
    VERY_GOOD = "Very Good"
    EXCELLENT = "Excellent"
    EXCEPTIONAL = "Exceptional"
    NO_DATA = "No Data"


# ============================================================================
# Dashboard Models
# ============================================================================

def _none_to_zero(value: Any) -> Any:
    return 0 if value is None else value


class AccountSnapshot(CamelModel):
    """One connected social platform as returned by /api/social-accounts"""
    id: Optional[str] = None
    platform: str = "facebook"
    username: Optional[str] = None
    followers_count: int = Field(
        default=0,
        validation_alias=AliasChoices("followersCount", "followers", "followers_count"),
    )
    avg_engagement: float = Field(default=0.0, description="Average engagement rate (%)")
    total_reach: int = 0
    media_count: int = Field(
        default=0,
        validation_alias=AliasChoices("mediaCount", "posts", "media_count"),
    )
    is_connected: bool = False
    access_token: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _fall_back_to_legacy_counts(cls, data):
        """followers / posts stand in when followersCount / mediaCount are 0 or missing."""
        if isinstance(data, dict):
            for primary, name, legacy in (
                ("followersCount", "followers_count", "followers"),
                ("mediaCount", "media_count", "posts"),
            ):
                if not data.get(primary) and not data.get(name) and data.get(legacy):
                    data = {**data, primary: data[legacy]}
        return data

    @field_validator("followers_count", "avg_engagement", "total_reach", "media_count", mode="before")
    @classmethod
    def _coerce_missing(cls, v):
        return _none_to_zero(v)

    @field_validator("is_connected", mode="before")
    @classmethod
    def _coerce_connected(cls, v):
        return bool(v)

    @property
    def is_active_connection(self) -> bool:
        """Connected, has an audience, or holds a token"""
        return self.is_connected or self.followers_count > 0 or bool(self.access_token)


class ConnectedPlatform(CamelModel):
    """Presentation row for a connected platform"""
    name: str
    logo: str
    platform: str
    username: Optional[str] = None
    followers: int = 0
    engagement: float = 0.0
    engagement_display: str = "0%"
    reach: int = 0
    posts: int = 0


class DashboardAnalytics(CamelModel):
    """Live aggregate totals from /api/dashboard/analytics"""
    total_followers: Optional[int] = None
    total_reach: Optional[int] = None
    total_posts: Optional[int] = None


class ContentScoreSnapshot(CamelModel):
    """Content score as stored on a historical record"""
    score: Optional[float] = None


class HistoricalMetrics(CamelModel):
    """Nested metrics block of a historical record"""
    posts: Optional[float] = None
    content_score: Optional[ContentScoreSnapshot] = None


class HistoricalRecord(CamelModel):
    """One past snapshot of aggregate metrics"""
    date: datetime
    followers: float = 0
    engagement: float = 0
    reach: float = 0
    metrics: HistoricalMetrics = Field(default_factory=HistoricalMetrics)

    @field_validator("followers", "engagement", "reach", mode="before")
    @classmethod
    def _coerce_missing(cls, v):
        return _none_to_zero(v)

    @field_validator("metrics", mode="before")
    @classmethod
    def _coerce_metrics(cls, v):
        return v if v is not None else {}

    @field_validator("date")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        # Mixed naive/aware dates must still sort
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v


class CurrentMetrics(CamelModel):
    """Current aggregate values compared against history"""
    followers: int = 0
    engagement: float = 0.0
    reach: int = 0
    posts: int = 0


class GrowthMetric(CamelModel):
    """Signed percentage change against a historical baseline"""
    display_value: str
    is_positive: bool
    available: bool = True


class GrowthReport(CamelModel):
    """Growth metric per tracked dimension"""
    followers: GrowthMetric
    engagement: GrowthMetric
    reach: GrowthMetric
    posts: GrowthMetric
    content_score: GrowthMetric


class ContentScore(CamelModel):
    """Composite 0-10 content quality index"""
    score: float = Field(..., ge=0, le=10)
    rating: ContentRating


class PeriodData(CamelModel):
    """Current totals shown for the selected period"""
    reach: int = 0
    posts: int = 0
    engagement: float = 0.0
    follower_gains: int = 0
    follower_total: int = 0


# ============================================================================
# Script Models
# ============================================================================

class VoiceProfile(CamelModel):
    """Narrator voice settings for the whole video"""
    gender: str = "Female"
    language: str = "English"
    accent: str = "American"
    tone: str = "professional"
    pace: str = "medium"
    emphasis: str = "natural"


class VoiceInstructions(CamelModel):
    """Per-scene delivery direction"""
    emotion: str = "natural"
    pace: str = "medium"
    emphasis: str = ""
    pause: str = "natural"


class Scene(CamelModel):
    """One timed segment of a video script"""
    id: str = Field(..., min_length=1)
    duration: int = Field(..., ge=0, description="Scene length in seconds")
    narration: str
    visual_description: str
    voice_instructions: VoiceInstructions = Field(default_factory=VoiceInstructions)
    visual_elements: List[str] = Field(default_factory=list)
    camera_angle: str = "medium"
    lighting: str = "natural"

    @field_validator("duration", mode="before")
    @classmethod
    def _round_duration(cls, v):
        if isinstance(v, float):
            return int(round(v))
        return v


class MotionEngine(CamelModel):
    """Suggested motion engine for animating the scene images"""
    recommendation: str
    reason: str = ""


class VideoScript(CamelModel):
    """Complete generated video script"""
    title: str
    description: str = ""
    total_duration: int
    voice_profile: VoiceProfile = Field(default_factory=VoiceProfile)
    scenes: List[Scene] = Field(..., min_length=1)
    motion_engine: Optional[MotionEngine] = None

    @model_validator(mode="after")
    def _unique_scene_ids(self):
        ids = [scene.id for scene in self.scenes]
        if len(ids) != len(set(ids)):
            raise ValueError("Scene ids must be unique within a script")
        return self

    def find_scene(self, scene_id: str) -> int:
        """Index of scene_id in scenes, or -1"""
        for index, scene in enumerate(self.scenes):
            if scene.id == scene_id:
                return index
        return -1


class OptimizedScene(CamelModel):
    """Voiceover-ready narration for one scene"""
    id: str
    optimized_narration: str
    pronunciation_guide: str = ""
    timing_notes: str = ""
    emotional_cues: str = ""


class VoiceSettings(BaseModel):
    """Text-to-speech voice settings (snake_case on the wire)"""
    stability: float = 0.75
    similarity_boost: float = 0.8
    style: float = 0.6


class VoiceoverPlan(CamelModel):
    """Optimized narration for every scene plus shared voice settings"""
    optimized_scenes: List[OptimizedScene]
    total_estimated_duration: float
    voice_settings: VoiceSettings = Field(default_factory=VoiceSettings)


class ImageTechnicalSettings(BaseModel):
    """Image generator parameters (snake_case on the wire)"""
    width: int = 1024
    height: int = 1024
    steps: int = 30
    guidance_scale: float = 7.5


class EnhancedScenePrompt(CamelModel):
    """Positive/negative image prompt pair for one scene"""
    id: str
    positive_prompt: str
    negative_prompt: str = ""
    style_notes: str = ""
    technical_settings: ImageTechnicalSettings = Field(default_factory=ImageTechnicalSettings)


class ImagePromptSet(CamelModel):
    """Image prompts for every scene plus a shared style guide"""
    enhanced_scenes: List[EnhancedScenePrompt]
    overall_style_guide: str = ""


# ============================================================================
# Generation Outcome
# ============================================================================

T = TypeVar("T")


@dataclass
class GenerationResult(Generic[T]):
    """
    Outcome of a generation call.

    ``source`` is "remote" when the backend produced the data and
    "fallback" when it was synthesized locally after a failure.
    """
    data: T
    source: str = "remote"
    fallback_reason: Optional[str] = None

    @classmethod
    def remote(cls, data: T) -> "GenerationResult[T]":
        return cls(data=data, source="remote")

    @classmethod
    def fallback(cls, data: T, reason: str) -> "GenerationResult[T]":
        return cls(data=data, source="fallback", fallback_reason=reason)

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"
