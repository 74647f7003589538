"""
Exception types shared across CreatorPulse.

Usage:
    from creatorpulse.core.errors import SceneNotFoundError

    try:
        scene = await service.regenerate_scene(...)
    except SceneNotFoundError as e:
        print(f"Unknown scene: {e.scene_id}")
"""

from typing import List, Optional


class ConfigurationError(RuntimeError):
    """Raised when required configuration (e.g. OPENAI_API_KEY) is missing."""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        self.missing = missing or []
        super().__init__(message)


class GenerationError(Exception):
    """Base class for failures talking to the text-generation backend."""


class GenerationParseError(GenerationError, ValueError):
    """Backend answered, but not with JSON in the expected shape."""


class SceneRegenerationError(GenerationError):
    """Raised when a single scene could not be regenerated."""

    def __init__(self, scene_id: str, message: str):
        self.scene_id = scene_id
        super().__init__(message)


class SceneNotFoundError(LookupError):
    """Raised when a scene id is not part of the script being edited."""

    def __init__(self, scene_id: str):
        self.scene_id = scene_id
        super().__init__(f"Scene not found: {scene_id}")
