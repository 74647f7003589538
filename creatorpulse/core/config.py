"""
Configuration management for CreatorPulse
"""

import os
from typing import Optional
from dotenv import load_dotenv

from .errors import ConfigurationError

# Load environment variables
load_dotenv()


class Config:
    """Application configuration"""

    # OpenAI
    OPENAI_API_KEY: str = os.getenv('OPENAI_API_KEY', '')
    OPENAI_BASE_URL: str = os.getenv('OPENAI_BASE_URL', '')

    # Internal analytics API (dashboard data source)
    DASHBOARD_API_BASE_URL: str = os.getenv('DASHBOARD_API_BASE_URL', 'http://localhost:5000')
    DASHBOARD_API_TIMEOUT: float = float(os.getenv('DASHBOARD_API_TIMEOUT', '10'))

    # Polling cadence (seconds)
    DASHBOARD_POLL_SECONDS: float = float(os.getenv('DASHBOARD_POLL_SECONDS', '2'))
    HISTORICAL_POLL_SECONDS: float = float(os.getenv('HISTORICAL_POLL_SECONDS', '5'))

    # How long a period insight stays on screen after switching tabs
    INSIGHT_DISPLAY_SECONDS: float = float(os.getenv('INSIGHT_DISPLAY_SECONDS', '8'))

    # HTTP API
    CREATORPULSE_API_KEY: str = os.getenv('CREATORPULSE_API_KEY', '')
    CORS_ORIGINS: str = os.getenv('CORS_ORIGINS', '*')
    SCRIPT_RATE_LIMIT: str = os.getenv('SCRIPT_RATE_LIMIT', '20/minute')
    DASHBOARD_RATE_LIMIT: str = os.getenv('DASHBOARD_RATE_LIMIT', '60/minute')

    @classmethod
    def validate(cls) -> bool:
        """Validate required configuration"""
        required = {
            'OPENAI_API_KEY': cls.OPENAI_API_KEY,
        }

        missing = [k for k, v in required.items() if not v]

        if missing:
            raise ConfigurationError(
                f"Missing required configuration: {', '.join(missing)}",
                missing=missing,
            )

        return True

    @classmethod
    def get(cls, key: str, default: Optional[str] = None) -> Optional[str]:
        """Get configuration value"""
        return getattr(cls, key, default)

    # ========================================================================
    # Model Configuration
    # ========================================================================

    DEFAULT_MODEL = "gpt-4o"

    @classmethod
    def get_model(cls, key: str) -> str:
        """
        Get the configured LLM model for a specific component.

        Resolution Order:
        1. Environment Variable: {KEY}_MODEL (e.g. SCRIPT_MODEL)
        2. Environment Variable: OPENAI_MODEL
        3. Config.DEFAULT_MODEL

        Args:
            key: component name (e.g., 'script', 'voiceover'), case-insensitive

        Returns:
            Model string identifier (e.g., 'gpt-4o')
        """
        env_model = os.getenv(f"{key.upper()}_MODEL")
        if env_model:
            return env_model

        return os.getenv("OPENAI_MODEL") or cls.DEFAULT_MODEL
