"""
OpenAI client factory.

Clients are built explicitly and handed to the services that need them;
nothing here caches a process-wide instance.
"""

from typing import Optional

from openai import AsyncOpenAI

from .config import Config
from .errors import ConfigurationError


def create_openai_client(api_key: Optional[str] = None, base_url: Optional[str] = None) -> AsyncOpenAI:
    """
    Build an async OpenAI client.

    Args:
        api_key: API key (defaults to Config.OPENAI_API_KEY)
        base_url: Optional OpenAI-compatible endpoint (defaults to Config.OPENAI_BASE_URL)

    Returns:
        AsyncOpenAI instance

    Raises:
        ConfigurationError: If no API key is available
    """
    key = api_key or Config.OPENAI_API_KEY
    if not key:
        raise ConfigurationError(
            "OpenAI API key is not configured. Please set OPENAI_API_KEY environment variable.",
            missing=["OPENAI_API_KEY"],
        )

    return AsyncOpenAI(api_key=key, base_url=base_url or Config.OPENAI_BASE_URL or None)


def is_openai_available() -> bool:
    """Check whether an OpenAI API key is configured."""
    return bool(Config.OPENAI_API_KEY)
