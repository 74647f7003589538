"""
Core module - Configuration, errors, data models and the OpenAI client factory
"""

from .config import Config
from .errors import ConfigurationError
from .llm import create_openai_client, is_openai_available

__all__ = ['Config', 'ConfigurationError', 'create_openai_client', 'is_openai_available']
