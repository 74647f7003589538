"""
Logfire observability configuration for CreatorPulse.

Provides tracing and monitoring for:
- Script generation calls (OpenAI instrumentation)
- Dashboard data fetches (httpx instrumentation)
- Model validation

Usage:
    # At app startup (API, CLI or Streamlit page)
    from creatorpulse.core.observability import setup_logfire
    setup_logfire()

    # In services
    from creatorpulse.core.observability import get_logfire

    with get_logfire().span("generate_video_script", duration=duration):
        ...

Environment Variables:
    LOGFIRE_TOKEN: Your Logfire write token (required for production)
    LOGFIRE_PROJECT_NAME: Project name in Logfire dashboard
    LOGFIRE_ENVIRONMENT: Environment name (development, staging, production)
"""

import os
import logging
from typing import Optional

import logfire

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

_logfire_configured = False


def setup_logging(level: int = logging.INFO) -> None:
    """Configure stdlib logging with the project-wide format."""
    logging.basicConfig(level=level, format=LOG_FORMAT)


def setup_logfire(
    project_name: Optional[str] = None,
    environment: Optional[str] = None,
    service_name: str = "creatorpulse"
) -> bool:
    """
    Configure Logfire for observability.

    Args:
        project_name: Logfire project name (or LOGFIRE_PROJECT_NAME env var)
        environment: Environment name (or LOGFIRE_ENVIRONMENT env var)
        service_name: Service name for tracing

    Returns:
        True if Logfire was configured, False if skipped (no token)
    """
    global _logfire_configured

    if _logfire_configured:
        logger.debug("Logfire already configured")
        return True

    token = os.environ.get("LOGFIRE_TOKEN")
    if not token:
        logger.info("LOGFIRE_TOKEN not set, skipping Logfire configuration")
        return False

    project = project_name or os.environ.get("LOGFIRE_PROJECT_NAME", "creatorpulse")
    env = environment or os.environ.get("LOGFIRE_ENVIRONMENT", "development")

    try:
        logfire.configure(
            token=token,
            project_name=project,
            service_name=service_name,
            environment=env,
            send_to_logfire=True,
        )

        logfire.instrument_pydantic()
        logfire.instrument_openai()
        logfire.instrument_httpx()

        _logfire_configured = True
        logger.info(f"Logfire configured: project={project}, environment={env}")
        return True

    except Exception as e:
        logger.error(f"Failed to configure Logfire: {e}")
        return False


def get_logfire():
    """
    Get the logfire module if configured, otherwise a no-op stand-in.

    Usage:
        lf = get_logfire()
        with lf.span("operation"):
            lf.info("message")
    """
    if _logfire_configured:
        return logfire
    return _LogfireStub()


class _LogfireStub:
    """No-op stand-in used while Logfire is not configured."""

    def span(self, *args, **kwargs):
        return _NoOpContext()

    def __getattr__(self, name):
        return lambda *args, **kwargs: None


class _NoOpContext:
    """No-op context manager."""

    def __enter__(self):
        return self

    def __exit__(self, *args):
        pass
