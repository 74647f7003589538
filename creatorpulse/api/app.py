"""
CreatorPulse FastAPI Application.

REST API for the script editor and the performance dashboard.

Features:
- Video script, voiceover and image prompt generation (with fallbacks)
- Single scene regeneration
- Performance card view for a period
- API key authentication
- Rate limiting
- Health check endpoint
"""

# Load environment variables FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

import logging
from datetime import datetime
from typing import AsyncIterator, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.security import APIKeyHeader
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address

from .. import __version__
from ..core.config import Config
from ..core.errors import ConfigurationError, SceneNotFoundError, SceneRegenerationError
from ..core.llm import is_openai_available
from ..core.models import Period
from ..core.observability import setup_logfire, setup_logging
from ..services.dashboard_service import DashboardService
from ..services.presenter import DashboardView, MetricsPresenter, PresenterState
from ..services.script_service import ScriptGenerationService
from .models import (
    ErrorResponse,
    GenerateScriptRequest,
    HealthResponse,
    ImagePromptRequest,
    ImagePromptResponse,
    RegenerateSceneRequest,
    SceneResponse,
    ScriptResponse,
    VoiceoverRequest,
    VoiceoverResponse,
)

# ============================================================================
# Logging Configuration
# ============================================================================

setup_logging(logging.INFO)
logger = logging.getLogger(__name__)

# ============================================================================
# FastAPI Application Setup
# ============================================================================

app = FastAPI(
    title="CreatorPulse API",
    description="Script generation and performance dashboard API",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json"
)

# ============================================================================
# CORS Configuration
# ============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================================
# Rate Limiting
# ============================================================================

limiter = Limiter(key_func=get_remote_address)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# ============================================================================
# API Key Authentication
# ============================================================================

API_KEY_HEADER = APIKeyHeader(name="X-API-Key", auto_error=False)


async def verify_api_key(api_key: Optional[str] = Depends(API_KEY_HEADER)):
    """
    Verify API key from request header.

    Checks against CREATORPULSE_API_KEY. If not set, allows all requests
    (development mode).

    Args:
        api_key: API key from X-API-Key header

    Raises:
        HTTPException: If API key is invalid or missing
    """
    expected_key = Config.CREATORPULSE_API_KEY

    # Development mode - no API key required
    if not expected_key:
        return True

    if not api_key:
        logger.warning("API key missing from request")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API key required. Provide via X-API-Key header."
        )

    if api_key != expected_key:
        logger.warning("Invalid API key attempt")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid API key"
        )

    return True


# ============================================================================
# Service Dependencies
# ============================================================================

def get_script_service() -> ScriptGenerationService:
    """Script service for one request (the OpenAI client is built on first use)."""
    return ScriptGenerationService()


async def get_dashboard_service() -> AsyncIterator[DashboardService]:
    """Dashboard service for one request, closed afterwards."""
    service = DashboardService()
    try:
        yield service
    finally:
        await service.close()


ERROR_RESPONSES = {
    401: {"model": ErrorResponse, "description": "Unauthorized - Missing API key"},
    403: {"model": ErrorResponse, "description": "Forbidden - Invalid API key"},
    429: {"model": ErrorResponse, "description": "Too many requests"},
    503: {"model": ErrorResponse, "description": "OpenAI is not configured"},
}


# ============================================================================
# Health Check Endpoint
# ============================================================================

@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["System"],
    summary="Health check endpoint"
)
async def health_check():
    """
    Check API health and configuration.

    Reports degraded when no OpenAI key is configured: script endpoints
    then answer 503.
    """
    services = {
        "openai": "configured" if is_openai_available() else "not_configured",
        "dashboard_api": Config.DASHBOARD_API_BASE_URL,
    }

    overall_status = "healthy" if services["openai"] == "configured" else "degraded"

    return HealthResponse(
        status=overall_status,
        version=__version__,
        timestamp=datetime.now(),
        services=services
    )


# ============================================================================
# Script Endpoints
# ============================================================================

@app.post(
    "/api/scripts/generate",
    response_model=ScriptResponse,
    responses=ERROR_RESPONSES,
    tags=["Scripts"],
    summary="Generate a complete video script"
)
@limiter.limit(Config.SCRIPT_RATE_LIMIT)
async def generate_script(
    request: Request,
    body: GenerateScriptRequest,
    service: ScriptGenerationService = Depends(get_script_service),
    authenticated: bool = Depends(verify_api_key)
):
    """
    Generate a video script split into timed scenes.

    When the model call fails the response still carries a usable script
    with ``source: "fallback"`` and the failure in ``fallback_reason``.
    """
    logger.info(f"Script generation requested: {body.duration}s, style={body.visual_style}")

    result = await service.generate_video_script(
        prompt=body.prompt,
        duration=body.duration,
        visual_style=body.visual_style,
        tone=body.tone,
        voice_gender=body.voice_gender,
        language=body.language,
        accent=body.accent
    )

    return ScriptResponse(data=result.data, source=result.source, fallback_reason=result.fallback_reason)


@app.post(
    "/api/scripts/voiceover",
    response_model=VoiceoverResponse,
    responses=ERROR_RESPONSES,
    tags=["Scripts"],
    summary="Optimize scene narration for text-to-speech"
)
@limiter.limit(Config.SCRIPT_RATE_LIMIT)
async def optimize_voiceover(
    request: Request,
    body: VoiceoverRequest,
    service: ScriptGenerationService = Depends(get_script_service),
    authenticated: bool = Depends(verify_api_key)
):
    """Return voiceover-ready narration for every scene."""
    result = await service.generate_voiceover_text(
        scenes=body.scenes,
        voice_profile=body.voice_profile,
        total_duration=body.total_duration
    )

    return VoiceoverResponse(data=result.data, source=result.source, fallback_reason=result.fallback_reason)


@app.post(
    "/api/scripts/image-prompts",
    response_model=ImagePromptResponse,
    responses=ERROR_RESPONSES,
    tags=["Scripts"],
    summary="Generate image prompts for every scene"
)
@limiter.limit(Config.SCRIPT_RATE_LIMIT)
async def generate_image_prompts(
    request: Request,
    body: ImagePromptRequest,
    service: ScriptGenerationService = Depends(get_script_service),
    authenticated: bool = Depends(verify_api_key)
):
    """Return positive/negative image prompts for every scene."""
    result = await service.generate_scene_image_prompts(
        scenes=body.scenes,
        visual_style=body.visual_style,
        overall_theme=body.overall_theme
    )

    return ImagePromptResponse(data=result.data, source=result.source, fallback_reason=result.fallback_reason)


@app.post(
    "/api/scripts/regenerate-scene",
    response_model=SceneResponse,
    responses={
        **ERROR_RESPONSES,
        404: {"model": ErrorResponse, "description": "Scene not found in script"},
        502: {"model": ErrorResponse, "description": "Scene regeneration failed"},
    },
    tags=["Scripts"],
    summary="Regenerate a single scene"
)
@limiter.limit(Config.SCRIPT_RATE_LIMIT)
async def regenerate_scene(
    request: Request,
    body: RegenerateSceneRequest,
    service: ScriptGenerationService = Depends(get_script_service),
    authenticated: bool = Depends(verify_api_key)
):
    """
    Regenerate one scene of a script, keeping its id and duration.

    There is no fallback: an unknown scene is 404 and a failed model call 502.
    """
    scene = await service.regenerate_scene(
        original_prompt=body.original_prompt,
        scene_id=body.scene_id,
        visual_style=body.visual_style,
        tone=body.tone,
        current_script=body.current_script
    )

    return SceneResponse(data=scene)


# ============================================================================
# Dashboard Endpoints
# ============================================================================

@app.get(
    "/api/dashboard/performance",
    response_model=DashboardView,
    responses=ERROR_RESPONSES,
    tags=["Dashboard"],
    summary="Performance card for a period"
)
@limiter.limit(Config.DASHBOARD_RATE_LIMIT)
async def dashboard_performance(
    request: Request,
    period: Period = Query(Period.MONTH, description="day, week or month"),
    service: DashboardService = Depends(get_dashboard_service),
    authenticated: bool = Depends(verify_api_key)
):
    """
    Fetch the dashboard queries once and return the performance card view.

    Failed queries are listed under ``errors``; the view is built from
    whatever did resolve.
    """
    snapshot = await service.fetch_snapshot(period)
    state = PresenterState(selected_period=period)
    return MetricsPresenter.build_view(state, snapshot)


# ============================================================================
# Error Handlers
# ============================================================================

def _error_response(status_code: int, error: str, detail: Optional[str] = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(
            error=error,
            detail=detail,
            timestamp=datetime.now().isoformat()
        ).model_dump()
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    """Handle HTTP exceptions with consistent error format."""
    return _error_response(exc.status_code, str(exc.detail), str(exc))


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    """Missing configuration is a server-side problem, not a bad request."""
    logger.error(f"Configuration error: {exc}")
    return _error_response(status.HTTP_503_SERVICE_UNAVAILABLE, "Service not configured", str(exc))


@app.exception_handler(SceneNotFoundError)
async def scene_not_found_handler(request: Request, exc: SceneNotFoundError):
    return _error_response(status.HTTP_404_NOT_FOUND, "Scene not found", str(exc))


@app.exception_handler(SceneRegenerationError)
async def scene_regeneration_error_handler(request: Request, exc: SceneRegenerationError):
    return _error_response(status.HTTP_502_BAD_GATEWAY, "Scene regeneration failed", str(exc))


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return _error_response(500, "Internal server error", str(exc))


# ============================================================================
# Startup/Shutdown Events
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Log startup information."""
    setup_logfire(service_name="creatorpulse-api")
    logger.info("=" * 60)
    logger.info("CreatorPulse API Starting...")
    logger.info(f"API Version: {__version__}")
    logger.info("Docs available at: /docs")
    logger.info(f"Auth mode: {'Production (API key required)' if Config.CREATORPULSE_API_KEY else 'Development (no auth)'}")
    logger.info(f"OpenAI: {'configured' if is_openai_available() else 'NOT configured'}")
    logger.info("=" * 60)


@app.on_event("shutdown")
async def shutdown_event():
    """Log shutdown information."""
    logger.info("CreatorPulse API Shutting down...")
