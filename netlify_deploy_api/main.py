"""
Netlify Deploy API

Publishes an uploaded zip, merged into a prebuilt static app shell, as a new
Netlify site and returns its live URL.

Endpoints:
- POST /api/deploy   multipart upload (field 'file')
- GET  /api          service info
- GET  /health       health check
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import SERVICE_NAME, SERVICE_VERSION, AppSettings, get_app_settings
from .schemas import DeployErrorResponse, ServiceInfo
from .src.errors import DeployError, MissingUploadError
from .src.logs import setup_logging
from .src.routes import deploy_router


logger = logging.getLogger(__name__)


# =============================================================================
# Lifecycle
# =============================================================================

def log_startup(settings: AppSettings):
    """Report token state and archive locations."""
    logger.info(f"NETLIFY_TOKEN: {settings.masked_token()}")
    if not settings.netlify_token:
        logger.error("Set NETLIFY_TOKEN before deploying")
    if not settings.base_archive_path.exists():
        logger.warning(f"Base archive not found at {settings.base_archive_path}")
    logger.info(f"{SERVICE_NAME} started")


# =============================================================================
# Error handling
# =============================================================================

async def deploy_error_handler(request: Request, exc: DeployError) -> JSONResponse:
    """Render any DeployError as {message, error, detail}."""
    logger.error(f"Error on {request.url.path}: {exc.message}")
    body = DeployErrorResponse(message="Deploy failed", error=exc.message, detail=exc.detail)
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Malformed form data gets the same body shape as every other failure.

    A form submitted with no file chosen sends `file` as an empty text part,
    which is reported as a missing upload.
    """
    errors = jsonable_encoder(exc.errors())
    if any(err.get("loc", [])[-1:] == ["file"] for err in errors):
        error = MissingUploadError("No archive uploaded (multipart field 'file')", detail=errors)
    else:
        error = DeployError("Invalid request", detail=errors, status_code=400)
    return await deploy_error_handler(request, error)


# =============================================================================
# Create App
# =============================================================================

def create_app(
    settings: Optional[AppSettings] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    """
    Application factory.

    Args:
        settings: defaults to get_app_settings()
        transport: httpx transport for Netlify calls (tests)
    """
    settings = settings or get_app_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(settings.log_level, tokens=[settings.netlify_token])
        settings.ensure_dirs()
        log_startup(settings)
        yield
        logger.info(f"{SERVICE_NAME} shutting down")

    app = FastAPI(
        title=SERVICE_NAME,
        version=SERVICE_VERSION,
        description=__doc__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.netlify_transport = transport

    app.add_exception_handler(DeployError, deploy_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.include_router(deploy_router)

    # API info endpoint
    @app.get("/api", response_model=ServiceInfo)
    async def api_info():
        return ServiceInfo(service=SERVICE_NAME, version=SERVICE_VERSION)

    # Health check endpoint
    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring."""
        return {"status": "healthy", "service": SERVICE_NAME}

    return app
