# =============================================================================
# routes/deploy.py
# =============================================================================
"""
Deploy route - thin wrapper around src/deploy.py.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Request, UploadFile
from starlette.concurrency import run_in_threadpool

from ...config import AppSettings
from ...schemas import DeployErrorResponse, DeployResponse
from ..deploy import require_token, run_deploy, save_upload
from ..errors import DeployError, MissingUploadError


router = APIRouter(prefix="/api", tags=["deploy"])


# =============================================================================
# Dependencies
# =============================================================================

def get_settings(request: Request) -> AppSettings:
    """Settings built by create_app()."""
    return request.app.state.settings


def get_transport(request: Request):
    """Optional httpx transport override (tests, proxies)."""
    return getattr(request.app.state, "netlify_transport", None)


# =============================================================================
# Routes
# =============================================================================

@router.post(
    "/deploy",
    summary="Merge an archive into the app shell and publish it to Netlify",
    response_model=DeployResponse,
    responses={400: {"model": DeployErrorResponse}, 500: {"model": DeployErrorResponse}},
)
async def deploy_archive(
    file: Optional[UploadFile] = File(None, description="Zip archive with the site data"),
    settings: AppSettings = Depends(get_settings),
    transport=Depends(get_transport),
):
    """
    Publish an uploaded zip on top of the prebuilt site.

    Example curl:
    ```
    curl -X POST http://localhost:5001/api/deploy -F "file=@data.zip"
    ```
    """
    require_token(settings)

    if file is None or not file.filename:
        raise MissingUploadError("No archive uploaded (multipart field 'file')")

    try:
        saved = await run_in_threadpool(save_upload, file.file, settings, file.filename)
    except OSError as e:
        raise DeployError(f"Could not store upload: {e}")
    finally:
        await file.close()

    outcome = await run_deploy(settings, saved, transport=transport)
    return DeployResponse(message="Deploy succeeded", url=outcome.url)
