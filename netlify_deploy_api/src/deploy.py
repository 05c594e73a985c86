"""
Deploy orchestration: merge the uploaded archive into the app shell and
publish the result to a brand new Netlify site.

Steps (all sequential, one request):
1. preflight   - token configured, upload saved, base archive present
2. merge       - base + _redirects + upload -> temp zip
3. publish     - create site, upload deploy
4. cleanup     - temp zip and saved upload, success or not
"""

import logging
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

import httpx
from starlette.concurrency import run_in_threadpool

from ..config import AppSettings
from ..schemas import NetlifyDeploy, NetlifySite
from .archive import MergeReport, merge_archives
from .errors import BaseArchiveMissingError, ConfigurationError, DeployError
from .naming import create_site_name, merged_archive_path, upload_path
from .netlify import NetlifyClient


logger = logging.getLogger(__name__)


@dataclass
class PublishResult:
    site: NetlifySite
    deploy: NetlifyDeploy

    @property
    def live_url(self) -> Optional[str]:
        """Deploy URL first, site URL as fallback."""
        return self.deploy.ssl_url or self.site.ssl_url


@dataclass
class DeployOutcome:
    site_name: str
    result: PublishResult
    merge: MergeReport

    @property
    def url(self) -> Optional[str]:
        return self.result.live_url


# =============================================================================
# Preflight
# =============================================================================

def require_token(settings: AppSettings) -> str:
    if not settings.netlify_token:
        raise ConfigurationError("NETLIFY_TOKEN is not configured on the server")
    return settings.netlify_token


def save_upload(fileobj: BinaryIO, settings: AppSettings, filename: str = None) -> Path:
    """Copy an uploaded file stream to a unique path under upload_dir."""
    dest = upload_path(settings.upload_dir, filename)
    dest.parent.mkdir(parents=True, exist_ok=True)
    try:
        with open(dest, "wb") as out:
            shutil.copyfileobj(fileobj, out)
    except BaseException:
        cleanup(dest)
        raise
    logger.info(f"Upload saved: {dest}")
    return dest


def cleanup(*paths):
    """Delete files, never raising."""
    for path in paths:
        if path is None:
            continue
        try:
            Path(path).unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.warning(f"Could not delete {path}: {e}")


# =============================================================================
# Publish
# =============================================================================

async def publish(
    settings: AppSettings,
    archive_path,
    site_name: str,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> PublishResult:
    """Create a site, then upload the archive as its first deploy."""
    token = require_token(settings)

    logger.info("=== DEPLOY START ===")
    logger.info(f"Site name: {site_name}")
    logger.info(f"Zip path: {archive_path}")

    async with NetlifyClient(
        api_token=token,
        api_url=settings.netlify_api_url,
        timeout=settings.netlify_timeout,
        transport=transport,
    ) as client:
        logger.info("[1/3] Creating site on Netlify...")
        site = await client.create_site(site_name)

        logger.info("[2/3] Uploading zip...")
        deploy = await client.upload_deploy(site.id, archive_path)

    logger.info("[3/3] Deploy finished")
    return PublishResult(site=site, deploy=deploy)


async def run_deploy(
    settings: AppSettings,
    uploaded_path,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> DeployOutcome:
    """
    Merge and publish an already-saved upload.

    The saved upload and the temp archive are removed whatever happens.

    Raises:
        DeployError: any failure, with status_code and optional detail
    """
    merged_path = None
    try:
        require_token(settings)

        base_path = Path(settings.base_archive_path)
        if not base_path.is_file():
            raise BaseArchiveMissingError(f"Base archive not found on server: {base_path}")

        merged_path = merged_archive_path(settings.work_dir)
        report = await run_in_threadpool(merge_archives, base_path, uploaded_path, merged_path)

        site_name = create_site_name(settings.site_name_prefix)
        result = await publish(settings, merged_path, site_name, transport=transport)

        logger.info(f"Live URL: {result.live_url}")
        return DeployOutcome(site_name=site_name, result=result, merge=report)

    except DeployError:
        raise
    except Exception as e:
        logger.exception("Unexpected deploy failure")
        raise DeployError(str(e) or e.__class__.__name__)
    finally:
        cleanup(merged_path, uploaded_path)
