# =============================================================================
# src/netlify.py
# =============================================================================
"""
Netlify Client - the two REST calls a deploy needs.

Flow:
1. POST /sites                      -> NetlifySite (needs `id`)
2. POST /sites/{site_id}/deploys    -> NetlifyDeploy (needs `id`)
   body: the zip itself, Content-Type: application/zip

Every response goes through the same checks, in order:
- transport failure      -> ProviderConnectionError
- non-2xx status         -> ProviderStatusError (detail = Netlify's body)
- body not a JSON object -> MalformedResponseError
- required field missing -> MissingFieldError
- field of the wrong type -> MalformedResponseError

No retries.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any, AsyncIterator, Dict, Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError
from starlette.concurrency import run_in_threadpool

from ..config import NETLIFY_API_URL
from ..schemas import NetlifyDeploy, NetlifySite
from .errors import (
    MalformedResponseError,
    MissingFieldError,
    ProviderConnectionError,
    ProviderStatusError,
)


logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024  # 64KB
BODY_EXCERPT = 500

M = TypeVar("M", bound=BaseModel)


async def iter_file(path, chunk_size: int = CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Yield a file's bytes in chunks (request body stream)."""
    with open(path, "rb") as f:
        while True:
            chunk = await run_in_threadpool(f.read, chunk_size)
            if not chunk:
                break
            yield chunk


def _body_detail(text: str) -> Any:
    """Netlify error bodies are usually JSON; fall back to the raw text."""
    try:
        return json.loads(text)
    except ValueError:
        return text


def parse_response(response: httpx.Response, model: Type[M], what: str) -> M:
    """Check status, decode JSON and validate into `model`."""
    text = response.text

    if not response.is_success:
        detail = _body_detail(text)
        logger.error(f"Netlify {what} failed ({response.status_code}): {text[:BODY_EXCERPT]}")
        raise ProviderStatusError(
            f"Netlify API error {response.status_code} on {what}",
            status=response.status_code,
            detail=detail,
        )

    try:
        payload = json.loads(text)
    except ValueError:
        logger.error(f"Netlify {what} response is not JSON: {text[:BODY_EXCERPT]}")
        raise MalformedResponseError(
            f"Netlify {what} response is not JSON",
            detail=text[:BODY_EXCERPT],
        )

    if not isinstance(payload, dict):
        raise MalformedResponseError(
            f"Netlify {what} response is not a JSON object",
            detail=payload,
        )

    try:
        return model.model_validate(payload)
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(p) for p in error["loc"]) or "id"
        if error["type"] == "missing":
            logger.error(f"Netlify {what} response missing {field}: {payload}")
            raise MissingFieldError(
                f"Netlify {what} response is missing '{field}'",
                field=field,
                detail=payload,
            )
        logger.error(f"Netlify {what} response has invalid {field}: {payload}")
        raise MalformedResponseError(
            f"Netlify {what} response has invalid '{field}': {error['msg']}",
            detail=payload,
        )


class NetlifyClient:
    """
    Async Netlify API client.

    Usage:
        async with NetlifyClient(api_token=token) as client:
            site = await client.create_site("my-site")
            deploy = await client.upload_deploy(site.id, "site.zip")
    """

    def __init__(
        self,
        api_token: str,
        api_url: str = NETLIFY_API_URL,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_token = api_token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def __aenter__(self) -> "NetlifyClient":
        self._client = httpx.AsyncClient(
            base_url=self.api_url,
            headers={"Authorization": f"Bearer {self.api_token}"},
            timeout=httpx.Timeout(self.timeout),
            transport=self.transport,
        )
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post(self, path: str, what: str, **kwargs) -> httpx.Response:
        if self._client is None:
            raise RuntimeError("NetlifyClient used outside of 'async with'")
        try:
            return await self._client.post(path, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"Network error on {what}: {e!r}")
            raise ProviderConnectionError(f"Could not reach Netlify ({what}): {e}")

    async def create_site(self, name: str) -> NetlifySite:
        """POST /sites with {name}."""
        response = await self._post("/sites", "create site", json={"name": name})
        logger.info(f"Create site response: {response.status_code} ({len(response.content)} bytes)")
        site = parse_response(response, NetlifySite, "create site")
        logger.info(f"Site created: {site.id}")
        return site

    async def upload_deploy(self, site_id: str, archive_path) -> NetlifyDeploy:
        """POST /sites/{site_id}/deploys with the zip as body."""
        archive_path = Path(archive_path)
        headers: Dict[str, str] = {
            "Content-Type": "application/zip",
            "Content-Length": str(os.path.getsize(archive_path)),
        }
        response = await self._post(
            f"/sites/{site_id}/deploys",
            "upload deploy",
            content=iter_file(archive_path),
            headers=headers,
        )
        logger.info(f"Deploy response: {response.status_code}")
        deploy = parse_response(response, NetlifyDeploy, "upload deploy")
        logger.info(f"Deploy ID: {deploy.id}")
        return deploy
