"""Shared pytest fixtures for all test modules."""

import io
import json
import zipfile

import httpx
import pytest

from netlify_deploy_api.config import AppSettings


TOKEN = "nfp_test_token_0123456789"
API_URL = "https://api.netlify.test/api/v1"

SITE_RESPONSE = {
    "id": "3970e0fe-8564-4903-9a55-c5f8de49fb8b",
    "name": "alphawave-quiz-1700000000000",
    "ssl_url": "https://alphawave-quiz-1700000000000.netlify.app",
    "url": "http://alphawave-quiz-1700000000000.netlify.app",
    "admin_url": "https://app.netlify.com/sites/alphawave-quiz-1700000000000",
}

DEPLOY_RESPONSE = {
    "id": "65f1c2a3b4d5e6f708192a3b",
    "site_id": SITE_RESPONSE["id"],
    "state": "uploaded",
    "ssl_url": "https://65f1c2a3b4d5e6f708192a3b--alphawave-quiz-1700000000000.netlify.app",
    "deploy_ssl_url": "https://65f1c2a3b4d5e6f708192a3b--alphawave-quiz-1700000000000.netlify.app",
}


def build_zip(entries, dirs=()) -> bytes:
    """Zip bytes from {name: str|bytes}; `dirs` adds directory-only entries."""
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for d in dirs:
            zf.writestr(zipfile.ZipInfo(d.rstrip("/") + "/"), b"")
        for name, data in entries.items():
            zf.writestr(name, data)
    return buf.getvalue()


def read_zip(data: bytes) -> dict:
    with zipfile.ZipFile(io.BytesIO(data)) as zf:
        return {info.filename: zf.read(info) for info in zf.infolist()}


class FakeNetlify:
    """
    In-memory Netlify API.

    `site` and `deploy` are (status, body) pairs; a str body is sent as raw
    text, anything else as JSON. Set `error` to raise a transport error.
    """

    def __init__(self):
        self.site = (201, dict(SITE_RESPONSE))
        self.deploy = (200, dict(DEPLOY_RESPONSE))
        self.error = None
        self.requests = []

    @staticmethod
    def _respond(status, body) -> httpx.Response:
        if isinstance(body, str):
            return httpx.Response(status, text=body)
        return httpx.Response(status, json=body)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error(f"cannot connect to {request.url.host}", request=request)
        path = request.url.path
        if request.method == "POST" and path.endswith("/sites"):
            return self._respond(*self.site)
        if request.method == "POST" and path.endswith("/deploys"):
            return self._respond(*self.deploy)
        return httpx.Response(404, json={"code": 404, "message": "Not Found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def paths(self):
        return [r.url.path for r in self.requests]

    def site_payload(self) -> dict:
        return json.loads(self.requests[0].content)

    def deployed_entries(self) -> dict:
        return read_zip(self.requests[1].content)


@pytest.fixture
def fake_netlify():
    return FakeNetlify()


@pytest.fixture
def base_archive(tmp_path):
    """App shell with index.html and app.js."""
    path = tmp_path / "dist.zip"
    path.write_bytes(build_zip({
        "index.html": "<!doctype html><div id=root></div><script src=app.js></script>",
        "app.js": "console.log('quiz');",
    }))
    return path


@pytest.fixture
def make_settings(tmp_path, base_archive):
    """Return a factory for AppSettings rooted in tmp_path."""

    def _make(**overrides):
        values = dict(
            netlify_token=TOKEN,
            netlify_api_url=API_URL,
            base_archive_path=base_archive,
            upload_dir=tmp_path / "uploads",
            work_dir=tmp_path / "work",
        )
        values.update(overrides)
        return AppSettings(_env_file=None, **values)

    return _make


@pytest.fixture
def settings(make_settings):
    return make_settings()
