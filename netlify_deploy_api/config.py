"""
App settings for netlify_deploy_api.

.env hierarchy (lowest → highest priority):
  1. netlify_deploy_api/../.env   (or the file named by ENV_FILE)
  2. Environment variables         (always win)

Settings are built once at startup and handed to create_app(); request
handlers read them from app.state, never from os.environ.
"""

import os
from pathlib import Path
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


# Service directory (where this file lives)
SERVICE_DIR = Path(__file__).parent

SERVICE_NAME = "netlify-deploy-api"
SERVICE_VERSION = "0.1.0"

DEFAULT_ENV_FILE = SERVICE_DIR.parent / ".env"
NETLIFY_API_URL = "https://api.netlify.com/api/v1"


class AppSettings(BaseSettings):
    """Deploy service settings."""

    model_config = SettingsConfigDict(
        env_file=os.environ.get("ENV_FILE") or str(DEFAULT_ENV_FILE),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Server (uvicorn)
    host: str = "0.0.0.0"
    port: int = 5001
    debug: bool = False

    # Netlify
    netlify_token: Optional[str] = None
    netlify_api_url: str = NETLIFY_API_URL
    netlify_timeout: Optional[float] = None  # None = wait forever

    # Archives
    base_archive_path: Path = SERVICE_DIR / "dist.zip"
    upload_dir: Path = SERVICE_DIR / "uploads"
    work_dir: Path = SERVICE_DIR

    site_name_prefix: str = "alphawave-quiz"

    log_level: str = "INFO"

    def masked_token(self) -> str:
        """First 10 characters of the token, for startup logs."""
        if not self.netlify_token:
            return "MISSING"
        return f"{self.netlify_token[:10]}..."

    def ensure_dirs(self):
        """Create upload and work directories if needed."""
        Path(self.upload_dir).mkdir(parents=True, exist_ok=True)
        Path(self.work_dir).mkdir(parents=True, exist_ok=True)


@lru_cache
def get_app_settings() -> AppSettings:
    """Get cached app settings instance."""
    return AppSettings()
