"""
Pydantic schemas for API responses and Netlify payloads.
"""
from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Netlify Payloads
# =============================================================================

class NetlifySite(BaseModel):
    """Response of POST /sites."""
    model_config = ConfigDict(extra="allow")

    id: str
    name: Optional[str] = None
    ssl_url: Optional[str] = None
    url: Optional[str] = None
    admin_url: Optional[str] = None


class NetlifyDeploy(BaseModel):
    """Response of POST /sites/{site_id}/deploys."""
    model_config = ConfigDict(extra="allow")

    id: str
    site_id: Optional[str] = None
    state: Optional[str] = None
    ssl_url: Optional[str] = None
    deploy_ssl_url: Optional[str] = None
    url: Optional[str] = None


# =============================================================================
# API Schemas
# =============================================================================

class DeployResponse(BaseModel):
    """Successful deploy."""
    message: str = "Deploy succeeded"
    url: Optional[str] = Field(None, description="Live HTTPS URL of the published site")


class DeployErrorResponse(BaseModel):
    """Failed deploy. `detail` carries Netlify's own error payload when there is one."""
    message: str = "Deploy failed"
    error: str
    detail: Optional[Any] = None


class ServiceInfo(BaseModel):
    service: str
    version: str
    docs: str = "/docs"
