"""
Deploy failures.

Every failure the deploy flow can hit is a DeployError subclass carrying the
HTTP status returned to the caller and, for provider failures, Netlify's own
error payload in `detail`.
"""

from typing import Any, Optional


class DeployError(Exception):
    """Base class for all deploy failures."""

    status_code = 500

    def __init__(self, message: str, detail: Optional[Any] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code

    def __str__(self) -> str:
        return self.message


# =============================================================================
# Preflight
# =============================================================================

class ConfigurationError(DeployError):
    """NETLIFY_TOKEN (or another required setting) is missing."""


class MissingUploadError(DeployError):
    status_code = 400


class BaseArchiveMissingError(DeployError):
    status_code = 400


class InvalidArchiveError(DeployError):
    """An archive could not be opened as a zip."""


# =============================================================================
# Provider
# =============================================================================

class ProviderError(DeployError):
    """Anything that went wrong talking to Netlify."""


class ProviderConnectionError(ProviderError):
    pass


class ProviderStatusError(ProviderError):
    """Netlify answered with a non-2xx status."""

    def __init__(self, message: str, status: int, detail: Optional[Any] = None):
        super().__init__(message, detail=detail)
        self.status = status


class MalformedResponseError(ProviderError):
    """Netlify answered 2xx with a body that is not a JSON object."""


class MissingFieldError(ProviderError):
    """Netlify answered 2xx but a required field is absent."""

    def __init__(self, message: str, field: str, detail: Optional[Any] = None):
        super().__init__(message, detail=detail)
        self.field = field
