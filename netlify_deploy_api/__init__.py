"""Netlify Deploy API - merge an uploaded zip into the app shell and publish it."""

from .config import SERVICE_VERSION as __version__

__all__ = ["__version__"]
