# src/__init__.py
"""
netlify_deploy_api business logic.

- archive.py: merge base archive + _redirects + upload
- netlify.py: Netlify REST client
- deploy.py: one deploy, end to end
- routes/: API endpoints
"""

from .errors import DeployError
from .deploy import DeployOutcome, PublishResult, run_deploy

__all__ = [
    "DeployError",
    "DeployOutcome",
    "PublishResult",
    "run_deploy",
]
