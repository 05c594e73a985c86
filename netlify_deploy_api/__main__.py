"""
Run netlify_deploy_api with: python -m netlify_deploy_api
"""

import uvicorn
from .config import get_app_settings

settings = get_app_settings()

if __name__ == "__main__":
    uvicorn.run(
        "netlify_deploy_api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
