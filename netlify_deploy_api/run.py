#!/usr/bin/env python3
"""Entry point that ensures proper Python path setup."""
import sys
from pathlib import Path

# Add parent directory to path so netlify_deploy_api is importable as a package
app_dir = Path(__file__).parent.parent
if str(app_dir) not in sys.path:
    sys.path.insert(0, str(app_dir))

# Now import and run the app
from netlify_deploy_api.config import get_app_settings
from netlify_deploy_api.main import create_app

if __name__ == "__main__":
    import uvicorn
    settings = get_app_settings()
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
