from .deploy import router as deploy_router

__all__ = ["deploy_router"]
