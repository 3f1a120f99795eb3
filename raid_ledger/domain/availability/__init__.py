from .router import roster_router, router

__all__ = ["router", "roster_router"]
