from deckmatch.api.health import router as health_router
from deckmatch.api.match import router as match_router

__all__ = [
    "health_router",
    "match_router",
]
