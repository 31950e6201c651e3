# Consolidated route imports
from .health import router as health_router
from .negotiations import router as negotiations_router
from .websockets import ws_router

__all__ = [
    "health_router",
    "negotiations_router",
    "ws_router",
]
