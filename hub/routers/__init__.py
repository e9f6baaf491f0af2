"""API routers package."""

from .assets import router as assets_router
from .ws import router as ws_router

__all__ = ["assets_router", "ws_router"]
