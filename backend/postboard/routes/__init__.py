"""Route modules."""

from .auth import router as auth_router
from .health import router as health_router
from .posts import router as posts_router

__all__ = ["auth_router", "health_router", "posts_router"]
