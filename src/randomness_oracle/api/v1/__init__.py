"""Version 1 API endpoints."""

from .endpoints import randomness_router, system_router

__all__ = [
    "randomness_router",
    "system_router",
]
