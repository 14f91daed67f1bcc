"""API endpoint modules for version 1."""

from .randomness import router as randomness_router
from .system import router as system_router

__all__ = [
    "randomness_router",
    "system_router",
]
