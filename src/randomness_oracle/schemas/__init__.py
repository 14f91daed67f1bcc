"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .randomness import ErrorResponse, RandomnessRequest, RandomnessResponse, RandomnessStatus

__all__ = [
    "ErrorResponse",
    "RandomnessRequest",
    "RandomnessResponse",
    "RandomnessStatus",
]
