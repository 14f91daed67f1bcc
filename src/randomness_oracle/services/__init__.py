# src/randomness_oracle/services/__init__.py
"""Business logic services for the randomness oracle."""

from .chain import ContractNonceReader
from .oracle import RandomnessOracle, build_oracle
from .randomness_cache import NonceRandomnessCache
from .rate_limit import RateLimiter
from .signing import RandomnessSigner
from .sweeper import CacheSweepWorker

__all__ = [
    "CacheSweepWorker",
    "ContractNonceReader",
    "NonceRandomnessCache",
    "RandomnessOracle",
    "RandomnessSigner",
    "RateLimiter",
    "build_oracle",
]
