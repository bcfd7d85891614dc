"""Testing utilities for geodesic morphology."""

from . import strategies

__all__ = [
    "strategies",
]
