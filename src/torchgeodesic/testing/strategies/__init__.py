"""Hypothesis strategies for geodesic morphology testing."""

from ._image_shapes import image_shapes
from ._marker_mask_pairs import marker_mask_pairs

__all__ = [
    "image_shapes",
    "marker_mask_pairs",
]
