"""Geodesic mathematical morphology.

This module provides N-dimensional grayscale geodesic erosion and
reconstruction by erosion, computed with multi-threaded tile passes.

Operations
----------
geodesic_erosion : Geodesic erosion, once or iterated to reconstruction.
geodesic_erosion_pass : A single multi-threaded geodesic erosion pass.
plan_input_region : Marker and mask regions needed for an output region.
structuring_element : Elementary (radius one) structuring element.
neighborhood_offsets : Nonzero offsets of the elementary structuring element.
partition_region : Split a region into disjoint tiles.
"""

from torchgeodesic.morphology._connectivity import (
    Connectivity,
    neighborhood_offsets,
    structuring_element,
)
from torchgeodesic.morphology._elementary_erosion import elementary_erosion
from torchgeodesic.morphology._exceptions import (
    ConvergenceError,
    GeodesicErosionError,
    RegionEnlargedWarning,
)
from torchgeodesic.morphology._geodesic_erosion import (
    GeodesicErosionResult,
    geodesic_erosion,
)
from torchgeodesic.morphology._parallel import (
    geodesic_erosion_pass,
    partition_region,
)
from torchgeodesic.morphology._region import Region
from torchgeodesic.morphology._region_planning import (
    RegionPlan,
    RunMode,
    plan_input_region,
)

__all__ = [
    "Connectivity",
    "ConvergenceError",
    "GeodesicErosionError",
    "GeodesicErosionResult",
    "Region",
    "RegionEnlargedWarning",
    "RegionPlan",
    "RunMode",
    "elementary_erosion",
    "geodesic_erosion",
    "geodesic_erosion_pass",
    "neighborhood_offsets",
    "partition_region",
    "plan_input_region",
    "structuring_element",
]
