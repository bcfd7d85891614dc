"""Benchmarks for geodesic morphology.

This module compares torchgeodesic geodesic erosion against an iterated
scipy baseline and measures scaling with the number of workers.
"""

from .bench_geodesic_erosion import BenchGeodesicErosion

__all__ = [
    "BenchGeodesicErosion",
]
