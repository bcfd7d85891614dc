"""Benchmarks for geodesic erosion.

This module compares torchgeodesic geodesic erosion (single pass and
reconstruction) against scipy.ndimage baselines.
"""

from __future__ import annotations

import time
from typing import Any, Callable

import numpy as np
import torch

# scipy imports - handle optional dependency
try:
    from scipy import ndimage

    SCIPY_AVAILABLE = True
except ImportError:
    SCIPY_AVAILABLE = False

from torchgeodesic.morphology import (
    geodesic_erosion,
    geodesic_erosion_pass,
    structuring_element,
)


_UNITS = (("s", 1.0), ("ms", 1e-3), ("us", 1e-6), ("ns", 1e-9))


def time_call(
    func: Callable,
    *args: Any,
    warmup: int = 3,
    repeats: int = 10,
    **kwargs: Any,
) -> np.ndarray:
    """Wall-clock seconds of ``repeats`` calls after ``warmup`` discarded ones."""
    for _ in range(warmup):
        func(*args, **kwargs)

    samples = np.empty(repeats)
    for i in range(repeats):
        start = time.perf_counter()
        func(*args, **kwargs)
        samples[i] = time.perf_counter() - start
    return samples


def format_seconds(seconds: float) -> str:
    for unit, scale in _UNITS:
        if seconds >= scale:
            return f"{seconds / scale:.3f}{unit}"
    unit, scale = _UNITS[-1]
    return f"{seconds / scale:.3f}{unit}"


def _summary(samples: np.ndarray) -> str:
    low, median, high = np.percentile(samples, [25, 50, 75])
    return (
        f"{format_seconds(median)} "
        f"(IQR {format_seconds(low)} .. {format_seconds(high)})"
    )


def print_comparison(
    name: str,
    samples: np.ndarray,
    scipy_samples: np.ndarray | None = None,
) -> None:
    """Print median timings, and the ratio to scipy when it ran."""
    print(f"\n{name}")
    print("-" * len(name))
    print(f"  torchgeodesic: {_summary(samples)}")
    if scipy_samples is not None:
        print(f"  scipy:         {_summary(scipy_samples)}")
        ratio = np.median(scipy_samples) / np.median(samples)
        if ratio >= 1:
            print(f"  Speedup:       {ratio:.2f}x faster")
        else:
            print(f"  Speedup:       {1 / ratio:.2f}x slower")


def _scipy_pass(marker: np.ndarray, mask: np.ndarray, footprint: np.ndarray):
    eroded = ndimage.grey_erosion(
        marker, footprint=footprint, mode="constant", cval=np.inf
    )
    return np.maximum(eroded, mask)


def _scipy_reconstruction(
    marker: np.ndarray, mask: np.ndarray, footprint: np.ndarray
):
    current = marker
    while True:
        following = _scipy_pass(current, mask, footprint)
        if np.array_equal(following, current):
            return following
        current = following


class BenchGeodesicErosion:
    """Benchmark geodesic erosion against scipy."""

    def __init__(self, warmup: int = 3, iterations: int = 10):
        self.warmup = warmup
        self.iterations = iterations

    def _pair(self, shape: tuple[int, ...], seed: int = 0):
        generator = torch.Generator().manual_seed(seed)
        mask = torch.rand(shape, generator=generator, dtype=torch.float64)
        marker = mask + torch.rand(shape, generator=generator, dtype=torch.float64)
        return marker, mask

    def bench_pass(
        self,
        size: int = 1024,
        connectivity: str = "face",
        num_workers: int | None = None,
    ) -> None:
        """Single geodesic erosion pass on a square image."""
        marker, mask = self._pair((size, size))
        samples = time_call(
            geodesic_erosion_pass,
            marker,
            mask,
            connectivity=connectivity,
            num_workers=num_workers,
            warmup=self.warmup,
            repeats=self.iterations,
        )

        scipy_samples = None
        if SCIPY_AVAILABLE:
            footprint = structuring_element(connectivity, 2).numpy()
            scipy_samples = time_call(
                _scipy_pass,
                marker.numpy(),
                mask.numpy(),
                footprint,
                warmup=self.warmup,
                repeats=self.iterations,
            )

        print_comparison(
            f"geodesic_erosion_pass ({size}x{size}, {connectivity}, "
            f"workers={num_workers})",
            samples,
            scipy_samples,
        )

    def bench_reconstruction(
        self,
        size: int = 128,
        connectivity: str = "face",
        num_workers: int | None = None,
    ) -> None:
        """Reconstruction by erosion seeded from the image border."""
        _, mask = self._pair((size, size))
        marker = torch.full_like(mask, 2.0)
        marker[0, :] = mask[0, :]
        marker[-1, :] = mask[-1, :]

        samples = time_call(
            geodesic_erosion,
            marker,
            mask,
            connectivity=connectivity,
            num_workers=num_workers,
            warmup=1,
            repeats=max(1, self.iterations // 5),
        )

        scipy_samples = None
        if SCIPY_AVAILABLE:
            footprint = structuring_element(connectivity, 2).numpy()
            scipy_samples = time_call(
                _scipy_reconstruction,
                marker.numpy(),
                mask.numpy(),
                footprint,
                warmup=1,
                repeats=max(1, self.iterations // 5),
            )

        print_comparison(
            f"geodesic_erosion ({size}x{size}, {connectivity}, "
            f"workers={num_workers})",
            samples,
            scipy_samples,
        )

    def run_all(self) -> None:
        """Run all benchmarks."""
        print("=" * 60)
        print("GEODESIC EROSION BENCHMARKS")
        print("=" * 60)

        for connectivity in ("face", "full"):
            self.bench_pass(connectivity=connectivity)
            self.bench_reconstruction(connectivity=connectivity)

    def run_scaling(self) -> None:
        """Run scaling benchmarks with varying parameters."""
        print("=" * 60)
        print("SCALING BENCHMARKS")
        print("=" * 60)

        print("\n--- Worker Scaling (geodesic_erosion_pass) ---")
        for num_workers in [1, 2, 4, 8]:
            self.bench_pass(size=2048, num_workers=num_workers)

        print("\n--- Image Size Scaling (geodesic_erosion) ---")
        for size in [32, 64, 128, 256]:
            self.bench_reconstruction(size=size)


if __name__ == "__main__":
    bench = BenchGeodesicErosion(warmup=3, iterations=10)
    bench.run_all()
    print("\n")
    bench.run_scaling()
