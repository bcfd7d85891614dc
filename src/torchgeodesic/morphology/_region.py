"""Axis-aligned regions of an image's index space."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Region:
    """Axis-aligned N-dimensional box of indices.

    Parameters
    ----------
    index : Tuple[int, ...]
        Starting index along each dimension.
    size : Tuple[int, ...]
        Extent along each dimension. A zero extent makes the region empty.

    Examples
    --------
    >>> region = Region(index=(2, 3), size=(4, 5))
    >>> region.dilate(1)
    Region(index=(1, 2), size=(6, 7))
    >>> region.dilate(1).clip((5, 5))
    Region(index=(1, 2), size=(4, 3))
    """

    index: Tuple[int, ...]
    size: Tuple[int, ...]

    def __post_init__(self):
        index = tuple(int(i) for i in self.index)
        size = tuple(int(s) for s in self.size)
        if len(index) != len(size):
            raise ValueError(
                f"Region: index and size must have the same length "
                f"({len(index)} != {len(size)})"
            )
        if any(s < 0 for s in size):
            raise ValueError(f"Region: size must be non-negative, got {size}")
        object.__setattr__(self, "index", index)
        object.__setattr__(self, "size", size)

    @classmethod
    def full(cls, shape: Tuple[int, ...]) -> Region:
        """Region covering every index of an image with ``shape``."""
        return cls(index=(0,) * len(shape), size=tuple(shape))

    @property
    def ndim(self) -> int:
        """Number of dimensions."""
        return len(self.size)

    @property
    def stop(self) -> Tuple[int, ...]:
        """Exclusive upper bound along each dimension."""
        return tuple(i + s for i, s in zip(self.index, self.size))

    @property
    def numel(self) -> int:
        """Number of indices in the region."""
        result = 1
        for s in self.size:
            result *= s
        return result

    def is_empty(self) -> bool:
        return self.numel == 0

    def slices(self) -> Tuple[slice, ...]:
        """Slices selecting the region from a tensor."""
        return tuple(slice(i, i + s) for i, s in zip(self.index, self.size))

    def dilate(self, radius: int = 1) -> Region:
        """Grow the region by ``radius`` on both sides of every dimension."""
        return Region(
            index=tuple(i - radius for i in self.index),
            size=tuple(s + 2 * radius for s in self.size),
        )

    def clip(self, shape: Tuple[int, ...]) -> Region:
        """Intersect with the domain ``[0, shape)``.

        Regions lying entirely outside the domain clip to an empty region.
        """
        if len(shape) != self.ndim:
            raise ValueError(
                f"Region.clip: shape has {len(shape)} dimensions, "
                f"region has {self.ndim}"
            )
        index = []
        size = []
        for start, stop, extent in zip(self.index, self.stop, shape):
            lo = min(max(start, 0), extent)
            hi = min(max(stop, lo), extent)
            index.append(lo)
            size.append(hi - lo)
        return Region(index=tuple(index), size=tuple(size))

    def contains(self, other: Region) -> bool:
        """Whether ``other`` lies entirely within this region."""
        if other.is_empty():
            return True
        return all(
            a <= b and b_stop <= a_stop
            for a, b, a_stop, b_stop in zip(
                self.index, other.index, self.stop, other.stop
            )
        )

    def relative_to(self, other: Region) -> Region:
        """Express this region in coordinates whose origin is ``other.index``."""
        return Region(
            index=tuple(i - o for i, o in zip(self.index, other.index)),
            size=self.size,
        )
