"""Tests for Region."""

import pytest
import torch

from torchgeodesic.morphology import Region


class TestRegionConstruction:
    """Tests for construction and basic properties."""

    def test_properties(self):
        """ndim, stop and numel follow from index and size."""
        region = Region(index=(1, 2, 3), size=(4, 5, 6))
        assert region.ndim == 3
        assert region.stop == (5, 7, 9)
        assert region.numel == 120
        assert not region.is_empty()

    def test_full(self):
        """Full region starts at the origin."""
        assert Region.full((3, 4)) == Region(index=(0, 0), size=(3, 4))

    def test_empty(self):
        """Zero extent along any dimension gives an empty region."""
        assert Region(index=(0, 0), size=(3, 0)).is_empty()

    def test_length_mismatch(self):
        """Index and size must have the same length."""
        with pytest.raises(ValueError, match="same length"):
            Region(index=(0, 0), size=(3,))

    def test_negative_size(self):
        """Negative extents are rejected."""
        with pytest.raises(ValueError, match="non-negative"):
            Region(index=(0,), size=(-1,))


class TestRegionGeometry:
    """Tests for dilation, clipping and containment."""

    def test_dilate(self):
        """Dilation grows both sides of every dimension."""
        region = Region(index=(2, 3), size=(4, 5))
        assert region.dilate(1) == Region(index=(1, 2), size=(6, 7))
        assert region.dilate(2) == Region(index=(0, 1), size=(8, 9))

    def test_clip_inside(self):
        """Clipping a region inside the domain is a no-op."""
        region = Region(index=(1, 1), size=(2, 2))
        assert region.clip((5, 5)) == region

    def test_clip_overhanging(self):
        """Clipping trims the parts outside the domain."""
        region = Region(index=(-1, 3), size=(4, 4))
        assert region.clip((5, 5)) == Region(index=(0, 3), size=(3, 2))

    def test_clip_outside(self):
        """A region beyond the domain clips to an empty region."""
        region = Region(index=(10, 0), size=(2, 2))
        assert region.clip((5, 5)).is_empty()

    def test_clip_dimension_mismatch(self):
        """Clipping against a shape of another rank is an error."""
        with pytest.raises(ValueError, match="dimensions"):
            Region(index=(0,), size=(2,)).clip((5, 5))

    def test_contains(self):
        """Containment is inclusive of the boundary."""
        outer = Region(index=(0, 0), size=(4, 4))
        assert outer.contains(Region(index=(1, 1), size=(3, 3)))
        assert not outer.contains(Region(index=(1, 1), size=(4, 3)))

    def test_slices(self):
        """Slices select the region from a tensor."""
        image = torch.arange(25).reshape(5, 5)
        region = Region(index=(1, 2), size=(2, 3))
        assert torch.equal(image[region.slices()], image[1:3, 2:5])

    def test_relative_to(self):
        """Relative coordinates subtract the other region's index."""
        tile = Region(index=(4, 5), size=(2, 2))
        outer = Region(index=(3, 3), size=(6, 6))
        assert tile.relative_to(outer) == Region(index=(1, 2), size=(2, 2))
