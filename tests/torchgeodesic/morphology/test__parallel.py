"""Tests for the multi-threaded geodesic erosion pass."""

from concurrent.futures import ThreadPoolExecutor

import numpy as np
import pytest
import torch

from torchgeodesic.morphology import (
    Region,
    geodesic_erosion_pass,
    partition_region,
    structuring_element,
)


def _random_pair(shape, seed=0, dtype=torch.float64):
    generator = torch.Generator().manual_seed(seed)
    mask = torch.rand(shape, generator=generator, dtype=dtype)
    marker = mask + torch.rand(shape, generator=generator, dtype=dtype)
    return marker, mask


class TestPartitionRegion:
    """Tests for partition_region."""

    def test_exact_cover(self):
        """Tiles are disjoint and cover the region."""
        region = Region(index=(2, 3), size=(13, 7))
        tiles = partition_region(region, 4)
        covered = torch.zeros(20, 20, dtype=torch.int64)
        for tile in tiles:
            covered[tile.slices()] += 1
        expected = torch.zeros(20, 20, dtype=torch.int64)
        expected[region.slices()] = 1
        assert torch.equal(covered, expected)

    def test_splits_slowest_axis(self):
        """Tiles split the first dimension."""
        tiles = partition_region(Region((0, 0), (10, 4)), 3)
        assert tiles == [
            Region(index=(0, 0), size=(4, 4)),
            Region(index=(4, 0), size=(4, 4)),
            Region(index=(8, 0), size=(2, 4)),
        ]

    def test_skips_unit_axes(self):
        """Dimensions of extent one are not split."""
        tiles = partition_region(Region((0, 0, 0), (1, 6, 2)), 3)
        assert [tile.size for tile in tiles] == [(1, 2, 2)] * 3

    def test_fewer_tiles_than_workers(self):
        """Small regions give fewer tiles than requested."""
        tiles = partition_region(Region((0,), (3,)), 8)
        assert len(tiles) == 3

    def test_single_pixel(self):
        """A one-pixel region is one tile."""
        region = Region((2, 2), (1, 1))
        assert partition_region(region, 4) == [region]

    def test_empty_region(self):
        """An empty region has no tiles."""
        assert partition_region(Region((0, 0), (0, 5)), 4) == []

    def test_invalid_num_tiles(self):
        """At least one tile is required."""
        with pytest.raises(ValueError, match="num_tiles"):
            partition_region(Region((0,), (3,)), 0)


class TestGeodesicErosionPassKnownValues:
    """Tests for known single-pass values."""

    def test_boundary_1d(self):
        """Edge pixels only use in-bounds neighbors."""
        marker = torch.tensor([5.0, 3.0, 5.0])
        mask = torch.zeros(3)
        result = geodesic_erosion_pass(marker, mask)
        assert torch.equal(result, torch.tensor([3.0, 3.0, 3.0]))

    def test_mask_clamps(self):
        """Output never drops below the mask."""
        marker = torch.tensor([5.0, 1.0, 5.0, 5.0])
        mask = torch.tensor([0.0, 0.0, 4.0, 0.0])
        result = geodesic_erosion_pass(marker, mask)
        assert torch.equal(result, torch.tensor([1.0, 1.0, 4.0, 5.0]))

    @pytest.mark.parametrize("connectivity", ["face", "full"])
    @pytest.mark.parametrize("shape", [(17,), (9, 11), (5, 6, 7)])
    def test_matches_scipy(self, connectivity, shape):
        """Single pass equals max(grey_erosion(marker), mask)."""
        ndimage = pytest.importorskip("scipy.ndimage")

        marker, mask = _random_pair(shape)
        footprint = structuring_element(connectivity, len(shape)).numpy()
        eroded = ndimage.grey_erosion(
            marker.numpy(), footprint=footprint, mode="constant", cval=np.inf
        )
        expected = torch.from_numpy(np.maximum(eroded, mask.numpy()))

        result = geodesic_erosion_pass(
            marker, mask, connectivity=connectivity, num_workers=3
        )
        assert torch.equal(result, expected)


class TestGeodesicErosionPassTiling:
    """Tests for independence from the tile decomposition."""

    @pytest.mark.parametrize("connectivity", ["face", "full"])
    def test_worker_count_does_not_change_result(self, connectivity):
        """1 worker and N workers agree exactly."""
        marker, mask = _random_pair((23, 19))
        reference = geodesic_erosion_pass(
            marker, mask, connectivity=connectivity, num_workers=1
        )
        for num_workers in (2, 3, 7, 64):
            result = geodesic_erosion_pass(
                marker, mask, connectivity=connectivity, num_workers=num_workers
            )
            assert torch.equal(result, reference)

    def test_caller_executor(self):
        """A caller-supplied executor is used and left running."""
        marker, mask = _random_pair((12, 12))
        reference = geodesic_erosion_pass(marker, mask, num_workers=1)
        with ThreadPoolExecutor(max_workers=2) as executor:
            result = geodesic_erosion_pass(
                marker, mask, num_workers=4, executor=executor
            )
            assert executor.submit(lambda: 1).result() == 1
        assert torch.equal(result, reference)


class TestGeodesicErosionPassRegion:
    """Tests for output sub-regions."""

    def test_sub_region(self):
        """A sub-region equals the same part of the full pass."""
        marker, mask = _random_pair((10, 10))
        full = geodesic_erosion_pass(marker, mask, connectivity="full")
        region = Region(index=(3, 4), size=(5, 2))
        result = geodesic_erosion_pass(
            marker, mask, region, connectivity="full", num_workers=2
        )
        assert result.shape == (5, 2)
        assert torch.equal(result, full[region.slices()])

    def test_region_clipped(self):
        """A region overhanging the image is clipped."""
        marker, mask = _random_pair((6, 6))
        full = geodesic_erosion_pass(marker, mask)
        result = geodesic_erosion_pass(marker, mask, Region((4, 4), (5, 5)))
        assert result.shape == (2, 2)
        assert torch.equal(result, full[4:, 4:])

    def test_out(self):
        """Result is written to a caller-supplied buffer."""
        marker, mask = _random_pair((8, 8))
        out = torch.empty(8, 8, dtype=torch.float64)
        result = geodesic_erosion_pass(marker, mask, out=out)
        assert result is out

    def test_out_wider_dtype(self):
        """Output dtype may differ if the marker dtype casts to it."""
        marker = torch.tensor([5, 3, 5], dtype=torch.int32)
        mask = torch.zeros(3, dtype=torch.int32)
        out = torch.empty(3, dtype=torch.float64)
        geodesic_erosion_pass(marker, mask, out=out)
        assert torch.equal(out, torch.tensor([3.0, 3.0, 3.0], dtype=torch.float64))

    def test_inputs_not_modified(self):
        """Marker and mask are read-only."""
        marker, mask = _random_pair((9, 9))
        marker_before = marker.clone()
        mask_before = mask.clone()
        geodesic_erosion_pass(marker, mask, num_workers=4)
        assert torch.equal(marker, marker_before)
        assert torch.equal(mask, mask_before)


class TestGeodesicErosionPassErrors:
    """Tests for configuration errors."""

    def test_shape_mismatch(self):
        """Marker and mask must share a shape."""
        with pytest.raises(ValueError, match="shape"):
            geodesic_erosion_pass(torch.ones(4, 4), torch.zeros(4, 5))

    def test_num_workers(self):
        """At least one worker is required."""
        with pytest.raises(ValueError, match="num_workers"):
            geodesic_erosion_pass(torch.ones(4), torch.zeros(4), num_workers=0)

    def test_out_shape(self):
        """Output buffer must have the region's shape."""
        with pytest.raises(ValueError, match="out must have shape"):
            geodesic_erosion_pass(
                torch.ones(4, 4), torch.zeros(4, 4), out=torch.empty(4, 3)
            )

    def test_invalid_connectivity(self):
        """Unknown connectivity is rejected before any pass runs."""
        with pytest.raises(ValueError, match="connectivity"):
            geodesic_erosion_pass(
                torch.ones(4), torch.zeros(4), connectivity="edge"
            )

    def test_out_shares_memory_with_marker(self):
        """Eroding in place would let tiles read halos their neighbors wrote."""
        marker = torch.tensor([9.0, 9.0, 9.0, 0.0, 9.0, 9.0, 9.0, 9.0])
        mask = torch.zeros(8)
        with pytest.raises(ValueError, match="share memory"):
            geodesic_erosion_pass(marker, mask, num_workers=4, out=marker)

    def test_out_is_view_of_marker(self):
        """A view into the marker is rejected like the marker itself."""
        marker = torch.full((8,), 9.0)
        mask = torch.zeros(8)
        with pytest.raises(ValueError, match="share memory"):
            geodesic_erosion_pass(
                marker,
                mask,
                Region(index=(2,), size=(4,)),
                out=marker[2:6],
            )
        assert torch.equal(marker, torch.full((8,), 9.0))
