"""Single multi-threaded geodesic erosion pass."""

from concurrent.futures import Executor, ThreadPoolExecutor
from typing import List, Optional

import torch
from torch import Tensor

from torchgeodesic.morphology._connectivity import Connectivity
from torchgeodesic.morphology._elementary_erosion import elementary_erosion
from torchgeodesic.morphology._region import Region
from torchgeodesic.morphology._validation import (
    check_images,
    check_num_workers,
    check_out,
    check_out_disjoint,
)


def partition_region(region: Region, num_tiles: int) -> List[Region]:
    """Split ``region`` into at most ``num_tiles`` disjoint tiles.

    The split is along the slowest-varying dimension with more than one
    index. Every tile but the last has ``ceil(extent / num_tiles)`` slices,
    so small regions produce fewer tiles than requested.

    Parameters
    ----------
    region : Region
        Region to split.
    num_tiles : int
        Upper bound on the number of tiles.

    Returns
    -------
    list of Region
        Tiles in increasing index order. Their union is exactly ``region``.
        Empty for an empty region.

    Examples
    --------
    >>> partition_region(Region((0, 0), (10, 4)), 3)
    [Region(index=(0, 0), size=(4, 4)), Region(index=(4, 0), size=(4, 4)), Region(index=(8, 0), size=(2, 4))]
    """
    if num_tiles < 1:
        raise ValueError(
            f"partition_region: num_tiles must be at least 1, got {num_tiles}"
        )
    if region.is_empty():
        return []

    axis = next((d for d in range(region.ndim) if region.size[d] > 1), None)
    if axis is None:
        return [region]

    extent = region.size[axis]
    chunk = -(-extent // num_tiles)

    tiles = []
    for start in range(0, extent, chunk):
        index = list(region.index)
        size = list(region.size)
        index[axis] += start
        size[axis] = min(chunk, extent - start)
        tiles.append(Region(index=tuple(index), size=tuple(size)))

    return tiles


def _run_tiles(
    executor: Executor,
    tiles: List[Region],
    marker: Tensor,
    mask: Tensor,
    connectivity: Connectivity,
    out: Tensor,
    region: Region,
) -> None:
    futures = [
        executor.submit(
            elementary_erosion,
            marker,
            mask,
            tile,
            connectivity=connectivity,
            out=out,
            out_region=region,
        )
        for tile in tiles
    ]
    # Join every tile; the first failure propagates.
    for future in futures:
        future.result()


def geodesic_erosion_pass(
    marker: Tensor,
    mask: Tensor,
    region: Optional[Region] = None,
    *,
    connectivity: Connectivity = "face",
    num_workers: Optional[int] = None,
    executor: Optional[Executor] = None,
    out: Optional[Tensor] = None,
) -> Tensor:
    r"""Compute one geodesic erosion of ``marker`` under ``mask``.

    .. math::
        \varepsilon^{(1)}_g(f) = \max(\varepsilon_B(f), g)

    where :math:`f` is the marker, :math:`g` the mask and :math:`B` the
    elementary structuring element.

    The output region is split into disjoint tiles, one per worker, and each
    tile is eroded on a thread pool. Tiles read overlapping halos of
    ``marker`` but write disjoint parts of the output, so no locking is
    needed. The function returns only once every tile has been written.

    Parameters
    ----------
    marker : Tensor
        Image to erode. Must be pointwise greater than or equal to ``mask``.
    mask : Tensor
        Lower bound with the same shape and dtype as ``marker``.
    region : Region, optional
        Output region in image coordinates. Clipped to the image domain.
        Default: the whole image.
    connectivity : {"face", "full"}, optional
        Elementary structuring element. Default: ``"face"``.
    num_workers : int, optional
        Number of tiles to split the region into. Default:
        ``torch.get_num_threads()``.
    executor : Executor, optional
        Pool to run tiles on. It is not shut down. Default: a
        ``ThreadPoolExecutor`` with ``num_workers`` threads, created for this
        call.
    out : Tensor, optional
        Output buffer with shape ``region.size``. Its dtype must be castable
        from the marker's, and it must not share memory with ``marker``.

    Returns
    -------
    Tensor
        Geodesic erosion over ``region``, with shape ``region.size``.

    Examples
    --------
    >>> marker = torch.tensor([5.0, 3.0, 5.0])
    >>> mask = torch.zeros(3)
    >>> geodesic_erosion_pass(marker, mask)
    tensor([3., 3., 3.])

    Notes
    -----
    - The result does not depend on ``num_workers``.
    - No autograd support.
    """
    check_images(marker, mask, connectivity, "geodesic_erosion_pass")
    num_workers = check_num_workers(num_workers, "geodesic_erosion_pass")

    shape = tuple(marker.shape)
    if region is None:
        region = Region.full(shape)
    region = region.clip(shape)

    check_out(out, marker, region.size, "geodesic_erosion_pass")
    check_out_disjoint(out, marker, "geodesic_erosion_pass")

    return _geodesic_erosion_pass(
        marker,
        mask,
        region,
        connectivity=connectivity,
        num_workers=num_workers,
        executor=executor,
        out=out,
    )


def _geodesic_erosion_pass(
    marker: Tensor,
    mask: Tensor,
    region: Region,
    *,
    connectivity: Connectivity,
    num_workers: int,
    executor: Optional[Executor],
    out: Optional[Tensor],
) -> Tensor:
    # Arguments are already validated and ``region`` is clipped.
    if out is None:
        out = torch.empty(region.size, dtype=marker.dtype, device=marker.device)

    tiles = partition_region(region, num_workers)

    if executor is not None:
        _run_tiles(executor, tiles, marker, mask, connectivity, out, region)
    elif len(tiles) <= 1:
        for tile in tiles:
            elementary_erosion(
                marker,
                mask,
                tile,
                connectivity=connectivity,
                out=out,
                out_region=region,
            )
    else:
        with ThreadPoolExecutor(max_workers=len(tiles)) as pool:
            _run_tiles(pool, tiles, marker, mask, connectivity, out, region)

    return out
