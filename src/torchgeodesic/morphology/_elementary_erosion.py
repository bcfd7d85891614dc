"""Geodesic erosion of a single output tile."""

import math

import torch
from torch import Tensor

from torchgeodesic.morphology._connectivity import (
    Connectivity,
    neighborhood_offsets,
)
from torchgeodesic.morphology._region import Region


def _erosion_identity(dtype: torch.dtype) -> bool | float | int:
    # Largest representable value; min(x, identity) == x.
    if dtype == torch.bool:
        return True
    if dtype.is_floating_point:
        return math.inf
    return torch.iinfo(dtype).max


@torch.no_grad()
def elementary_erosion(
    marker: Tensor,
    mask: Tensor,
    tile: Region,
    *,
    connectivity: Connectivity,
    out: Tensor,
    out_region: Region,
) -> None:
    r"""Geodesic erosion of ``marker`` under ``mask`` restricted to ``tile``.

    For every index :math:`i` in ``tile``:

    .. math::
        \text{out}[i] = \max\left(
            \min_{o \in B,\; i + o \in D} \text{marker}[i + o],\;
            \text{mask}[i]
        \right)

    where :math:`B` is the elementary structuring element (center included)
    and :math:`D` is the image domain. Neighbors outside the domain do not
    take part in the minimum.

    Parameters
    ----------
    marker : Tensor
        Image being eroded. Only ``tile`` dilated by one (clipped to the
        domain) is read.
    mask : Tensor
        Lower bound, same shape and dtype as ``marker``. Only ``tile`` is read.
    tile : Region
        Region of the output to compute, in image coordinates.
    connectivity : {"face", "full"}
        Elementary structuring element.
    out : Tensor
        Output buffer covering ``out_region``. Only the ``tile`` part is
        written.
    out_region : Region
        Image region covered by ``out``. Must contain ``tile``.

    Notes
    -----
    Inputs are not validated; this is the per-tile task body of
    :func:`geodesic_erosion_pass`, which checks its arguments once before
    dispatching.
    """
    if tile.is_empty():
        return

    ndim = tile.ndim
    halo = tile.dilate(1).clip(tuple(marker.shape))

    # Pad the halo to the full 3-wide window with the identity of min so that
    # neighbors outside the domain never win.
    padded = torch.full(
        tuple(s + 2 for s in tile.size),
        _erosion_identity(marker.dtype),
        dtype=marker.dtype,
        device=marker.device,
    )
    padded[halo.relative_to(tile.dilate(1)).slices()] = marker[halo.slices()]

    if marker.dtype == torch.bool:
        minimum, maximum = torch.logical_and, torch.logical_or
    else:
        minimum, maximum = torch.minimum, torch.maximum

    eroded = padded[tuple(slice(1, 1 + s) for s in tile.size)]
    for offset in neighborhood_offsets(connectivity, ndim):
        window = tuple(slice(1 + o, 1 + o + s) for o, s in zip(offset, tile.size))
        eroded = minimum(eroded, padded[window])

    out[tile.relative_to(out_region).slices()] = maximum(
        eroded, mask[tile.slices()]
    )
