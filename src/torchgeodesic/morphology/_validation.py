"""Argument checks shared by the geodesic erosion entry points.

Each check raises before any pass runs, prefixing its message with the name
of the public function that was called.
"""

from typing import Optional, Tuple

import torch
from torch import Tensor

from torchgeodesic.morphology._connectivity import _check_connectivity


def check_images(
    marker: Tensor,
    mask: Tensor,
    connectivity: str,
    name: str,
) -> None:
    """Reject marker/mask pairs the erosion has no meaning for."""
    if not isinstance(marker, Tensor) or not isinstance(mask, Tensor):
        raise TypeError(f"{name}: marker and mask must be tensors")
    if marker.dim() != mask.dim():
        raise ValueError(
            f"{name}: marker and mask must have the same number of "
            f"dimensions ({marker.dim()} != {mask.dim()})"
        )
    if marker.dim() < 1:
        raise ValueError(f"{name}: marker must have at least 1 dimension")
    if marker.shape != mask.shape:
        raise ValueError(
            f"{name}: marker and mask must have the same shape "
            f"({tuple(marker.shape)} != {tuple(mask.shape)})"
        )
    if marker.dtype != mask.dtype:
        raise ValueError(
            f"{name}: marker and mask must have the same dtype "
            f"({marker.dtype} != {mask.dtype})"
        )
    if marker.is_complex():
        raise ValueError(
            f"{name}: complex dtypes are not ordered, got {marker.dtype}"
        )
    if marker.device != mask.device:
        raise ValueError(
            f"{name}: marker and mask must be on the same device "
            f"({marker.device} != {mask.device})"
        )
    _check_connectivity(connectivity, marker.dim(), name)


def check_out(
    out: Optional[Tensor],
    marker: Tensor,
    size: Tuple[int, ...],
    name: str,
) -> None:
    """Reject an output buffer that cannot hold the planned region."""
    if out is None:
        return
    if out.dim() != marker.dim():
        raise ValueError(
            f"{name}: out must have {marker.dim()} dimensions, got {out.dim()}"
        )
    if tuple(out.shape) != tuple(size):
        raise ValueError(
            f"{name}: out must have shape {tuple(size)}, "
            f"got {tuple(out.shape)}"
        )
    if not torch.can_cast(marker.dtype, out.dtype):
        raise ValueError(
            f"{name}: cannot write {marker.dtype} values to out of dtype "
            f"{out.dtype}"
        )
    if out.device != marker.device:
        raise ValueError(
            f"{name}: out must be on {marker.device}, got {out.device}"
        )


def check_out_disjoint(out: Optional[Tensor], marker: Tensor, name: str) -> None:
    """Reject an output buffer that shares memory with the marker.

    Tiles read halos of ``marker`` that neighboring tiles write, so an
    aliased ``out`` would make the result depend on thread scheduling.
    """
    if out is None or out.numel() == 0 or marker.numel() == 0:
        return
    if out.untyped_storage().data_ptr() == marker.untyped_storage().data_ptr():
        raise ValueError(f"{name}: out must not share memory with marker")


def check_num_workers(num_workers: Optional[int], name: str) -> int:
    if num_workers is None:
        return max(1, torch.get_num_threads())
    if num_workers < 1:
        raise ValueError(
            f"{name}: num_workers must be at least 1, got {num_workers}"
        )
    return num_workers
