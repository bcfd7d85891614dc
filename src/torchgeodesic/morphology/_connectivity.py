"""Elementary structuring elements for geodesic morphology."""

from functools import lru_cache
from typing import Literal, Tuple

import torch
from torch import Tensor

Connectivity = Literal["face", "full"]

_CONNECTIVITIES = ("face", "full")


def _check_connectivity(connectivity: str, ndim: int, name: str) -> None:
    if connectivity not in _CONNECTIVITIES:
        raise ValueError(
            f"{name}: connectivity must be one of {list(_CONNECTIVITIES)}, "
            f"got '{connectivity}'"
        )
    if ndim < 1:
        raise ValueError(f"{name}: ndim must be at least 1, got {ndim}")


def structuring_element(connectivity: Connectivity, ndim: int) -> Tensor:
    r"""Elementary (radius one) structuring element.

    Parameters
    ----------
    connectivity : {"face", "full"}
        ``"face"`` selects the center and its :math:`2N` face neighbors (a
        cross). ``"full"`` selects the center and all :math:`3^N - 1`
        neighbors, including edge and vertex neighbors.
    ndim : int
        Number of spatial dimensions :math:`N`.

    Returns
    -------
    Tensor
        Boolean tensor of shape ``(3,) * ndim``. The center is always set.

    Examples
    --------
    >>> structuring_element("face", 2)
    tensor([[False,  True, False],
            [ True,  True,  True],
            [False,  True, False]])
    """
    _check_connectivity(connectivity, ndim, "structuring_element")

    if connectivity == "full":
        return torch.ones((3,) * ndim, dtype=torch.bool)

    coords = torch.meshgrid(
        *[torch.arange(-1, 2) for _ in range(ndim)], indexing="ij"
    )
    distance = torch.stack([c.abs() for c in coords]).sum(dim=0)
    return distance <= 1


@lru_cache(maxsize=None)
def neighborhood_offsets(
    connectivity: Connectivity, ndim: int
) -> Tuple[Tuple[int, ...], ...]:
    """Nonzero unit offsets of the elementary structuring element.

    Parameters
    ----------
    connectivity : {"face", "full"}
        Neighborhood type, see :func:`structuring_element`.
    ndim : int
        Number of spatial dimensions.

    Returns
    -------
    tuple of tuple of int
        Offsets in lexicographic order, excluding the zero offset. There are
        ``2 * ndim`` offsets for ``"face"`` and ``3 ** ndim - 1`` for
        ``"full"``.

    Examples
    --------
    >>> neighborhood_offsets("face", 2)
    ((-1, 0), (0, -1), (0, 1), (1, 0))
    """
    se = structuring_element(connectivity, ndim)
    center = (1,) * ndim
    return tuple(
        tuple(c - 1 for c in position)
        for position in (tuple(p) for p in se.nonzero().tolist())
        if position != center
    )
