"""Geodesic erosion and reconstruction by erosion."""

import warnings
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, NamedTuple, Optional

import torch
from torch import Tensor

from torchgeodesic.morphology._connectivity import Connectivity
from torchgeodesic.morphology._exceptions import (
    ConvergenceError,
    RegionEnlargedWarning,
)
from torchgeodesic.morphology._parallel import _geodesic_erosion_pass
from torchgeodesic.morphology._region import Region
from torchgeodesic.morphology._region_planning import (
    RunMode,
    plan_input_region,
)
from torchgeodesic.morphology._validation import (
    check_images,
    check_num_workers,
    check_out,
    check_out_disjoint,
)


class GeodesicErosionResult(NamedTuple):
    """Result of :func:`geodesic_erosion`.

    Parameters
    ----------
    output : Tensor
        Eroded image over the planned output region.
    converged : bool
        Whether the last pass left every pixel unchanged.
    num_iterations : int
        Number of erosion passes executed, including the final pass that
        detected the fixed point.
    """

    output: Tensor
    converged: bool
    num_iterations: int


def _count_changed(current: Tensor, previous: Tensor) -> int:
    changed = current != previous
    if current.is_floating_point():
        changed &= ~(current.isnan() & previous.isnan())
    return int(changed.sum())


def geodesic_erosion(
    marker: Tensor,
    mask: Tensor,
    *,
    connectivity: Connectivity = "face",
    mode: RunMode = "convergence",
    region: Optional[Region] = None,
    max_iterations: Optional[int] = None,
    num_workers: Optional[int] = None,
    callback: Optional[Callable[[int, Tensor], Optional[bool]]] = None,
    out: Optional[Tensor] = None,
) -> GeodesicErosionResult:
    r"""Grayscale geodesic erosion, optionally iterated to reconstruction.

    The marker is eroded with the elementary structuring element and the
    result is clamped from below by the mask:

    .. math::
        \varepsilon^{(1)}_g(f) = \max(\varepsilon_B(f), g)

    Run to convergence, the operation is reconstruction by erosion:

    .. math::
        R^{\varepsilon}_g(f) = \varepsilon^{(k)}_g(f)
        \quad\text{with}\quad
        \varepsilon^{(k+1)}_g(f) = \varepsilon^{(k)}_g(f)

    Parameters
    ----------
    marker : Tensor
        Image to erode, with at least one dimension. Must be pointwise greater
        than or equal to ``mask``. This is not checked; violating it gives
        meaningless values but no error.
    mask : Tensor
        Lower bound with the same shape and dtype as ``marker``. It is held
        fixed across iterations.
    connectivity : {"face", "full"}, optional
        ``"face"`` uses the center and its face neighbors. ``"full"`` adds
        edge and vertex neighbors; use it for structures one pixel wide.
        Default: ``"face"``.
    mode : {"single_iteration", "convergence"}, optional
        Run one geodesic erosion or iterate to the fixed point.
        Default: ``"convergence"``.
    region : Region, optional
        Output region of interest, clipped to the image domain. Only honored
        by ``"single_iteration"``; under ``"convergence"`` the whole image
        is computed and a :class:`RegionEnlargedWarning` is emitted if a
        smaller region was requested. Default: the whole image.
    max_iterations : int, optional
        Safety cap on the number of passes under ``"convergence"``. Reaching
        it without a fixed point raises :class:`ConvergenceError`. Default:
        no cap.
    num_workers : int, optional
        Number of threads (and tiles) per pass. Default:
        ``torch.get_num_threads()``.
    callback : callable, optional
        Called as ``callback(iteration, output)`` after each pass that has
        not converged. Returning ``True`` stops the iteration; the last
        complete pass is returned with ``converged=False``. ``output`` is
        overwritten by later passes; clone it to keep it.
    out : Tensor, optional
        Output buffer with the shape of the planned output region. Under
        ``"single_iteration"`` it must not share memory with ``marker``.

    Returns
    -------
    GeodesicErosionResult
        Output image, convergence flag and number of passes.

    Examples
    --------
    Fill the pits of a 1D profile, seeded from its left end:

    >>> mask = torch.tensor([2.0, 1.0, 3.0, 0.0, 3.0])
    >>> marker = torch.tensor([2.0, 5.0, 5.0, 5.0, 5.0])
    >>> result = geodesic_erosion(marker, mask)
    >>> result.output
    tensor([2., 2., 3., 3., 3.])
    >>> result.num_iterations
    5

    Notes
    -----
    - Every pass is pointwise less than or equal to the previous one and
      greater than or equal to ``mask``, so the iteration terminates.
    - Passes are multi-threaded over disjoint tiles; iterations are
      sequential and share one thread pool.
    - No autograd support.

    See Also
    --------
    geodesic_erosion_pass : A single multi-threaded pass.
    plan_input_region : Regions of marker and mask that are read.

    References
    ----------
    .. [1] P. Soille, "Morphological Image Analysis: Principles and
       Applications", 2nd ed., Springer, 2003, Chapter 6.
    """
    check_images(marker, mask, connectivity, "geodesic_erosion")
    num_workers = check_num_workers(num_workers, "geodesic_erosion")
    if max_iterations is not None and max_iterations < 1:
        raise ValueError(
            f"geodesic_erosion: max_iterations must be at least 1, "
            f"got {max_iterations}"
        )

    shape = tuple(marker.shape)
    plan = plan_input_region(shape, region, mode=mode)
    check_out(out, marker, plan.output_region.size, "geodesic_erosion")

    if mode == "single_iteration":
        check_out_disjoint(out, marker, "geodesic_erosion")
        output = _geodesic_erosion_pass(
            marker,
            mask,
            plan.output_region,
            connectivity=connectivity,
            num_workers=num_workers,
            executor=None,
            out=out,
        )
        before = marker[plan.output_region.slices()]
        return GeodesicErosionResult(
            output=output,
            converged=_count_changed(output, before) == 0,
            num_iterations=1,
        )

    if region is not None and region.clip(shape) != plan.output_region:
        warnings.warn(
            f"geodesic_erosion: requested region {region} was enlarged to "
            f"the full image {plan.output_region} to run to convergence",
            RegionEnlargedWarning,
            stacklevel=2,
        )

    # Two buffers alternate as marker and output; the caller's marker is
    # never written.
    buffers = [
        torch.empty(shape, dtype=marker.dtype, device=marker.device)
        for _ in range(2)
    ]

    previous = marker
    num_iterations = 0
    num_changed = 0
    converged = False

    with ThreadPoolExecutor(max_workers=num_workers) as executor:
        while True:
            if max_iterations is not None and num_iterations >= max_iterations:
                raise ConvergenceError(num_iterations, num_changed)

            current = _geodesic_erosion_pass(
                previous,
                mask,
                plan.output_region,
                connectivity=connectivity,
                num_workers=num_workers,
                executor=executor,
                out=buffers[num_iterations % 2],
            )
            num_iterations += 1

            num_changed = _count_changed(current, previous)
            if num_changed == 0:
                converged = True
                break

            if callback is not None and callback(num_iterations, current):
                break

            previous = current

    if out is not None:
        out.copy_(current)
        current = out

    return GeodesicErosionResult(
        output=current,
        converged=converged,
        num_iterations=num_iterations,
    )
