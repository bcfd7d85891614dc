"""Input regions required to compute a geodesic erosion output region."""

from typing import Literal, NamedTuple, Optional, Tuple

from torchgeodesic.morphology._region import Region

RunMode = Literal["single_iteration", "convergence"]

_RUN_MODES = ("single_iteration", "convergence")


class RegionPlan(NamedTuple):
    """Regions of each image involved in a geodesic erosion.

    Parameters
    ----------
    output_region : Region
        Region of the output that will be computed.
    marker_region : Region
        Region of the marker that must be available.
    mask_region : Region
        Region of the mask that must be available.
    """

    output_region: Region
    marker_region: Region
    mask_region: Region


def plan_input_region(
    shape: Tuple[int, ...],
    requested_region: Optional[Region] = None,
    *,
    mode: RunMode,
) -> RegionPlan:
    """Plan the marker and mask regions needed for a requested output region.

    Parameters
    ----------
    shape : Tuple[int, ...]
        Shape of the marker and mask images.
    requested_region : Region, optional
        Requested output region. Clipped to the image domain; a region
        outside the domain is not an error. Default: the whole image.
    mode : {"single_iteration", "convergence"}
        ``"single_iteration"`` needs the requested region of the mask and
        the requested region dilated by one (clipped) of the marker.
        ``"convergence"`` needs, and produces, the whole image: every
        iteration can carry values across the entire domain, so a
        sub-region computed from partial data would not reach the same
        fixed point.

    Returns
    -------
    RegionPlan
        Output, marker and mask regions.

    Examples
    --------
    >>> plan_input_region((10, 10), Region((4, 4), (2, 2)), mode="single_iteration")
    RegionPlan(output_region=Region(index=(4, 4), size=(2, 2)), marker_region=Region(index=(3, 3), size=(4, 4)), mask_region=Region(index=(4, 4), size=(2, 2)))
    """
    if mode not in _RUN_MODES:
        raise ValueError(
            f"plan_input_region: mode must be one of {list(_RUN_MODES)}, "
            f"got '{mode}'"
        )

    full = Region.full(shape)

    if mode == "convergence":
        return RegionPlan(output_region=full, marker_region=full, mask_region=full)

    if requested_region is None:
        requested_region = full
    requested_region = requested_region.clip(shape)
    if requested_region.is_empty():
        return RegionPlan(requested_region, requested_region, requested_region)

    return RegionPlan(
        output_region=requested_region,
        marker_region=requested_region.dilate(1).clip(shape),
        mask_region=requested_region,
    )
