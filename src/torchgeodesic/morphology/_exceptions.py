"""Exceptions for geodesic morphology."""


class GeodesicErosionError(Exception):
    """Base exception for geodesic erosion errors."""

    pass


class ConvergenceError(GeodesicErosionError):
    """Reconstruction did not reach a fixed point within ``max_iterations``.

    Given a marker that is pointwise greater than or equal to the mask the
    iteration always stabilizes, so this indicates an internal failure rather
    than a problem with the data.
    """

    def __init__(self, num_iterations: int, num_changed: int):
        self.num_iterations = num_iterations
        self.num_changed = num_changed
        super().__init__(
            f"geodesic_erosion: no fixed point after {num_iterations} "
            f"iterations ({num_changed} pixels still changing)"
        )


class RegionEnlargedWarning(UserWarning):
    """Requested output region was enlarged to the full image domain."""

    pass
