"""torchgeodesic: multi-threaded geodesic morphology for PyTorch tensors."""

from . import morphology

__all__ = [
    "morphology",
]

__version__ = "0.1.0"
