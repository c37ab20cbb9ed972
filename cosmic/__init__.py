"""Cosmological distance calculator."""

__version__ = "2.2.0"

from .analysis.integration import RombergResult, integrate, romberg
from .models.cosmology import (
    Cosmology,
    CosmologyParameterError,
    CosmologyParameters,
    CosmologyState,
    RedshiftError,
    compute_state,
)

__all__ = [
    "Cosmology",
    "CosmologyParameterError",
    "CosmologyParameters",
    "CosmologyState",
    "RedshiftError",
    "RombergResult",
    "__version__",
    "compute_state",
    "integrate",
    "romberg",
]
