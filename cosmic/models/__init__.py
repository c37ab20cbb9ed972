"""Cosmology model exposed by the calculator."""

from .cosmology import (
    Cosmology,
    CosmologyParameterError,
    CosmologyParameters,
    CosmologyState,
    RedshiftError,
    age_of_universe,
    angular_scale,
    comoving_distance,
    comoving_volume,
    compute_state,
    critical_density,
    curvature_density,
    expansion_rate,
    lookback_time,
    transverse_comoving_distance,
)

__all__ = [
    "Cosmology",
    "CosmologyParameterError",
    "CosmologyParameters",
    "CosmologyState",
    "RedshiftError",
    "age_of_universe",
    "angular_scale",
    "comoving_distance",
    "comoving_volume",
    "compute_state",
    "critical_density",
    "curvature_density",
    "expansion_rate",
    "lookback_time",
    "transverse_comoving_distance",
]
