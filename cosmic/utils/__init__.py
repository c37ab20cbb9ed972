"""Utility exports for constants and input validation."""
from .constants import (
    C_LIGHT,
    COSMO_CONSTANTS_VERSION,
    DEFAULT_H0,
    DEFAULT_OMEGA_LAMBDA,
    DEFAULT_OMEGA_M,
    G_CGS,
    KM_PER_MPC,
    MACHINE_EPSILON,
    SECONDS_PER_GYR,
    SECONDS_PER_YEAR,
)
from .validation import (
    ConfigValidationError,
    is_numeric,
    parse_numeric,
    require_existing_file,
    resolve_path,
)

__all__ = [
    'C_LIGHT',
    'COSMO_CONSTANTS_VERSION',
    'ConfigValidationError',
    'DEFAULT_H0',
    'DEFAULT_OMEGA_LAMBDA',
    'DEFAULT_OMEGA_M',
    'G_CGS',
    'KM_PER_MPC',
    'MACHINE_EPSILON',
    'SECONDS_PER_GYR',
    'SECONDS_PER_YEAR',
    'is_numeric',
    'parse_numeric',
    'require_existing_file',
    'resolve_path',
]
