"""Numerical integration used by the cosmology model."""

from .integration import RombergResult, integrate, romberg

__all__ = [
    "RombergResult",
    "integrate",
    "romberg",
]
