"""Romberg quadrature for one-dimensional definite integrals."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np

from cosmic.utils.constants import ROMBERG_MAX_ROWS, ROMBERG_TOLERANCE

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class RombergResult:
    """Outcome of a Romberg integration.

    ``error`` is the absolute difference between the last two diagonal
    entries of the Romberg table; it is an estimate, not a bound.
    """

    value: float
    error: float
    rows: int
    evaluations: int
    converged: bool


def _midpoint_sum(func, a: float, h: float, n_panels: int, vec_func: bool) -> float:
    if vec_func:
        points = a + h * np.arange(1, n_panels, 2, dtype=float)
        return float(np.sum(func(points)))
    return float(sum(func(a + k * h) for k in range(1, n_panels, 2)))


def romberg(
    func: Callable[[float], float],
    a: float,
    b: float,
    *,
    tol: float = ROMBERG_TOLERANCE,
    max_rows: int = ROMBERG_MAX_ROWS,
    vec_func: bool = False,
) -> RombergResult:
    """Integrate ``func`` over ``[a, b]`` by Richardson-extrapolated trapezoids.

    Parameters
    ----------
    func:
        Real-valued function of one real argument.  With ``vec_func`` it must
        also accept a :class:`numpy.ndarray` and return an array of the same
        shape; the midpoints of each refinement row are then evaluated in a
        single call.
    a, b:
        Integration bounds with ``a <= b``.
    tol:
        Absolute tolerance on the difference between successive diagonal
        entries of the Romberg table.
    max_rows:
        Maximum number of rows of the table, including the initial
        single-panel trapezoid.

    Returns
    -------
    RombergResult
        The most refined diagonal estimate.  When ``max_rows`` is exhausted
        the estimate is returned anyway with ``converged=False``.
    """
    if max_rows < 2:
        raise ValueError("Romberg integration needs at least two rows")

    h = float(b - a)
    table = np.zeros((max_rows, max_rows), dtype=float)
    table[0, 0] = 0.5 * h * (func(a) + func(b))
    evaluations = 2
    n_panels = 1
    error = float("inf")

    for i in range(1, max_rows):
        h *= 0.5
        n_panels *= 2
        table[i, 0] = 0.5 * table[i - 1, 0] + h * _midpoint_sum(func, a, h, n_panels, vec_func)
        evaluations += n_panels // 2

        factor = 1.0
        for j in range(1, i + 1):
            factor *= 4.0
            table[i, j] = table[i, j - 1] + (table[i, j - 1] - table[i - 1, j - 1]) / (factor - 1.0)

        error = abs(table[i, i] - table[i - 1, i - 1])
        if error < tol:
            return RombergResult(float(table[i, i]), float(error), i + 1, evaluations, True)
        if not np.isfinite(table[i, i]):
            _LOGGER.debug("Romberg integration over [%g, %g] hit a non-finite value", a, b)
            return RombergResult(float(table[i, i]), float(error), i + 1, evaluations, False)

    _LOGGER.debug(
        "Romberg integration over [%g, %g] stopped after %d rows (error estimate %.3e)",
        a, b, max_rows, error,
    )
    last = max_rows - 1
    return RombergResult(float(table[last, last]), float(error), max_rows, evaluations, False)


def integrate(func: Callable[[float], float], a: float, b: float, *, vec_func: bool = False) -> float:
    """Return the Romberg estimate of the integral of ``func`` from ``a`` to ``b``."""
    return romberg(func, a, b, vec_func=vec_func).value


__all__ = ["RombergResult", "integrate", "romberg"]
