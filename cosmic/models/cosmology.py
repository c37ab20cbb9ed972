"""Friedmann-Lemaitre-Robertson-Walker cosmology with matter, Lambda and curvature.

Distances follow Hogg (1999, astro-ph/9905116).  All integrals are evaluated
with :func:`cosmic.analysis.integration.romberg`; every quantity attached to a
redshift is produced by :func:`compute_state`, a pure function of the
parameter set and the redshift.  :class:`Cosmology` wraps that function in a
small mutable object with two transitions, ``set_parameters`` and
``set_redshift``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from cosmic.analysis.integration import romberg
from cosmic.utils.constants import (
    C_LIGHT,
    DEFAULT_H0,
    DEFAULT_OMEGA_LAMBDA,
    DEFAULT_OMEGA_M,
    G_CGS,
    KM_PER_MPC,
    KPC_PER_ARCSEC_PER_MPC,
    MACHINE_EPSILON,
    MPC3_PER_GPC3,
    SECONDS_PER_GYR,
)

# Below this value of sqrt(|Omega_k|) d_C / d_H the curved volume formulas
# lose digits to cancellation and the series form is used instead.
_VOLUME_SERIES_THETA = 1e-2


class CosmologyParameterError(ValueError):
    """Raised when H0, Omega_m or Omega_lambda are outside their valid range."""


class RedshiftError(ValueError):
    """Raised when a redshift is negative or not finite."""


def curvature_density(Omega_m: float, Omega_lambda: float) -> float:
    """Return ``1 - Omega_m - Omega_lambda``, snapped to zero within machine epsilon."""
    omega_k = 1.0 - Omega_m - Omega_lambda
    if abs(omega_k) <= MACHINE_EPSILON:
        return 0.0
    return omega_k


@dataclass(frozen=True)
class CosmologyParameters:
    """Immutable parameter set together with the quantities derived from it.

    ``age`` is the age of the universe today in seconds.
    """

    H0: float = DEFAULT_H0
    Omega_m: float = DEFAULT_OMEGA_M
    Omega_lambda: float = DEFAULT_OMEGA_LAMBDA
    Omega_k: float = field(init=False)
    q0: float = field(init=False)
    d_H: float = field(init=False)
    age: float = field(init=False, repr=False)

    def __post_init__(self) -> None:
        H0 = float(self.H0)
        Omega_m = float(self.Omega_m)
        Omega_lambda = float(self.Omega_lambda)
        if not math.isfinite(H0) or H0 <= 0:
            raise CosmologyParameterError(f"The Hubble constant must be > 0 (got {self.H0!r})")
        if not math.isfinite(Omega_m) or Omega_m < 0:
            raise CosmologyParameterError(f"Omega matter must be >= 0 (got {self.Omega_m!r})")
        if not math.isfinite(Omega_lambda):
            raise CosmologyParameterError(f"Omega lambda must be finite (got {self.Omega_lambda!r})")

        object.__setattr__(self, "H0", H0)
        object.__setattr__(self, "Omega_m", Omega_m)
        object.__setattr__(self, "Omega_lambda", Omega_lambda)
        object.__setattr__(self, "Omega_k", curvature_density(Omega_m, Omega_lambda))
        object.__setattr__(self, "q0", 0.5 * Omega_m - Omega_lambda)
        object.__setattr__(self, "d_H", C_LIGHT / H0)
        object.__setattr__(self, "age", age_of_universe(self))

    @property
    def is_flat(self) -> bool:
        return self.Omega_k == 0.0

    @property
    def age_gyr(self) -> float:
        return self.age / SECONDS_PER_GYR

    def as_dict(self) -> dict:
        return {
            "H0": self.H0,
            "Omega_m": self.Omega_m,
            "Omega_lambda": self.Omega_lambda,
            "Omega_k": self.Omega_k,
            "q0": self.q0,
        }


def expansion_rate(z, parameters: CosmologyParameters):
    """Dimensionless Hubble parameter :math:`E(z) = H(z) / H_0`.

    Accepts scalars or :class:`numpy.ndarray` redshifts.  Where
    :math:`E^2(z) < 0` (a bounce cosmology) the result is NaN.
    """
    zp1 = 1.0 + z
    e_squared = (
        parameters.Omega_m * zp1 ** 3
        + parameters.Omega_k * zp1 ** 2
        + parameters.Omega_lambda
    )
    with np.errstate(invalid="ignore"):
        return np.sqrt(e_squared)


def comoving_distance(z: float, parameters: CosmologyParameters) -> float:
    """Line-of-sight comoving distance :math:`D_C(z)` in Mpc."""
    if z == 0:
        return 0.0

    def integrand(zp):
        return 1.0 / expansion_rate(zp, parameters)

    return parameters.d_H * romberg(integrand, 0.0, z, vec_func=True).value


def transverse_comoving_distance(d_C: float, parameters: CosmologyParameters) -> float:
    """Transverse comoving distance :math:`D_M` in Mpc from :math:`D_C`."""
    omega_k = parameters.Omega_k
    d_H = parameters.d_H
    if omega_k > 0:
        sqrt_ok = math.sqrt(omega_k)
        return d_H / sqrt_ok * math.sinh(sqrt_ok * d_C / d_H)
    if omega_k < 0:
        sqrt_ok = math.sqrt(-omega_k)
        return d_H / sqrt_ok * math.sin(sqrt_ok * d_C / d_H)
    return d_C


def comoving_volume(d_C: float, parameters: CosmologyParameters) -> float:
    """All-sky comoving volume out to comoving distance ``d_C``, in Gpc^3.

    The curved cases are written in terms of
    ``theta = sqrt(|Omega_k|) d_C / d_H``, which stays valid past the equator
    of a closed universe.
    """
    omega_k = parameters.Omega_k
    flat_volume = 4.0 / 3.0 * math.pi * d_C ** 3
    if omega_k == 0:
        return flat_volume / MPC3_PER_GPC3

    sqrt_ok = math.sqrt(abs(omega_k))
    theta = sqrt_ok * d_C / parameters.d_H
    if theta < _VOLUME_SERIES_THETA:
        sign = 1.0 if omega_k > 0 else -1.0
        theta2 = theta * theta
        volume = flat_volume * (1.0 + sign * theta2 / 5.0 + 2.0 * theta2 * theta2 / 105.0)
    else:
        prefactor = 2.0 * math.pi * parameters.d_H ** 3 / sqrt_ok ** 3
        if omega_k > 0:
            volume = prefactor * (math.sinh(theta) * math.cosh(theta) - theta)
        else:
            volume = prefactor * (theta - math.sin(theta) * math.cos(theta))
    return volume / MPC3_PER_GPC3


def lookback_time(z: float, parameters: CosmologyParameters) -> float:
    """Lookback time to redshift ``z`` in seconds."""
    if z == 0:
        return 0.0

    def integrand(zp):
        return 1.0 / ((1.0 + zp) * expansion_rate(zp, parameters))

    return romberg(integrand, 0.0, z, vec_func=True).value / parameters.H0 * KM_PER_MPC


def age_of_universe(parameters: CosmologyParameters) -> float:
    """Age of the universe today in seconds.

    The integral over ``z`` in ``[0, inf)`` is mapped onto ``x`` in ``[0, 1)``
    with ``z = x / (1 - x)``; the upper bound stops one machine epsilon short
    of 1.
    """

    def integrand(x):
        z = x / (1.0 - x)
        return 1.0 / ((1.0 + z) * expansion_rate(z, parameters) * (1.0 - x) ** 2)

    upper = 1.0 - MACHINE_EPSILON
    return romberg(integrand, 0.0, upper, vec_func=True).value / parameters.H0 * KM_PER_MPC


def critical_density(z: float, parameters: CosmologyParameters) -> float:
    """Critical density at redshift ``z`` in g cm^-3."""
    hubble_rate = parameters.H0 / KM_PER_MPC  # s^-1
    return (
        3.0 / (8.0 * math.pi) * hubble_rate ** 2 / G_CGS
        * (parameters.Omega_lambda + (1.0 + z) ** 3 * parameters.Omega_m)
    )


def angular_scale(d_A: float) -> float:
    """Projected size in kpc of one arcsecond at angular-diameter distance ``d_A`` (Mpc)."""
    return d_A * KPC_PER_ARCSEC_PER_MPC


@dataclass(frozen=True)
class CosmologyState:
    """Every redshift-dependent quantity for one ``(parameters, z)`` pair.

    Distances are in Mpc, ``V_C`` in Gpc^3, ``t_L`` in seconds, ``scale`` in
    kpc per arcsec and ``rho_crit`` in g cm^-3.
    """

    parameters: CosmologyParameters
    z: float
    d_C: float
    d_M: float
    d_A: float
    d_L: float
    V_C: float
    t_L: float
    scale: float
    rho_crit: float

    @property
    def age_at_z(self) -> float:
        return self.parameters.age - self.t_L

    @property
    def lookback_gyr(self) -> float:
        return self.t_L / SECONDS_PER_GYR

    @property
    def age_at_z_gyr(self) -> float:
        return self.age_at_z / SECONDS_PER_GYR

    @property
    def inverse_scale(self) -> float:
        """Arcseconds subtended by 1 kpc; infinite at ``z = 0``."""
        if self.scale == 0:
            return float("inf")
        return 1.0 / self.scale


def compute_state(parameters: CosmologyParameters, z: float) -> CosmologyState:
    """Evaluate every distance, time, volume and density quantity at redshift ``z``."""
    z = float(z)
    if not math.isfinite(z) or z < 0:
        raise RedshiftError(f"The redshift must be a number >= 0 (got {z!r})")

    rho_crit = critical_density(z, parameters)
    if z == 0:
        return CosmologyState(parameters, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0, rho_crit)

    d_C = comoving_distance(z, parameters)
    d_M = transverse_comoving_distance(d_C, parameters)
    d_A = d_M / (1.0 + z)
    return CosmologyState(
        parameters=parameters,
        z=z,
        d_C=d_C,
        d_M=d_M,
        d_A=d_A,
        d_L=d_M * (1.0 + z),
        V_C=comoving_volume(d_C, parameters),
        t_L=lookback_time(z, parameters),
        scale=angular_scale(d_A),
        rho_crit=rho_crit,
    )


class Cosmology:
    """Cosmological model evaluated at a single source redshift.

    Defaults are the Planck 2013 parameters.  Both mutators recompute the
    full :class:`CosmologyState` from scratch.
    """

    def __init__(
        self,
        H0: float = DEFAULT_H0,
        Omega_m: float = DEFAULT_OMEGA_M,
        Omega_lambda: float = DEFAULT_OMEGA_LAMBDA,
        *,
        parameters: Optional[CosmologyParameters] = None,
    ):
        if parameters is None:
            parameters = CosmologyParameters(H0, Omega_m, Omega_lambda)
        self._parameters = parameters
        self._state = compute_state(parameters, 0.0)

    @classmethod
    def from_parameters(cls, parameters: CosmologyParameters) -> "Cosmology":
        return cls(parameters=parameters)

    def __repr__(self) -> str:
        p = self._parameters
        return (
            f"Cosmology(H0={p.H0!r}, Omega_m={p.Omega_m!r}, "
            f"Omega_lambda={p.Omega_lambda!r}, z={self._state.z!r})"
        )

    def set_parameters(self, H0: float, Omega_m: float, Omega_lambda: float) -> None:
        """Replace the parameter set and re-evaluate the current redshift with it."""
        parameters = CosmologyParameters(H0, Omega_m, Omega_lambda)
        self._state = compute_state(parameters, self._state.z)
        self._parameters = parameters

    def set_redshift(self, z: float) -> None:
        self._state = compute_state(self._parameters, z)

    def hubble_parameter(self, z: Optional[float] = None) -> float:
        """:math:`H(z)` in km/s/Mpc, at the current redshift by default."""
        if z is None:
            z = self._state.z
        return self._parameters.H0 * float(expansion_rate(z, self._parameters))

    @property
    def parameters(self) -> CosmologyParameters:
        return self._parameters

    @property
    def state(self) -> CosmologyState:
        return self._state

    @property
    def z(self) -> float:
        return self._state.z

    @property
    def d_L(self) -> float:
        return self._state.d_L

    @property
    def d_A(self) -> float:
        return self._state.d_A

    @property
    def d_C(self) -> float:
        return self._state.d_C

    @property
    def d_M(self) -> float:
        return self._state.d_M

    @property
    def V_C(self) -> float:
        return self._state.V_C

    @property
    def scale(self) -> float:
        return self._state.scale

    @property
    def rho_crit(self) -> float:
        return self._state.rho_crit

    @property
    def lookback(self) -> float:
        """Lookback time to the current redshift in seconds."""
        return self._state.t_L

    @property
    def age(self) -> float:
        """Age of the universe today in seconds."""
        return self._parameters.age

    @property
    def age_at_z(self) -> float:
        """Age of the universe at the current redshift in seconds."""
        return self._state.age_at_z


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
