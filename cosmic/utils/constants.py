"""Physical constants and default cosmological parameters.

Every value here is fixed for the lifetime of the process.  The
``COSMO_CONSTANTS_VERSION`` flag should be bumped whenever any of the
numerical values below are updated so that saved batch tables can be traced
back to the constants that produced them.
"""
from __future__ import annotations

import math

import numpy as np

COSMO_CONSTANTS_VERSION = "2013-planck-cgs"
C_LIGHT = 2.99792458e5  # km/s
G_CGS = 6.67259e-8  # cm^3 g^-1 s^-2
KM_PER_MPC = 3.08567758e19  # km
SECONDS_PER_YEAR = 3.1556926e7  # tropical year
SECONDS_PER_GYR = SECONDS_PER_YEAR * 1e9
MPC3_PER_GPC3 = 1e9
MACHINE_EPSILON = float(np.finfo(float).eps)

# 1 radian = 648000/pi arcsec and 1 Mpc = 1000 kpc
KPC_PER_ARCSEC_PER_MPC = math.pi / 648.0

# Planck 2013 + WMAP polarisation, Table 2 of Planck XVI
DEFAULT_H0 = 67.04  # km/s/Mpc
DEFAULT_OMEGA_M = 0.3183
DEFAULT_OMEGA_LAMBDA = 0.6817

ROMBERG_TOLERANCE = 1e-8
ROMBERG_MAX_ROWS = 25
