"""Interactive prompting for cosmological parameters."""
from __future__ import annotations

import sys
from typing import Callable, Optional, TextIO

from cosmic.models.cosmology import CosmologyParameters
from cosmic.utils.validation import parse_numeric


def prompt_for_param(
    description: str,
    default: float,
    *,
    input_fn: Callable[[str], str] = input,
    err: Optional[TextIO] = None,
) -> float:
    """Ask for a number, returning ``default`` when the reply is empty.

    Non-numeric replies are reported on ``err`` and the question is repeated.
    End of input keeps the default.
    """
    err = err if err is not None else sys.stderr
    while True:
        try:
            reply = input_fn(f"{description} ({default:g}): ").strip()
        except EOFError:
            return default
        if not reply:
            return default
        try:
            return parse_numeric(reply, description)
        except ValueError:
            print("  Not a valid number", file=err)


def get_cosmology_from_user(
    current: CosmologyParameters,
    *,
    input_fn: Callable[[str], str] = input,
    err: Optional[TextIO] = None,
) -> CosmologyParameters:
    """Prompt for H0, Omega_m and Omega_lambda, offering ``current`` as defaults."""
    err = err if err is not None else sys.stderr
    while True:
        H0 = prompt_for_param("Hubble constant", current.H0, input_fn=input_fn, err=err)
        if H0 > 0:
            break
        print("  The Hubble constant must be > 0", file=err)
    while True:
        Omega_m = prompt_for_param("Omega matter", current.Omega_m, input_fn=input_fn, err=err)
        if Omega_m >= 0:
            break
        print("  Omega matter must be >= 0", file=err)
    Omega_lambda = prompt_for_param("Omega lambda", current.Omega_lambda, input_fn=input_fn, err=err)
    return CosmologyParameters(H0, Omega_m, Omega_lambda)


__all__ = ["get_cosmology_from_user", "prompt_for_param"]
