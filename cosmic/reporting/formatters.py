"""Human-readable, HTML and tabular renderings of cosmology results."""
from __future__ import annotations

from typing import Iterable, TextIO

import pandas as pd

from cosmic.models.cosmology import CosmologyParameters, CosmologyState

RESULT_COLUMNS = ['z', 'd_A', 'd_L', 'd_C', 'scale', '1/scale', 'tL']
DISTANCE_COLUMNS = [
    'Angular Diameter Distance (Mpc)',
    'Luminosity Distance (Mpc)',
    'Comoving Radial Distance (Mpc)',
    'Comoving Transverse Distance (Mpc)',
]
SEPARATORS = {'tab': '\t', 'comma': ','}


def format_parameters(parameters: CosmologyParameters, leader: str = "") -> str:
    """One-line summary of the parameter set; ``Omega_k`` only when nonzero."""
    text = (
        f"{leader}H_0 = {parameters.H0:g}, Omega_m = {parameters.Omega_m:g}, "
        f"Omega_L = {parameters.Omega_lambda:g}"
    )
    if not parameters.is_flat:
        text += f", Omega_k = {parameters.Omega_k:g}"
    return text + f"  (q_0 = {parameters.q0:g})"


def format_parameters_html(parameters: CosmologyParameters, leader: str = "") -> str:
    text = (
        f"{leader}H<sub>0</sub> = {parameters.H0:g}"
        f", &#x03A9;<sub>m</sub> = {parameters.Omega_m:g}"
        f", &#x03A9;<sub>&#x039B;</sub> = {parameters.Omega_lambda:g}"
    )
    if not parameters.is_flat:
        text += f", &#x03A9;<sub>k</sub> = {parameters.Omega_k:g}"
    return text + f"  (q<sub>0</sub> = {parameters.q0:g})"


def _report_rows(state: CosmologyState):
    """Label, value and unit for each line of the long report."""
    rows = [
        ("age of the Universe at z", f"{state.age_at_z_gyr:g}", "Gyr"),
        ("lookback time to z", f"{state.lookback_gyr:g}", "Gyr"),
        ("angular diameter distance d_A", f"{state.d_A:g}", "Mpc"),
        ("luminosity distance d_L", f"{state.d_L:g}", "Mpc"),
        ("comoving radial distance d_C", f"{state.d_C:g}", "Mpc"),
    ]
    if state.d_M != state.d_C:
        rows.append(("comoving transverse distance", f"{state.d_M:g}", "Mpc"))
    rows.append(("comoving volume out to z", f"{state.V_C:g}", "Gpc**3"))
    rows.append(("critical density at z", f"{state.rho_crit:.4e}", "g cm**-3"))
    return rows


def format_long(state: CosmologyState) -> str:
    """Multi-line plain-text report of every quantity at ``state.z``."""
    lines = [format_parameters(state.parameters), f"At z = {state.z:g}"]
    for label, value, unit in _report_rows(state):
        lines.append(f"  {label:<29} = {value} {unit}")
    lines.append(f"  1\" = {state.scale:.6f} kpc")
    if state.scale:
        lines.append(f"  1 kpc = {state.inverse_scale:.6f}\"")
    return "\n".join(lines) + "\n"


def format_html(state: CosmologyState) -> str:
    """HTML rendering of :func:`format_long`."""
    html_labels = {
        "angular diameter distance d_A": "angular diameter distance d<sub>A</sub>",
        "luminosity distance d_L": "luminosity distance d<sub>L</sub>",
        "comoving radial distance d_C": "comoving radial distance d<sub>C</sub>",
    }
    html_units = {"Gpc**3": "Gpc<sup>3</sup>", "g cm**-3": "g cm<sup>-3</sup>"}

    def row(label, value):
        return f"<tr><td>&nbsp;&nbsp;{label}</td><td>&nbsp;=&nbsp;{value}</td></tr>"

    parts = [
        f"<p>{format_parameters_html(state.parameters)}<br />At z = {state.z:g}</p>",
        '<table cellpadding="0" cellspacing="0">',
    ]
    for label, value, unit in _report_rows(state):
        parts.append(row(html_labels.get(label, label), f"{value} {html_units.get(unit, unit)}"))
    parts.append(row("1\"", f"{state.scale:.6f} kpc"))
    if state.scale:
        parts.append(row("1 kpc", f"{state.inverse_scale:.6f}\""))
    parts.append("</table>")
    return "\n".join(parts) + "\n"


def results_table(states: Iterable[CosmologyState]) -> pd.DataFrame:
    """Batch-mode columns: redshift, d_A, d_L, d_C, scale, 1/scale and lookback time (Gyr)."""
    rows = []
    for state in states:
        rows.append({
            'z': state.z,
            'd_A': state.d_A,
            'd_L': state.d_L,
            'd_C': state.d_C,
            'scale': state.scale,
            '1/scale': state.inverse_scale,
            'tL': state.lookback_gyr,
        })
    return pd.DataFrame(rows, columns=RESULT_COLUMNS)


def write_results_table(
    parameters: CosmologyParameters,
    states: Iterable[CosmologyState],
    handle: TextIO,
    separator: str = 'tab',
) -> pd.DataFrame:
    """Write a commented parameter line and the batch table to ``handle``.

    ``separator`` is ``'tab'`` or ``'comma'``.  Returns the table written.
    """
    try:
        sep = SEPARATORS[separator]
    except KeyError:
        raise ValueError(f"Unknown separator {separator!r}; expected one of {sorted(SEPARATORS)}") from None
    table = results_table(states)
    handle.write(format_parameters(parameters, leader="# ") + "\n")
    handle.write("# ")
    table.to_csv(handle, sep=sep, index=False, float_format='%.6g', lineterminator='\n')
    return table


def distance_table(states: Iterable[CosmologyState]) -> pd.DataFrame:
    """The four distance measures per redshift, in Mpc."""
    rows = [
        {
            DISTANCE_COLUMNS[0]: state.d_A,
            DISTANCE_COLUMNS[1]: state.d_L,
            DISTANCE_COLUMNS[2]: state.d_C,
            DISTANCE_COLUMNS[3]: state.d_M,
        }
        for state in states
    ]
    return pd.DataFrame(rows, columns=DISTANCE_COLUMNS)


__all__ = [
    'DISTANCE_COLUMNS',
    'RESULT_COLUMNS',
    'SEPARATORS',
    'distance_table',
    'format_html',
    'format_long',
    'format_parameters',
    'format_parameters_html',
    'results_table',
    'write_results_table',
]
