"""Renderers for cosmology results."""

from .formatters import (
    DISTANCE_COLUMNS,
    RESULT_COLUMNS,
    SEPARATORS,
    distance_table,
    format_html,
    format_long,
    format_parameters,
    format_parameters_html,
    results_table,
    write_results_table,
)

__all__ = [
    "DISTANCE_COLUMNS",
    "RESULT_COLUMNS",
    "SEPARATORS",
    "distance_table",
    "format_html",
    "format_long",
    "format_parameters",
    "format_parameters_html",
    "results_table",
    "write_results_table",
]
