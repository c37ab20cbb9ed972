"""Readers for batch redshift files and parameterised redshift lists."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional

import numpy as np

from cosmic.models.cosmology import CosmologyParameters
from cosmic.utils.validation import ConfigValidationError, parse_numeric, require_existing_file


class RedshiftBatch:
    """Redshifts read from a plain-text file, one value per line.

    Blank lines are skipped.  Any other line that is not a plain decimal
    number, or that holds a negative redshift, rejects the whole file with a
    :class:`ConfigValidationError` naming the offending line.
    """

    def __init__(self, filename=None, config=None):
        self.config = config or {}
        self._config_base = Path(self.config.get('base_dir', '.'))
        self.z = np.array([], dtype=float)
        self.line_numbers = np.array([], dtype=int)
        self.source_file = None
        data_file = filename or self.config.get('file')
        if data_file:
            resolved = require_existing_file(
                data_file,
                base_dir=self._config_base,
                description='batch redshift file'
            )
            self.load_from_file(resolved)

    def load_from_file(self, filename):
        values = []
        lines = []
        with open(filename, 'r', encoding='utf-8') as handle:
            for line_number, raw in enumerate(handle, start=1):
                token = raw.strip()
                if not token:
                    continue
                try:
                    value = parse_numeric(token, 'redshift')
                except ValueError:
                    raise ConfigValidationError(
                        f"Non-numeric redshift found in batch file on line {line_number}: {token!r}"
                    ) from None
                if value < 0:
                    raise ConfigValidationError(
                        f"Negative redshift found in batch file on line {line_number}: {token!r}"
                    )
                values.append(value)
                lines.append(line_number)
        self.z = np.asarray(values, dtype=float)
        self.line_numbers = np.asarray(lines, dtype=int)
        self.source_file = str(filename)

    def count_points(self):
        return int(self.z.size)

    def __len__(self):
        return self.count_points()

    def __iter__(self) -> Iterator[float]:
        for value in self.z:
            yield float(value)

    def summary(self):
        count = self.count_points()
        return {
            'file': self.source_file,
            'count': count,
            'z_min': float(self.z.min()) if count else None,
            'z_max': float(self.z.max()) if count else None,
        }


@dataclass(frozen=True)
class ParameterisedRedshifts:
    """Cosmological parameters and the redshifts to evaluate them at."""

    parameters: CosmologyParameters
    z: np.ndarray
    source_file: Optional[str] = None


def read_parameterised_redshifts(filename, base_dir=None) -> ParameterisedRedshifts:
    """Read a ``H0 Omega_m Omega_lambda`` / ``N`` / ``z_1 ... z_N`` file.

    Tokens may be separated by any whitespace; the first three tokens are the
    cosmological parameters, the fourth is the number of redshifts that
    follow.
    """
    resolved = require_existing_file(filename, base_dir=base_dir, description='redshift parameter file')
    with open(resolved, 'r', encoding='utf-8') as handle:
        tokens = handle.read().split()

    if len(tokens) < 4:
        raise ConfigValidationError(
            f"{resolved}: expected 'H0 Omega_m Omega_lambda' followed by a redshift count"
        )
    values = []
    for name, token in zip(('H0', 'Omega_m', 'Omega_lambda'), tokens[:3]):
        try:
            values.append(parse_numeric(token, name))
        except ValueError:
            raise ConfigValidationError(f"{resolved}: invalid value for {name}: {token!r}") from None
    if not tokens[3].isdigit():
        raise ConfigValidationError(f"{resolved}: invalid redshift count {tokens[3]!r}")

    count = int(tokens[3])
    z_tokens = tokens[4:]
    if len(z_tokens) != count:
        raise ConfigValidationError(
            f"{resolved}: header announces {count} redshifts but {len(z_tokens)} were found"
        )
    redshifts = []
    for position, token in enumerate(z_tokens, start=1):
        message = f"{resolved}: invalid redshift #{position}: {token!r}"
        try:
            z = parse_numeric(token, 'redshift')
        except ValueError:
            raise ConfigValidationError(message) from None
        if z < 0:
            raise ConfigValidationError(message)
        redshifts.append(z)

    try:
        parameters = CosmologyParameters(*values)
    except ValueError as exc:
        raise ConfigValidationError(f"{resolved}: {exc}") from exc

    return ParameterisedRedshifts(
        parameters=parameters,
        z=np.asarray(redshifts, dtype=float),
        source_file=resolved,
    )


__all__ = [
    'ParameterisedRedshifts',
    'RedshiftBatch',
    'read_parameterised_redshifts',
]
