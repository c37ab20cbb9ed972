#!/usr/bin/env python3
"""Tabulate distances for a parameterised redshift file from the project root."""

from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cosmic.main import redshift_distance_cli


if __name__ == "__main__":
    redshift_distance_cli()
