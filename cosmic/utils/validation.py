"""Validation helpers for user-supplied numbers, files and configuration."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

_NUMERIC_CHARACTERS = frozenset("-0123456789.")


class ConfigValidationError(RuntimeError):
    """Raised when configuration values or input files are invalid."""


def is_numeric(text: str) -> bool:
    """Return ``True`` when ``text`` is a plain signed decimal number.

    Accepted tokens contain only digits, at most one decimal point and at
    most one minus sign, which must lead.  Exponents, a leading ``+`` and
    surrounding whitespace are rejected.
    """
    if not text or any(ch not in _NUMERIC_CHARACTERS for ch in text):
        return False
    if "-" in text[1:]:
        return False
    if text.count(".") > 1:
        return False
    return any(ch.isdigit() for ch in text)


def parse_numeric(text: str, description: str = "value") -> float:
    """Convert ``text`` to ``float`` after checking it with :func:`is_numeric`.

    Raises
    ------
    ValueError
        If ``text`` is not a valid number.
    """
    token = text.strip()
    if not is_numeric(token):
        raise ValueError(f"Invalid {description}: {text!r} is not a valid number")
    return float(token)


def resolve_path(path: str | Path, base_dir: Optional[str | Path] = None) -> Path:
    """Return the absolute :class:`~pathlib.Path` for ``path``.

    Parameters
    ----------
    path:
        Path (absolute or relative) to resolve.
    base_dir:
        Optional base directory that relative paths should be resolved against.
    """
    if path is None:
        raise ConfigValidationError("No path provided for resolution")
    raw = Path(path)
    if raw.expanduser().is_absolute():
        return raw.expanduser().resolve()
    base = Path(base_dir) if base_dir is not None else Path.cwd()
    return (base / raw).expanduser().resolve()


def require_existing_file(path: str | Path,
                          base_dir: Optional[str | Path] = None,
                          description: str | None = None) -> str:
    """Ensure that ``path`` points to an existing file.

    Parameters
    ----------
    path:
        The file path to validate.
    base_dir:
        Optional directory used to resolve relative ``path`` values.
    description:
        Human friendly label to include in error messages.

    Returns
    -------
    str
        The resolved absolute path string.

    Raises
    ------
    ConfigValidationError
        If ``path`` does not exist or is not a file.
    """
    description = description or "file"
    resolved = resolve_path(path, base_dir=base_dir)
    if not resolved.exists():
        raise ConfigValidationError(f"Configured {description} not found: {resolved}")
    if not resolved.is_file():
        raise ConfigValidationError(f"Configured {description} is not a file: {resolved}")
    return str(resolved)
