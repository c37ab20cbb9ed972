"""Structured logging utilities for calculator runs."""
from __future__ import annotations

import json
import logging
import platform
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from hashlib import sha256
from pathlib import Path
from threading import Lock
from typing import Any, Dict, Iterable, Mapping, Optional

import numpy as np
import pandas as pd
import yaml

from cosmic.utils.constants import COSMO_CONSTANTS_VERSION


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _timestamp() -> str:
    return _utcnow().strftime("%Y-%m-%dT%H:%M:%SZ")


def _generate_run_id() -> str:
    return _utcnow().strftime("%Y%m%d_%H%M%S")


def _coerce_json_serializable(value: Any) -> Any:
    """Best-effort conversion of complex objects into JSON-serializable forms."""
    if value is None or isinstance(value, (str, int, float, bool)):
        return value
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, Mapping):
        return {str(key): _coerce_json_serializable(val) for key, val in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_coerce_json_serializable(item) for item in value]
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, np.generic):
        return value.item()
    if hasattr(value, "as_dict"):
        return _coerce_json_serializable(value.as_dict())
    if hasattr(value, "__dict__"):
        return _coerce_json_serializable(vars(value))
    return str(value)


def compute_sha256(path: Path) -> Optional[str]:
    """Compute the SHA-256 checksum for *path* if it exists."""
    try:
        resolved = path.expanduser().resolve()
    except FileNotFoundError:
        return None
    if not resolved.exists() or not resolved.is_file():
        return None
    digest = sha256()
    with resolved.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


@dataclass
class StructuredLogger:
    """Console logger that also writes JSONL events when ``base_dir`` is set.

    Without ``base_dir`` nothing touches the filesystem; events are only
    echoed to the console when they carry a message.
    """

    run_id: str = None  # type: ignore[assignment]
    base_dir: Optional[Path] = None
    console_level: int = logging.INFO

    def __post_init__(self) -> None:
        if self.run_id is None:
            self.run_id = _generate_run_id()
        self._lock = Lock()
        if self.base_dir is not None:
            self.base_dir = Path(self.base_dir)
            self.run_dir: Optional[Path] = self.base_dir / self.run_id
            self.run_dir.mkdir(parents=True, exist_ok=True)
            self._events_path: Optional[Path] = self.run_dir / "events.jsonl"
        else:
            self.run_dir = None
            self._events_path = None

        logger_name = f"cosmic.run.{self.run_id}"
        self._logger = logging.getLogger(logger_name)
        self._logger.handlers = []
        self._logger.setLevel(logging.DEBUG)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(self.console_level)
        console_handler.setFormatter(logging.Formatter("%(message)s"))
        self._logger.addHandler(console_handler)
        self._logger.propagate = False

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    @property
    def events_path(self) -> Optional[Path]:
        return self._events_path

    @property
    def persistent(self) -> bool:
        return self.run_dir is not None

    def log_event(
        self,
        event_type: str,
        payload: Optional[Mapping[str, Any]] = None,
        *,
        level: int = logging.INFO,
        message: Optional[str] = None,
    ) -> None:
        """Append an event to the JSONL log and optionally emit to the console."""
        if self._events_path is not None:
            record: Dict[str, Any] = {
                "timestamp": _timestamp(),
                "event": event_type,
                "level": logging.getLevelName(level),
            }
            if payload:
                record["payload"] = _coerce_json_serializable(payload)
            with self._lock:
                with self._events_path.open("a", encoding="utf-8") as handle:
                    json.dump(record, handle, sort_keys=True)
                    handle.write("\n")
        if message:
            self._logger.log(level, message)

    # Convenience helpers -------------------------------------------------
    def artifact_path(self, relative: str | Path) -> Optional[Path]:
        if self.run_dir is None:
            return None
        path = self.run_dir / Path(relative)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path

    def save_json(self, relative: str | Path, data: Mapping[str, Any] | Iterable[Any]) -> Optional[Path]:
        path = self.artifact_path(relative)
        if path is None:
            return None
        with path.open("w", encoding="utf-8") as handle:
            json.dump(_coerce_json_serializable(data), handle, indent=2, sort_keys=True)
        return path

    def save_dataframe(self, relative: str | Path, dataframe: pd.DataFrame, *, index: bool = False) -> Optional[Path]:
        path = self.artifact_path(relative)
        if path is None:
            return None
        dataframe.to_csv(path, index=index)
        return path


def collect_environment_metadata() -> Dict[str, Any]:
    """Gather a lightweight snapshot of the execution environment."""
    metadata: Dict[str, Any] = {
        "python_version": sys.version,
        "python_executable": sys.executable,
        "platform": platform.platform(),
    }
    for module in (np, pd, yaml):
        metadata[f"{module.__name__}_version"] = getattr(module, "__version__", "unknown")
    return metadata


def build_run_metadata(
    logger: StructuredLogger,
    *,
    arguments: Mapping[str, Any],
    config_snapshot: Mapping[str, Any],
    parameters: Mapping[str, Any],
    results_path: Optional[Path],
    checksums: Mapping[str, Optional[str]],
    extra: Optional[Mapping[str, Any]] = None,
) -> Dict[str, Any]:
    """Assemble a JSON-serializable metadata payload for the run."""
    metadata: Dict[str, Any] = {
        "run_id": logger.run_id,
        "timestamp": _timestamp(),
        "arguments": _coerce_json_serializable(arguments),
        "config_snapshot": _coerce_json_serializable(config_snapshot),
        "parameters": _coerce_json_serializable(parameters),
        "constants_version": COSMO_CONSTANTS_VERSION,
        "results_path": str(results_path) if results_path is not None else None,
        "environment": collect_environment_metadata(),
        "checksums": {
            key: value for key, value in checksums.items() if value is not None
        },
    }
    if extra:
        metadata.update(_coerce_json_serializable(extra))
    return metadata


__all__ = [
    "StructuredLogger",
    "build_run_metadata",
    "collect_environment_metadata",
    "compute_sha256",
]
