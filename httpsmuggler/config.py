"""Configuration management for the scanner."""

from __future__ import annotations

import json
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

DEFAULT_MARKERS = ("400", "Unrecognized method GPOST")


class ConfigError(Exception):
    """Raised when configuration loading fails."""


@dataclass(frozen=True)
class ScannerConfig:
    """Settings shared read-only by every scan task.

    Attributes:
        timeout: Seconds allowed for connecting, and again for write + read
        verbose: Print per-probe progress
        threads: Maximum number of targets scanned at once
        time_threshold: Seconds the crafted probe must exceed the baseline by
        response_markers: Substrings that flag a TE.TE response as anomalous
    """

    timeout: float = 15.0
    verbose: bool = False
    threads: int = 5
    time_threshold: float = 5.0
    response_markers: Tuple[str, ...] = DEFAULT_MARKERS

    def __post_init__(self) -> None:
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.threads < 1:
            raise ConfigError(f"threads must be at least 1, got {self.threads}")
        if self.time_threshold < 0:
            raise ConfigError(f"time_threshold cannot be negative, got {self.time_threshold}")
        if not self.response_markers:
            raise ConfigError("response_markers cannot be empty")


def _load_json_config(path: Path) -> Dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
    except FileNotFoundError as exc:
        raise ConfigError(f"Config file not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid JSON in config file: {path}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file must contain a JSON object: {path}")
    return data


def load_config(
    overrides: Optional[Dict[str, Any]] = None,
    config_file: Optional[str] = None,
) -> ScannerConfig:
    """Load configuration from an optional JSON file and inline overrides.

    Overrides whose value is ``None`` are ignored so unset CLI flags fall
    through to the file, then to the defaults.
    """

    data: Dict[str, Any] = {}

    if config_file:
        data.update(_load_json_config(Path(config_file).expanduser().resolve()))

    if overrides:
        for key, value in overrides.items():
            if value is not None:
                data[key] = value

    known = {f.name for f in fields(ScannerConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")

    markers = data.get("response_markers")
    if markers is not None:
        if isinstance(markers, str) or not all(isinstance(m, str) for m in markers):
            raise ConfigError("response_markers must be a list of strings")
        data["response_markers"] = tuple(markers)

    try:
        return ScannerConfig(**data)
    except TypeError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
