"""Run configuration — environment-driven settings shared by both pipeline stages."""

from __future__ import annotations

import os
import tempfile
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

_ENV_ENABLED_ECOSYSTEMS = "LOCKKEEPER_ENABLED_ECOSYSTEMS"
_ENV_LOCK_FILE_MAINTENANCE = "LOCKKEEPER_LOCK_FILE_MAINTENANCE"
_ENV_CONSTRAINTS = "LOCKKEEPER_CONSTRAINTS"
_ENV_CACHE_DIR = "LOCKKEEPER_CACHE_DIR"
_ENV_EXEC_TIMEOUT = "LOCKKEEPER_EXEC_TIMEOUT"
_ENV_MAX_CONCURRENCY = "LOCKKEEPER_MAX_CONCURRENCY"

_TRUTHY = {"1", "true", "yes", "on"}

_constraints_adapter = TypeAdapter(dict[str, str])


def _env_bool(key: str, default: bool = False) -> bool:
    raw = os.environ.get(key)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUTHY


def _env_float(key: str, default: float) -> float:
    return float(os.environ.get(key, default))


def _env_int(key: str, default: int) -> int:
    return int(os.environ.get(key, default))


def _env_list(key: str) -> tuple[str, ...] | None:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return None
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def parse_constraints(raw: str | None) -> dict[str, str]:
    """Parse a JSON object of tool name -> version constraint.

    Raises ``ValueError`` if *raw* is not a JSON object of strings.
    """
    if not raw:
        return {}
    try:
        return _constraints_adapter.validate_json(raw)
    except ValidationError as exc:
        raise ValueError(f"invalid {_ENV_CONSTRAINTS}: {exc}") from exc


def cache_dir() -> Path:
    """Root directory for tool caches (not created here)."""
    raw = os.environ.get(_ENV_CACHE_DIR)
    if raw:
        return Path(raw)
    return Path(tempfile.gettempdir()) / "lockkeeper" / "cache"


def exec_timeout() -> float:
    return _env_float(_ENV_EXEC_TIMEOUT, 900)


def max_concurrency() -> int:
    return max(1, _env_int(_ENV_MAX_CONCURRENCY, 5))


@dataclass(frozen=True)
class RunConfig:
    """Per-run configuration consumed by extraction and artifact updates.

    ``enabled_ecosystems`` is an allow-list; ``None`` means every ecosystem
    is allowed. ``constraints`` maps a tool name (``"erlang"``) to a version
    constraint (``"^26"``). ``extractor_options`` is handed to extractors
    as-is.
    """

    enabled_ecosystems: tuple[str, ...] | None = None
    is_lock_file_maintenance: bool = False
    constraints: Mapping[str, str] = field(default_factory=dict)
    extractor_options: Mapping[str, Any] = field(default_factory=dict)

    def allows(self, ecosystem: str) -> bool:
        return self.enabled_ecosystems is None or ecosystem in self.enabled_ecosystems

    @classmethod
    def from_env(cls, **overrides: Any) -> RunConfig:
        """Build a config from ``LOCKKEEPER_*`` environment variables."""
        values: dict[str, Any] = {
            "enabled_ecosystems": _env_list(_ENV_ENABLED_ECOSYSTEMS),
            "is_lock_file_maintenance": _env_bool(_ENV_LOCK_FILE_MAINTENANCE),
            "constraints": parse_constraints(os.environ.get(_ENV_CONSTRAINTS)),
        }
        values.update(overrides)
        return cls(**values)
