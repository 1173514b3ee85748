"""Data models for the extraction engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from lockkeeper.core.config import RunConfig


@dataclass
class Dependency:
    """A single dependency declared in a manifest.

    Every field is optional: extractors fill in what their ecosystem knows.
    ``dep_name`` is the display name; after normalization it falls back to
    ``package_name``. Ecosystem-specific fields travel in ``extra``.
    """

    package_name: str | None = None
    dep_name: str | None = None
    current_value: str | None = None
    replace_string: str | None = None
    datasource: str | None = None
    dep_type: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class PackageFileResult:
    """Dependencies extracted from one manifest file (never empty)."""

    package_file: str
    deps: list[Dependency]


@dataclass(frozen=True)
class EcosystemConfig:
    """One ecosystem's slice of an extraction run."""

    ecosystem: str
    file_list: tuple[str, ...] = ()
    enabled: bool = True
    config: RunConfig = field(default_factory=RunConfig)
    file_patterns: tuple[str, ...] | None = None  # overrides the extractor's defaults
