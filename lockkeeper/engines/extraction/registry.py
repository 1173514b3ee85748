"""Extractor registry — one extraction capability per ecosystem."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Union

import structlog

from lockkeeper.core.config import RunConfig
from lockkeeper.engines.extraction.models import Dependency
from lockkeeper.exceptions import ExtractorRegistrationError

log = structlog.get_logger(__name__)

PackageFileDeps = Union[Sequence[Dependency], None]
AllPackageFileDeps = Union[Mapping[str, Sequence[Dependency]], None]

# Extractors may be plain functions or coroutine functions.
ExtractPackageFile = Callable[
    [str, str, RunConfig], Union[PackageFileDeps, Awaitable[PackageFileDeps]]
]
ExtractAllPackageFiles = Callable[
    [RunConfig, Sequence[str]], Union[AllPackageFileDeps, Awaitable[AllPackageFileDeps]]
]


class ExtractionMode(Enum):
    """How an extractor consumes the matched files."""

    PER_FILE = "per_file"
    ALL_FILES = "all_files"


@dataclass(frozen=True)
class ExtractorDescriptor:
    """Extraction capability declaration for one ecosystem.

    Exactly one callable is set, the one matching ``mode``:
    ``extract_package_file(content, path, config)`` for ``PER_FILE``,
    ``extract_all_package_files(config, paths)`` for ``ALL_FILES``.
    """

    ecosystem: str
    mode: ExtractionMode
    file_patterns: tuple[str, ...]
    extract_package_file: ExtractPackageFile | None = None
    extract_all_package_files: ExtractAllPackageFiles | None = None

    def __post_init__(self) -> None:
        per_file = self.extract_package_file is not None
        all_files = self.extract_all_package_files is not None
        if self.mode is ExtractionMode.PER_FILE and not (per_file and not all_files):
            raise ExtractorRegistrationError(
                f"{self.ecosystem}: PER_FILE extractor needs only extract_package_file"
            )
        if self.mode is ExtractionMode.ALL_FILES and not (all_files and not per_file):
            raise ExtractorRegistrationError(
                f"{self.ecosystem}: ALL_FILES extractor needs only extract_all_package_files"
            )

    @classmethod
    def per_file(
        cls, ecosystem: str, file_patterns: Sequence[str], fn: ExtractPackageFile
    ) -> ExtractorDescriptor:
        return cls(
            ecosystem=ecosystem,
            mode=ExtractionMode.PER_FILE,
            file_patterns=tuple(file_patterns),
            extract_package_file=fn,
        )

    @classmethod
    def all_files(
        cls, ecosystem: str, file_patterns: Sequence[str], fn: ExtractAllPackageFiles
    ) -> ExtractorDescriptor:
        return cls(
            ecosystem=ecosystem,
            mode=ExtractionMode.ALL_FILES,
            file_patterns=tuple(file_patterns),
            extract_all_package_files=fn,
        )


EXTRACTOR_REGISTRY: dict[str, ExtractorDescriptor] = {}


def register_extractor(
    descriptor: ExtractorDescriptor,
    registry: dict[str, ExtractorDescriptor] | None = None,
) -> None:
    """Register an extractor by its ecosystem, replacing any previous one."""
    target = EXTRACTOR_REGISTRY if registry is None else registry
    if descriptor.ecosystem in target:
        log.debug("extractor.replaced", ecosystem=descriptor.ecosystem)
    target[descriptor.ecosystem] = descriptor


def get_extractor(
    ecosystem: str,
    registry: Mapping[str, ExtractorDescriptor] | None = None,
) -> ExtractorDescriptor | None:
    source = EXTRACTOR_REGISTRY if registry is None else registry
    return source.get(ecosystem)
