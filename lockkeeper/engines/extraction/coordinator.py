"""Extraction coordinator — run an ecosystem's extractor over the repository files."""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Any, Protocol

import structlog

from lockkeeper.core.config import max_concurrency as default_max_concurrency
from lockkeeper.engines.extraction.file_match import get_matching_files
from lockkeeper.engines.extraction.models import Dependency, EcosystemConfig, PackageFileResult
from lockkeeper.engines.extraction.registry import (
    EXTRACTOR_REGISTRY,
    ExtractionMode,
    ExtractorDescriptor,
)
from lockkeeper.exceptions import ExtractorRegistrationError

log = structlog.get_logger("lockkeeper.engine")


class FileReader(Protocol):
    async def read_local_file(self, file_name: str) -> str | None: ...


async def _maybe_await(value: Any) -> Any:
    if inspect.isawaitable(value):
        return await value
    return value


def normalize_dep(dep: Dependency) -> Dependency:
    """Return a copy of *dep* whose display name falls back to the package name."""
    if not dep.dep_name and dep.package_name:
        return replace(dep, dep_name=dep.package_name)
    return replace(dep)


def _to_result(package_file: str, deps: Sequence[Dependency] | None) -> PackageFileResult | None:
    if not deps:
        return None
    return PackageFileResult(package_file=package_file, deps=[normalize_dep(d) for d in deps])


async def get_ecosystem_package_files(
    ecosystem_config: EcosystemConfig,
    *,
    fs: FileReader,
    registry: Mapping[str, ExtractorDescriptor] | None = None,
) -> list[PackageFileResult]:
    """Extract dependencies for one ecosystem.

    Returns one :class:`PackageFileResult` per matched file that yielded at
    least one dependency. Disabled or not-allowed ecosystems return ``[]``
    without touching the file system.
    """
    ecosystem = ecosystem_config.ecosystem
    config = ecosystem_config.config

    if not ecosystem_config.enabled:
        log.debug("extract.ecosystem_disabled", ecosystem=ecosystem)
        return []
    if not config.allows(ecosystem):
        log.debug("extract.ecosystem_not_allowed", ecosystem=ecosystem)
        return []

    source = EXTRACTOR_REGISTRY if registry is None else registry
    extractor = source.get(ecosystem)
    if extractor is None:
        log.warning("extract.unknown_ecosystem", ecosystem=ecosystem)
        return []

    patterns = ecosystem_config.file_patterns or extractor.file_patterns
    matched = get_matching_files(ecosystem, ecosystem_config.file_list, patterns)
    if not matched:
        return []

    results: list[PackageFileResult] = []

    extract_all_files = extractor.extract_all_package_files
    extract_file = extractor.extract_package_file

    if extractor.mode is ExtractionMode.ALL_FILES and extract_all_files is not None:
        by_file = await _maybe_await(extract_all_files(config, matched))
        for package_file, deps in (by_file or {}).items():
            result = _to_result(package_file, deps)
            if result is not None:
                results.append(result)
    elif extractor.mode is ExtractionMode.PER_FILE and extract_file is not None:
        for package_file in matched:
            content = await fs.read_local_file(package_file)
            if content is None:
                # Listed but gone or unreadable by now; not an error.
                log.debug("extract.file_skipped", ecosystem=ecosystem, file=package_file)
                continue
            deps = await _maybe_await(
                extract_file(content, package_file, config)
            )
            result = _to_result(package_file, deps)
            if result is not None:
                results.append(result)
    else:
        raise ExtractorRegistrationError(
            f"extractor for {ecosystem!r} has no callable for mode {extractor.mode.value!r}"
        )

    log.debug(
        "extract.ecosystem_done",
        ecosystem=ecosystem,
        matched=len(matched),
        package_files=len(results),
    )
    return results


# Short name matching the pipeline stage.
extract = get_ecosystem_package_files


async def extract_all(
    ecosystem_configs: Iterable[EcosystemConfig],
    *,
    fs: FileReader,
    registry: Mapping[str, ExtractorDescriptor] | None = None,
    max_concurrency: int | None = None,
) -> dict[str, list[PackageFileResult]]:
    """Run one extraction pass per ecosystem concurrently.

    A failing extractor is logged and contributes ``[]``; it never affects
    the other ecosystems.
    """
    configs = list(ecosystem_configs)
    semaphore = asyncio.Semaphore(max_concurrency or default_max_concurrency())

    async def _one(ecosystem_config: EcosystemConfig) -> list[PackageFileResult]:
        async with semaphore:
            try:
                return await get_ecosystem_package_files(
                    ecosystem_config, fs=fs, registry=registry
                )
            except Exception:
                log.exception("extract.ecosystem_failed", ecosystem=ecosystem_config.ecosystem)
                return []

    gathered = await asyncio.gather(*(_one(c) for c in configs))
    results: dict[str, list[PackageFileResult]] = {}
    for ecosystem_config, package_files in zip(configs, gathered):
        results.setdefault(ecosystem_config.ecosystem, []).extend(package_files)
    return results
