"""Extraction engine — match manifests to ecosystem extractors and normalize deps."""

from lockkeeper.engines.extraction.coordinator import (
    extract,
    extract_all,
    get_ecosystem_package_files,
)
from lockkeeper.engines.extraction.models import Dependency, EcosystemConfig, PackageFileResult
from lockkeeper.engines.extraction.registry import (
    EXTRACTOR_REGISTRY,
    ExtractionMode,
    ExtractorDescriptor,
    register_extractor,
)

__all__ = [
    "EXTRACTOR_REGISTRY",
    "Dependency",
    "EcosystemConfig",
    "ExtractionMode",
    "ExtractorDescriptor",
    "PackageFileResult",
    "extract",
    "extract_all",
    "get_ecosystem_package_files",
    "register_extractor",
]
