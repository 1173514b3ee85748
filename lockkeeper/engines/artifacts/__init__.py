"""Artifact update engine — regenerate lock files after manifest changes."""

# Ensure built-in ecosystems are registered before any update runs.
import lockkeeper.engines.artifacts.ecosystems  # noqa: F401
from lockkeeper.engines.artifacts.lock_resolver import resolve_lock
from lockkeeper.engines.artifacts.models import (
    ArtifactError,
    FileChange,
    LockFileState,
    UpdateArtifact,
    UpdateArtifactsResult,
)
from lockkeeper.engines.artifacts.registry import (
    ARTIFACT_REGISTRY,
    ArtifactEcosystem,
    get_artifact_ecosystem,
    register_artifact_ecosystem,
)
from lockkeeper.engines.artifacts.updater import ArtifactUpdater

__all__ = [
    "ARTIFACT_REGISTRY",
    "ArtifactEcosystem",
    "ArtifactError",
    "ArtifactUpdater",
    "FileChange",
    "LockFileState",
    "UpdateArtifact",
    "UpdateArtifactsResult",
    "get_artifact_ecosystem",
    "register_artifact_ecosystem",
    "resolve_lock",
]
