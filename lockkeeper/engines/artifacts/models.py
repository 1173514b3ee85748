"""Data models for the artifact update engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Literal

from lockkeeper.core.config import RunConfig
from lockkeeper.engines.extraction.models import Dependency


@dataclass(frozen=True)
class UpdateArtifact:
    """Request to regenerate the lock file belonging to one manifest."""

    package_file_name: str
    updated_deps: tuple[Dependency, ...]
    new_package_file_content: str
    config: RunConfig = field(default_factory=RunConfig)


@dataclass(frozen=True)
class LockFileState:
    """Where the lock file for a manifest lives and what it held before the update."""

    lock_file_name: str
    content: str | None
    is_umbrella: bool = False


@dataclass(frozen=True)
class ArtifactError:
    lock_file: str
    stderr: str


@dataclass(frozen=True)
class FileChange:
    path: str
    contents: str
    type: Literal["addition"] = "addition"


@dataclass(frozen=True)
class UpdateArtifactsResult:
    """Outcome of one artifact update: exactly one of an error or a file change."""

    artifact_error: ArtifactError | None = None
    file: FileChange | None = None

    def __post_init__(self) -> None:
        if (self.artifact_error is None) == (self.file is None):
            raise ValueError("UpdateArtifactsResult needs exactly one of artifact_error, file")

    @classmethod
    def error(cls, lock_file: str, stderr: str) -> UpdateArtifactsResult:
        return cls(artifact_error=ArtifactError(lock_file=lock_file, stderr=stderr))

    @classmethod
    def addition(cls, path: str, contents: str) -> UpdateArtifactsResult:
        return cls(file=FileChange(path=path, contents=contents))


@dataclass(frozen=True)
class OrganizationCredential:
    """Token for one private-registry organization; built per call, never cached."""

    organization: str
    token: str
