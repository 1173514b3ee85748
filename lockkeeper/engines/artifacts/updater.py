"""ArtifactUpdater — write the manifest, rerun the lock tool, report what changed."""

from __future__ import annotations

from typing import Protocol

import structlog

from lockkeeper.engines.artifacts.auth import build_auth_commands
from lockkeeper.engines.artifacts.lock_resolver import LockFileSystem, resolve_lock
from lockkeeper.engines.artifacts.models import UpdateArtifact, UpdateArtifactsResult
from lockkeeper.engines.artifacts.registry import ArtifactEcosystem, get_artifact_ecosystem
from lockkeeper.exceptions import LockFileReadError, PathOutsideRepositoryError, TemporaryError
from lockkeeper.util.exec import ExecOptions, ExecResult
from lockkeeper.util.host_rules import HostRules

log = structlog.get_logger("lockkeeper.engine")


class ArtifactFileSystem(LockFileSystem, Protocol):
    async def write_local_file(self, file_name: str, content: str) -> None: ...

    async def delete_local_file(self, file_name: str) -> None: ...

    async def ensure_cache_dir(self, name: str) -> str: ...


class Executor(Protocol):
    async def exec(self, command: str, options: ExecOptions | None = None) -> ExecResult: ...


class ArtifactUpdater:
    """Regenerates one manifest's lock file per call.

    Local failures come back as artifact errors so the rest of the run can
    continue; only :class:`TemporaryError` is raised, for an upstream retry.
    """

    def __init__(
        self,
        fs: ArtifactFileSystem,
        executor: Executor,
        host_rules: HostRules | None = None,
    ) -> None:
        self._fs = fs
        self._executor = executor
        self._host_rules = host_rules or HostRules()

    async def update_artifacts(
        self,
        ecosystem: ArtifactEcosystem | str,
        request: UpdateArtifact,
    ) -> list[UpdateArtifactsResult] | None:
        """Returns None when there is nothing to apply."""
        if isinstance(ecosystem, str):
            ecosystem = get_artifact_ecosystem(ecosystem)

        package_file_name = request.package_file_name
        updated_deps = request.updated_deps
        is_maintenance = request.config.is_lock_file_maintenance
        log.debug(
            "artifacts.start",
            ecosystem=ecosystem.name,
            package_file=package_file_name,
            deps=len(updated_deps),
            maintenance=is_maintenance,
        )

        if not updated_deps and not is_maintenance:
            log.debug("artifacts.no_updated_deps", package_file=package_file_name)
            return None

        try:
            lock = await resolve_lock(self._fs, package_file_name, ecosystem.lock_file_name)
        except LockFileReadError as exc:
            return [UpdateArtifactsResult.error(exc.lock_file, str(exc))]
        except PathOutsideRepositoryError as exc:
            log.warning(
                "artifacts.package_file_outside_repository",
                package_file=package_file_name,
                error=str(exc),
            )
            lock_file_name = self._fs.get_sibling_file_name(
                package_file_name, ecosystem.lock_file_name
            )
            return [UpdateArtifactsResult.error(lock_file_name, str(exc))]

        if is_maintenance and lock.is_umbrella:
            # The shared lock file also pins sibling projects outside this directory.
            log.debug(
                "artifacts.maintenance_umbrella_unsupported",
                package_file=package_file_name,
                lock_file=lock.lock_file_name,
            )
            return None
        if is_maintenance and lock.content is None:
            log.debug("artifacts.maintenance_without_lock_file", package_file=package_file_name)
            return None

        try:
            await self._fs.write_local_file(package_file_name, request.new_package_file_content)
            if is_maintenance:
                await self._fs.delete_local_file(lock.lock_file_name)
        except (OSError, PathOutsideRepositoryError) as exc:
            log.warning(
                "artifacts.package_file_write_failed", package_file=package_file_name, error=str(exc)
            )
            return [UpdateArtifactsResult.error(lock.lock_file_name, str(exc))]

        if lock.content is None:
            log.debug("artifacts.no_lock_file", package_file=package_file_name)
            return None

        pre_commands = build_auth_commands(self._host_rules, updated_deps, ecosystem)

        extra_env: dict[str, str] = {}
        try:
            for env_var, cache_name in ecosystem.cache_env.items():
                extra_env[env_var] = await self._fs.ensure_cache_dir(cache_name)
        except OSError as exc:
            log.warning("artifacts.cache_dir_failed", ecosystem=ecosystem.name, error=str(exc))
            return [UpdateArtifactsResult.error(lock.lock_file_name, str(exc))]

        options = ExecOptions(
            extra_env=extra_env,
            cwd_file=package_file_name,
            tool_constraints=ecosystem.tool_constraints(request.config),
            pre_commands=pre_commands,
        )

        if is_maintenance:
            command = ecosystem.maintenance_command
        else:
            command = ecosystem.update_command_for(
                dep.dep_name for dep in updated_deps if dep.dep_name
            )

        try:
            await self._executor.exec(command, options)
        except TemporaryError:
            raise
        except Exception as exc:
            log.debug(
                "artifacts.lock_update_failed",
                command=command,
                lock_file=lock.lock_file_name,
                error=str(exc),
            )
            return [UpdateArtifactsResult.error(lock.lock_file_name, str(exc))]

        new_content = await self._fs.read_local_file(lock.lock_file_name)
        if new_content == lock.content:
            log.debug("artifacts.lock_unchanged", lock_file=lock.lock_file_name)
            return None

        if new_content is None:
            # The tool ran but left no lock file behind.
            return [
                UpdateArtifactsResult.error(
                    lock.lock_file_name, f"{lock.lock_file_name} missing after {command}"
                )
            ]

        log.debug("artifacts.lock_updated", lock_file=lock.lock_file_name)
        return [UpdateArtifactsResult.addition(lock.lock_file_name, new_content)]
