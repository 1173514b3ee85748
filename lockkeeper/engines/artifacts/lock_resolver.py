"""Lock file resolution — sibling lock file first, then the nearest ancestor."""

from __future__ import annotations

from typing import Protocol

import structlog

from lockkeeper.engines.artifacts.models import LockFileState
from lockkeeper.exceptions import LockFileReadError

log = structlog.get_logger("lockkeeper.engine")


class LockFileSystem(Protocol):
    def get_sibling_file_name(self, file_name: str, sibling_name: str) -> str: ...

    async def read_local_file(self, file_name: str) -> str | None: ...

    async def local_path_exists(self, file_name: str) -> bool: ...

    async def find_local_sibling_or_parent(
        self, existing_file_name: str, other_file_name: str
    ) -> str | None: ...


async def _raise_if_unreadable(fs: LockFileSystem, lock_file_name: str) -> None:
    # read_local_file() returned None: distinguish "missing" from "there but unreadable".
    if await fs.local_path_exists(lock_file_name):
        raise LockFileReadError(lock_file_name)


async def resolve_lock(
    fs: LockFileSystem, package_file_name: str, lock_file_base_name: str
) -> LockFileState:
    """Locate and read the lock file governing *package_file_name*.

    Raises :class:`LockFileReadError` when a lock file exists but cannot be
    read. When no lock file exists at all, the sibling path is returned with
    ``content=None``.
    """
    lock_file_name = fs.get_sibling_file_name(package_file_name, lock_file_base_name)

    content = await fs.read_local_file(lock_file_name)
    if content is not None:
        return LockFileState(lock_file_name=lock_file_name, content=content)

    await _raise_if_unreadable(fs, lock_file_name)

    parent_lock_file_name = await fs.find_local_sibling_or_parent(
        package_file_name, lock_file_base_name
    )
    if parent_lock_file_name is None:
        return LockFileState(lock_file_name=lock_file_name, content=None)

    parent_content = await fs.read_local_file(parent_lock_file_name)
    if parent_content is not None:
        log.debug(
            "artifacts.umbrella_lock_file",
            package_file=package_file_name,
            lock_file=parent_lock_file_name,
        )
        return LockFileState(
            lock_file_name=parent_lock_file_name, content=parent_content, is_umbrella=True
        )

    await _raise_if_unreadable(fs, parent_lock_file_name)
    return LockFileState(lock_file_name=lock_file_name, content=None)
