"""Repository-scoped file helpers used by extraction and artifact updates.

All paths handed to :class:`LocalFileSystem` are relative to the checked-out
repository root and use ``/`` separators, the same form the file lists and
manifest names arrive in.
"""

from __future__ import annotations

import asyncio
import posixpath
from pathlib import Path

import structlog

from lockkeeper.exceptions import PathOutsideRepositoryError

log = structlog.get_logger(__name__)


def get_sibling_file_name(file_name: str, sibling_name: str) -> str:
    """``app/mix.exs`` + ``mix.lock`` -> ``app/mix.lock``."""
    return posixpath.join(posixpath.dirname(file_name), sibling_name)


def get_parent_dir(file_name: str) -> str:
    return posixpath.dirname(file_name.rstrip("/"))


class LocalFileSystem:
    """Async text-file access confined to one repository checkout."""

    def __init__(self, local_dir: Path | str, cache_dir: Path | str) -> None:
        self._local_dir = Path(local_dir).resolve()
        self._cache_dir = Path(cache_dir)

    @property
    def local_dir(self) -> Path:
        return self._local_dir

    def ensure_local_path(self, file_name: str) -> Path:
        """Map a repository-relative name to an absolute path inside the checkout."""
        if posixpath.isabs(file_name):
            raise PathOutsideRepositoryError(f"absolute path not allowed: {file_name}")
        full = (self._local_dir / file_name).resolve()
        if full != self._local_dir and not full.is_relative_to(self._local_dir):
            raise PathOutsideRepositoryError(f"path escapes repository: {file_name}")
        return full

    # ── reads ───────────────────────────────────────────────────────────

    async def read_local_file(self, file_name: str) -> str | None:
        """Return the file's text, or None if it is missing or unreadable."""
        path = self.ensure_local_path(file_name)
        try:
            return await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            log.debug("fs.read_failed", file=file_name, error=str(exc))
            return None

    async def local_path_exists(self, file_name: str) -> bool:
        path = self.ensure_local_path(file_name)
        return await asyncio.to_thread(path.exists)

    def get_sibling_file_name(self, file_name: str, sibling_name: str) -> str:
        return get_sibling_file_name(file_name, sibling_name)

    async def find_local_sibling_or_parent(
        self, existing_file_name: str, other_file_name: str
    ) -> str | None:
        """Find *other_file_name* next to *existing_file_name* or in any ancestor dir.

        The search starts in the existing file's own directory and stops at the
        repository root. Returns the repository-relative path of the nearest
        hit, or None.
        """
        if posixpath.isabs(existing_file_name) or posixpath.isabs(other_file_name):
            return None

        current = existing_file_name
        while current:
            current = get_parent_dir(current)
            candidate = posixpath.join(current, other_file_name)
            if await self.local_path_exists(candidate):
                return candidate
        return None

    # ── writes ──────────────────────────────────────────────────────────

    async def write_local_file(self, file_name: str, content: str) -> None:
        path = self.ensure_local_path(file_name)

        def _write() -> None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")

        await asyncio.to_thread(_write)

    async def delete_local_file(self, file_name: str) -> None:
        path = self.ensure_local_path(file_name)
        await asyncio.to_thread(path.unlink, missing_ok=True)

    async def ensure_cache_dir(self, name: str) -> str:
        """Create (if needed) and return a private cache directory for a tool."""
        path = self._cache_dir / "others" / name
        await asyncio.to_thread(path.mkdir, parents=True, exist_ok=True)
        return str(path)
