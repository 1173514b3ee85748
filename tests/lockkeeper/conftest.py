"""Shared fixtures for lockkeeper tests (no network, no Elixir toolchain needed)."""

from __future__ import annotations

from pathlib import Path

import pytest

from lockkeeper.util.exec import ExecOptions, ExecResult
from lockkeeper.util.fs import LocalFileSystem


@pytest.fixture(scope="session")
def anyio_backend():
    return "asyncio"


@pytest.fixture
def repo(tmp_path: Path) -> Path:
    root = tmp_path / "repo"
    root.mkdir()
    return root


@pytest.fixture
def fs(repo: Path, tmp_path: Path) -> LocalFileSystem:
    return LocalFileSystem(repo, tmp_path / "cache")


class FakeExecutor:
    """Records commands; optionally rewrites a file or raises, like the real tool would."""

    def __init__(
        self,
        repo: Path,
        *,
        writes: dict[str, str] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.repo = repo
        self.writes = writes or {}
        self.error = error
        self.calls: list[tuple[str, ExecOptions]] = []

    async def exec(self, command: str, options: ExecOptions | None = None) -> ExecResult:
        self.calls.append((command, options or ExecOptions()))
        if self.error is not None:
            raise self.error
        for name, content in self.writes.items():
            path = self.repo / name
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        return ExecResult(stdout="", stderr="")


@pytest.fixture
def make_executor(repo: Path):
    def _make(**kwargs) -> FakeExecutor:
        return FakeExecutor(repo, **kwargs)

    return _make
