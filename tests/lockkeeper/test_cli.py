"""Tests for CLI commands — the lock tool itself is faked."""

from __future__ import annotations

import json
import logging
import os
from unittest.mock import patch

import pytest
import structlog
from click.testing import CliRunner

from lockkeeper.cli import main
from lockkeeper.exceptions import TemporaryError


@pytest.fixture(autouse=True)
def _isolated_env(tmp_path):
    env = {"LOCKKEEPER_CACHE_DIR": str(tmp_path / "cache")}
    with patch.dict(os.environ, env):
        os.environ.pop("LOCKKEEPER_HOST_RULES", None)
        os.environ.pop("LOCKKEEPER_LOCK_FILE_MAINTENANCE", None)
        yield
    structlog.reset_defaults()
    logging.getLogger().handlers.clear()


def _patch_executor(executor):
    return executor, patch("lockkeeper.cli.CommandExecutor", lambda *a, **kw: executor)


class TestEcosystems:
    def test_lists_mix(self):
        result = CliRunner().invoke(main, ["ecosystems"])
        assert result.exit_code == 0
        assert "mix\tmix.lock" in result.output

    def test_unknown_log_format_is_usage_error(self):
        with patch.dict(os.environ, {"LOCKKEEPER_LOG_FORMAT": "xml"}):
            result = CliRunner().invoke(main, ["ecosystems"])
        assert result.exit_code == 2
        assert "unknown log format" in result.output


class TestUpdateLock:
    def test_updated_lock_file(self, repo, make_executor):
        (repo / "mix.exs").write_text("manifest")
        (repo / "mix.lock").write_text("v1")
        executor, patcher = _patch_executor(make_executor(writes={"mix.lock": "v2"}))

        with patcher:
            result = CliRunner().invoke(main, ["update-lock", str(repo), "mix.exs", "-d", "plug"])

        assert result.exit_code == 0, result.output
        assert "Updated mix.lock" in result.output
        assert executor.calls[0][0] == "mix deps.update plug"

    def test_json_output(self, repo, make_executor):
        (repo / "mix.exs").write_text("manifest")
        (repo / "mix.lock").write_text("v1")
        _, patcher = _patch_executor(make_executor(writes={"mix.lock": "v2"}))

        with patcher:
            result = CliRunner().invoke(
                main, ["update-lock", str(repo), "mix.exs", "-d", "plug", "--json"]
            )

        assert result.exit_code == 0, result.output
        payload = json.loads(result.output)
        assert payload == [
            {
                "artifact_error": None,
                "file": {"path": "mix.lock", "contents": "v2", "type": "addition"},
            }
        ]

    def test_unchanged(self, repo, make_executor):
        (repo / "mix.exs").write_text("manifest")
        (repo / "mix.lock").write_text("v1")
        _, patcher = _patch_executor(make_executor())

        with patcher:
            result = CliRunner().invoke(main, ["update-lock", str(repo), "mix.exs", "-d", "plug"])

        assert result.exit_code == 0
        assert "Lock file unchanged." in result.output

    def test_maintenance_flag(self, repo, make_executor):
        (repo / "mix.exs").write_text("manifest")
        (repo / "mix.lock").write_text("v1")
        executor, patcher = _patch_executor(make_executor(writes={"mix.lock": "fresh"}))

        with patcher:
            result = CliRunner().invoke(main, ["update-lock", str(repo), "mix.exs", "--maintenance"])

        assert result.exit_code == 0, result.output
        assert executor.calls[0][0] == "mix deps.get"

    def test_artifact_error_exit_code(self, repo, make_executor):
        (repo / "mix.exs").write_text("manifest")
        (repo / "mix.lock").write_text("v1")
        _, patcher = _patch_executor(make_executor(error=RuntimeError("resolution failed")))

        with patcher:
            result = CliRunner().invoke(main, ["update-lock", str(repo), "mix.exs", "-d", "plug"])

        assert result.exit_code == 1
        assert "resolution failed" in result.output

    def test_temporary_error_exit_code(self, repo, make_executor):
        (repo / "mix.exs").write_text("manifest")
        (repo / "mix.lock").write_text("v1")
        _, patcher = _patch_executor(make_executor(error=TemporaryError("disk full")))

        with patcher:
            result = CliRunner().invoke(main, ["update-lock", str(repo), "mix.exs", "-d", "plug"])

        assert result.exit_code == 75

    def test_unknown_ecosystem(self, repo):
        (repo / "mix.exs").write_text("manifest")
        result = CliRunner().invoke(main, ["update-lock", str(repo), "mix.exs", "-e", "nope"])
        assert result.exit_code == 2
        assert "nope" in result.output

    def test_missing_package_file(self, repo):
        result = CliRunner().invoke(main, ["update-lock", str(repo), "mix.exs"])
        assert result.exit_code != 0
        assert "cannot read mix.exs" in result.output
