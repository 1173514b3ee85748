"""Tests for environment-driven configuration and logging setup."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from unittest.mock import patch

import pytest
import structlog

from lockkeeper.core.config import (
    RunConfig,
    cache_dir,
    exec_timeout,
    max_concurrency,
    parse_constraints,
)
from lockkeeper.core.logging import setup_logging

_KEYS = [
    "LOCKKEEPER_ENABLED_ECOSYSTEMS",
    "LOCKKEEPER_LOCK_FILE_MAINTENANCE",
    "LOCKKEEPER_CONSTRAINTS",
    "LOCKKEEPER_CACHE_DIR",
    "LOCKKEEPER_EXEC_TIMEOUT",
    "LOCKKEEPER_MAX_CONCURRENCY",
]


@pytest.fixture
def clean_env():
    with patch.dict(os.environ, {}, clear=False):
        for key in _KEYS:
            os.environ.pop(key, None)
        yield


class TestRunConfig:
    def test_defaults(self, clean_env):
        config = RunConfig.from_env()
        assert config.enabled_ecosystems is None
        assert config.is_lock_file_maintenance is False
        assert dict(config.constraints) == {}
        assert config.allows("anything")

    def test_from_env(self, clean_env):
        os.environ["LOCKKEEPER_ENABLED_ECOSYSTEMS"] = "mix, npm ,"
        os.environ["LOCKKEEPER_LOCK_FILE_MAINTENANCE"] = "true"
        os.environ["LOCKKEEPER_CONSTRAINTS"] = '{"erlang": "^27"}'

        config = RunConfig.from_env()

        assert config.enabled_ecosystems == ("mix", "npm")
        assert config.is_lock_file_maintenance is True
        assert dict(config.constraints) == {"erlang": "^27"}
        assert config.allows("mix")
        assert not config.allows("cargo")

    def test_overrides(self, clean_env):
        os.environ["LOCKKEEPER_LOCK_FILE_MAINTENANCE"] = "1"
        assert RunConfig.from_env(is_lock_file_maintenance=False).is_lock_file_maintenance is False

    def test_empty_allow_list_means_all(self, clean_env):
        os.environ["LOCKKEEPER_ENABLED_ECOSYSTEMS"] = "  "
        assert RunConfig.from_env().enabled_ecosystems is None


class TestParseConstraints:
    def test_empty(self):
        assert parse_constraints(None) == {}
        assert parse_constraints("") == {}

    def test_invalid_json(self):
        with pytest.raises(ValueError, match="LOCKKEEPER_CONSTRAINTS"):
            parse_constraints("not json")

    def test_non_string_values(self):
        with pytest.raises(ValueError):
            parse_constraints('{"erlang": ["^26"]}')


class TestSettings:
    def test_cache_dir_override(self, clean_env, tmp_path):
        os.environ["LOCKKEEPER_CACHE_DIR"] = str(tmp_path)
        assert cache_dir() == tmp_path

    def test_cache_dir_default(self, clean_env):
        assert cache_dir().parts[-2:] == ("lockkeeper", "cache")
        assert isinstance(cache_dir(), Path)

    def test_exec_timeout(self, clean_env):
        assert exec_timeout() == 900
        os.environ["LOCKKEEPER_EXEC_TIMEOUT"] = "30"
        assert exec_timeout() == 30

    def test_max_concurrency_floor(self, clean_env):
        assert max_concurrency() == 5
        os.environ["LOCKKEEPER_MAX_CONCURRENCY"] = "0"
        assert max_concurrency() == 1


class TestLogging:
    @pytest.fixture(autouse=True)
    def _reset(self):
        yield
        structlog.reset_defaults()
        logging.getLogger().handlers.clear()

    def test_setup_logging_json(self, capsys):
        with patch.dict(
            os.environ, {"LOCKKEEPER_LOG_FORMAT": "json", "LOCKKEEPER_LOG_LEVEL": "DEBUG"}
        ):
            setup_logging()
        structlog.get_logger("lockkeeper.test").info("config.loaded", answer=42)
        err = capsys.readouterr().err
        assert '"event": "config.loaded"' in err
        assert '"answer": 42' in err

    def test_arguments_override_environment(self, capsys):
        with patch.dict(
            os.environ, {"LOCKKEEPER_LOG_FORMAT": "console", "LOCKKEEPER_LOG_LEVEL": "ERROR"}
        ):
            setup_logging(level="debug", fmt="json")
        structlog.get_logger("lockkeeper.test").debug("lock.checked")
        captured = capsys.readouterr()
        assert '"event": "lock.checked"' in captured.err
        assert captured.out == ""

    def test_library_loggers_stay_quiet(self, capsys):
        setup_logging(level="DEBUG", fmt="json")
        logging.getLogger("asyncio").info("selector chatter")
        logging.getLogger("lockkeeper.engine").debug("kept")
        err = capsys.readouterr().err
        assert "selector chatter" not in err
        assert "kept" in err

    def test_unknown_format_rejected(self):
        with pytest.raises(ValueError, match="unknown log format"):
            setup_logging(fmt="xml")
