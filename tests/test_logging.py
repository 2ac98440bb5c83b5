"""Tests for logging module."""
import logging
import os
import sys
import tempfile
from unittest.mock import patch

import pytest

from askbot import logging as askbot_logging
from askbot.logging import _int_env, _NonErrorFilter, _pick_logs_dir, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    """Put the root and uvicorn loggers back the way pytest left them."""
    root = logging.getLogger()
    server = logging.getLogger("uvicorn")
    saved = (list(root.handlers), root.level, list(server.handlers), server.level, server.propagate, sys.excepthook)
    yield
    for h in root.handlers + server.handlers:
        if h not in saved[0] and h not in saved[2]:
            h.close()
    root.handlers[:] = saved[0]
    root.setLevel(saved[1])
    server.handlers[:] = saved[2]
    server.setLevel(saved[3])
    server.propagate = saved[4]
    sys.excepthook = saved[5]
    askbot_logging._orig_excepthook = None


class TestIntEnv:
    """Tests for _int_env helper function."""

    def test_int_env_default(self):
        with patch.dict(os.environ, {}, clear=True):
            assert _int_env("NONEXISTENT_VAR", 42) == 42

    def test_int_env_valid_value(self):
        with patch.dict(os.environ, {"TEST_VAR": "100"}):
            assert _int_env("TEST_VAR", 42) == 100

    def test_int_env_invalid_value(self):
        with patch.dict(os.environ, {"TEST_VAR": "not_a_number"}):
            assert _int_env("TEST_VAR", 42) == 42

    def test_int_env_empty_value(self):
        with patch.dict(os.environ, {"TEST_VAR": ""}):
            assert _int_env("TEST_VAR", 42) == 42


class TestPickLogsDir:
    """Tests for _pick_logs_dir function."""

    def test_pick_logs_dir_explicit_env(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch.dict(os.environ, {"ASKBOT_LOG_DIR": tmpdir}):
                assert _pick_logs_dir() == tmpdir

    def test_pick_logs_dir_creates_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            log_dir = os.path.join(tmpdir, "new_logs")
            with patch.dict(os.environ, {"ASKBOT_LOG_DIR": log_dir}):
                assert _pick_logs_dir() == log_dir
                assert os.path.isdir(log_dir)

    def test_pick_logs_dir_falls_back_when_unusable(self):
        """Test a path that cannot be a directory is skipped."""
        with tempfile.TemporaryDirectory() as tmpdir:
            blocker = os.path.join(tmpdir, "file")
            with open(blocker, "w") as f:
                f.write("x")
            bad = os.path.join(blocker, "logs")
            with patch.dict(os.environ, {"ASKBOT_LOG_DIR": bad}):
                result = _pick_logs_dir()
            assert result != bad
            assert os.path.isdir(result)


class TestNonErrorFilter:
    """Tests for _NonErrorFilter."""

    @staticmethod
    def _record(level):
        return logging.LogRecord(name="test", level=level, pathname="", lineno=0, msg="m", args=(), exc_info=None)

    def test_allows_info_and_warning(self):
        f = _NonErrorFilter()
        assert f.filter(self._record(logging.INFO))
        assert f.filter(self._record(logging.WARNING))

    def test_blocks_error_and_critical(self):
        f = _NonErrorFilter()
        assert not f.filter(self._record(logging.ERROR))
        assert not f.filter(self._record(logging.CRITICAL))


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_handlers_and_level(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch.dict(os.environ, {"ASKBOT_LOG_DIR": tmpdir}):
                assert setup_logging("DEBUG") == tmpdir

                root = logging.getLogger()
                assert root.level == logging.DEBUG
                assert len(root.handlers) == 3  # console, app, error

    def test_setup_logging_creates_log_files(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch.dict(os.environ, {"ASKBOT_LOG_DIR": tmpdir}):
                setup_logging("INFO")

                assert os.path.exists(os.path.join(tmpdir, "askbot.log"))
                assert os.path.exists(os.path.join(tmpdir, "errors.log"))
                assert os.path.exists(os.path.join(tmpdir, "uvicorn.log"))

    def test_setup_logging_server_logger(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch.dict(os.environ, {"ASKBOT_LOG_DIR": tmpdir}):
                setup_logging("INFO")

                server_logger = logging.getLogger("uvicorn")
                assert server_logger.propagate is False
                assert len(server_logger.handlers) == 1
                assert logging.getLogger("httpx").level == logging.WARNING

    def test_setup_logging_custom_format(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            env = {"ASKBOT_LOG_DIR": tmpdir, "ASKBOT_LOG_FORMAT": "%(levelname)s - %(message)s"}
            with patch.dict(os.environ, env):
                setup_logging("INFO")

                for handler in logging.getLogger().handlers:
                    assert handler.formatter._fmt == "%(levelname)s - %(message)s"

    def test_setup_logging_installs_excepthook(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch.dict(os.environ, {"ASKBOT_LOG_DIR": tmpdir}):
                before = sys.excepthook
                setup_logging("INFO")
                assert sys.excepthook is not before
                assert askbot_logging._orig_excepthook is before

    def test_info_and_error_split_across_files(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            with patch.dict(os.environ, {"ASKBOT_LOG_DIR": tmpdir}):
                setup_logging("DEBUG")

                logging.getLogger("test.integration").info("Info message")
                logging.getLogger("test.integration").error("Error message")
                for handler in logging.getLogger().handlers:
                    handler.flush()

                with open(os.path.join(tmpdir, "askbot.log")) as f:
                    app_content = f.read()
                with open(os.path.join(tmpdir, "errors.log")) as f:
                    error_content = f.read()

                assert "Info message" in app_content
                assert "Error message" not in app_content
                assert "Error message" in error_content
                assert "Info message" not in error_content
