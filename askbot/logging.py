from __future__ import annotations

import logging
import os
import sys
import threading
from logging import FileHandler
from logging.handlers import TimedRotatingFileHandler


_orig_excepthook = None  # type: ignore[var-annotated]
_setup_lock = threading.Lock()


def _int_env(name: str, default: int) -> int:
    try:
        v = int(os.getenv(name, str(default)) or default)
        return v
    except Exception:
        return default


class _NonErrorFilter(logging.Filter):
    """Keep ERROR and CRITICAL out of the app log; they go to errors.log."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < logging.ERROR


def _pick_logs_dir() -> str:
    env_dir = os.getenv("ASKBOT_LOG_DIR")
    candidates = []
    # 1) Explicit env override
    if env_dir:
        candidates.append(env_dir)
    # 2) Working directory (container WORKDIR / systemd WorkingDirectory)
    candidates.append(os.path.join(os.getcwd(), "logs"))
    # 3) XDG state / Home state
    xdg_state = os.getenv("XDG_STATE_HOME")
    home = os.path.expanduser("~")
    if xdg_state:
        candidates.append(os.path.join(xdg_state, "askbot", "logs"))
    elif home:
        candidates.append(os.path.join(home, ".local", "state", "askbot", "logs"))
    # 4) tmp fallback
    try:
        uid = os.getuid()  # type: ignore[attr-defined]
    except Exception:
        uid = os.getpid()
    candidates.append(os.path.join("/tmp", f"askbot-{uid}", "logs"))
    for d in candidates:
        try:
            os.makedirs(d, exist_ok=True)
            # quick write test
            p = os.path.join(d, ".write-test")
            with open(p, "a", encoding="utf-8") as f:
                f.write("")
            try:
                os.remove(p)
            except OSError:
                pass
            return d
        except OSError:
            continue
    # As a final fallback, use /tmp
    return "/tmp"


def _rotating(path: str, retention_days: int) -> FileHandler:
    return TimedRotatingFileHandler(path, when="midnight", interval=1, backupCount=retention_days, encoding="utf-8")


def setup_logging(level: str = "INFO") -> str:
    """Configure root logging and return the directory log files are written to."""
    global _orig_excepthook

    logs_dir = _pick_logs_dir()

    root = logging.getLogger()
    root.setLevel(level.upper())

    fmt = os.getenv("ASKBOT_LOG_FORMAT", "%(asctime)s %(levelname)s %(name)s: %(message)s")
    datefmt = os.getenv("ASKBOT_LOG_DATEFMT", "%Y-%m-%d %H:%M:%S")
    formatter = logging.Formatter(fmt=fmt, datefmt=datefmt)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    # App log (INFO/DEBUG/WARNING) with daily rotation (excludes ERROR/CRITICAL)
    app_log = _rotating(os.path.join(logs_dir, "askbot.log"), _int_env("LOG_RETENTION_DAYS", 14))
    app_log.addFilter(_NonErrorFilter())
    app_log.setFormatter(formatter)

    # Error-only log with longer retention
    error_log = _rotating(os.path.join(logs_dir, "errors.log"), _int_env("ERROR_LOG_RETENTION_DAYS", 90))
    error_log.setLevel(logging.ERROR)
    error_log.setFormatter(formatter)

    # Web server access/error log (library filter)
    server_handler = _rotating(os.path.join(logs_dir, "uvicorn.log"), _int_env("SERVER_LOG_RETENTION_DAYS", 14))
    server_handler.setFormatter(formatter)

    root.handlers.clear()
    root.addHandler(console_handler)
    root.addHandler(app_log)
    root.addHandler(error_log)

    server_logger = logging.getLogger("uvicorn")
    server_logger.handlers.clear()
    server_logger.addHandler(server_handler)
    server_level = os.getenv("SERVER_LOG_LEVEL", "INFO").upper()
    server_logger.setLevel(getattr(logging, server_level, logging.INFO))
    # Stop propagation so server logs only appear in uvicorn.log
    server_logger.propagate = False

    # httpx logs every request at INFO; the progress ticker would flood the app log
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.captureWarnings(True)

    with _setup_lock:
        if _orig_excepthook is None:
            _orig_excepthook = sys.excepthook

            def _log_excepthook(exc_type, exc, tb):
                try:
                    logging.getLogger("unhandled").error("Unhandled exception", exc_info=(exc_type, exc, tb))
                finally:
                    _orig_excepthook(exc_type, exc, tb)  # type: ignore[misc]

            sys.excepthook = _log_excepthook  # type: ignore[assignment]

    return logs_dir
