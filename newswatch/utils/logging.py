"""Logging setup for the CLI and library code.

The CLI writes its results as JSON on stdout, so records go to stderr unless
``LOG_OUTPUT`` asks for a rotating log file as well (or instead). Every
setting can be passed explicitly or taken from the environment at call time.
"""

from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Literal, Optional

LogOutput = Literal["stderr", "file", "both"]
LogFormat = Literal["text", "json"]

DEFAULT_LEVEL = "INFO"
DEFAULT_OUTPUT: LogOutput = "stderr"
DEFAULT_FILE_PATH = "logs/newswatch.log"
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5

# Third-party loggers that log every request at INFO.
QUIET_LOGGERS = ("httpx", "httpcore")

_FORMATS = {
    "text": "%(asctime)s | %(levelname)s | %(name)s | %(filename)s:%(lineno)d | %(message)s",
    "json": (
        '{"timestamp": "%(asctime)s", "level": "%(levelname)s", "name": "%(name)s", '
        '"file": "%(filename)s:%(lineno)d", "message": "%(message)s"}'
    ),
}

_SERVICE_ACCOUNT_DIR = "/var/run/secrets/kubernetes.io/serviceaccount"


def is_kubernetes_env() -> bool:
    """True inside a Kubernetes pod."""
    return bool(
        os.environ.get("K8S_CLUSTER")
        or os.environ.get("KUBERNETES_SERVICE_HOST")
        or os.path.exists(_SERVICE_ACCOUNT_DIR)
    )


def _resolve_format(log_format: Optional[str]) -> str:
    # Log collectors in a cluster expect one JSON object per line.
    fmt = log_format or os.environ.get("LOG_FORMAT") or ("json" if is_kubernetes_env() else "text")
    fmt = fmt.lower()
    if fmt not in _FORMATS:
        raise ValueError(f"LOG_FORMAT must be one of {sorted(_FORMATS)}, got '{fmt}'")
    return fmt


def _resolve_output(output: Optional[str]) -> str:
    target = (output or os.environ.get("LOG_OUTPUT") or DEFAULT_OUTPUT).lower()
    if target not in ("stderr", "file", "both"):
        raise ValueError(f"LOG_OUTPUT must be 'stderr', 'file' or 'both', got '{target}'")
    return target


def _build_handlers(output: str, file_path: str) -> List[logging.Handler]:
    handlers: List[logging.Handler] = []
    if output in ("stderr", "both"):
        handlers.append(logging.StreamHandler(sys.stderr))
    if output in ("file", "both"):
        path = Path(file_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS))
    return handlers


def configure_logging(
    level: str | int | None = None,
    output: LogOutput | None = None,
    file_path: str | None = None,
    log_format: LogFormat | None = None,
    module: Optional[str] = None,
) -> None:
    """Install handlers on the root logger, replacing any existing ones.

    Parameters
    ----------
    level:
        Level name or number; defaults to ``LOG_LEVEL`` or INFO.
    output:
        "stderr", "file" or "both"; defaults to ``LOG_OUTPUT`` or stderr.
    file_path:
        Rotating log file used by "file" and "both"; defaults to ``LOG_FILE_PATH``.
    log_format:
        "text" or "json"; defaults to ``LOG_FORMAT``, json under Kubernetes.
    module:
        Logger name that also gets ``level``, for raising one area's verbosity.
    """
    if level is None:
        level = os.environ.get("LOG_LEVEL", DEFAULT_LEVEL).upper()
    target = _resolve_output(output)
    formatter = logging.Formatter(_FORMATS[_resolve_format(log_format)])
    handlers = _build_handlers(target, file_path or os.environ.get("LOG_FILE_PATH") or DEFAULT_FILE_PATH)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    for handler in handlers:
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    if module:
        logging.getLogger(module).setLevel(level)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)
