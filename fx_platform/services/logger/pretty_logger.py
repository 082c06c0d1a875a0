import os
import sys
import threading
from datetime import datetime, timezone
from typing import Any

from fx_platform.services.logger.interface import LoggingInterface

_COLORS = {
    "INFO": "\033[32m",   # green
    "WARN": "\033[33m",   # yellow
    "ERROR": "\033[31m",  # red
    "DEBUG": "\033[36m",  # cyan
}
_RESET = "\033[0m"
_LEVELS = {"DEBUG": 10, "INFO": 20, "WARN": 30, "ERROR": 40}


class PrettyLogger(LoggingInterface):
    """Colorized one-line-per-entry logger on stderr.

    ``LOG_LEVEL`` (default ``INFO``) sets the threshold. Lines are written
    under a lock so concurrent request threads never interleave output.
    """

    def __init__(self, level: str | None = None) -> None:
        name = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()
        self._threshold = _LEVELS.get(name, _LEVELS["INFO"])
        self._lock = threading.Lock()

    def info(self, msg: str, **ctx: Any) -> None:
        self._log("INFO", msg, ctx)

    def warn(self, msg: str, **ctx: Any) -> None:
        self._log("WARN", msg, ctx)

    def error(self, msg: str, **ctx: Any) -> None:
        self._log("ERROR", msg, ctx)

    def debug(self, msg: str, **ctx: Any) -> None:
        self._log("DEBUG", msg, ctx)

    def _log(self, level: str, msg: str, ctx: dict[str, Any]) -> None:
        if _LEVELS[level] < self._threshold:
            return
        ts = datetime.now(timezone.utc).strftime("%H:%M:%S")
        color = _COLORS.get(level, "")
        extra = "  " + " ".join(f"{k}={v}" for k, v in ctx.items()) if ctx else ""
        with self._lock:
            print(f"{color}{ts} [{level}]{_RESET} {msg}{extra}", file=sys.stderr)
