"""Logging service

Three rotating channels: `error`, `info` and `stream`. The stream channel
follows playback; lines written for a failover session carry a
``[#<generation> <item>]`` tag so one watch attempt can be picked out of
the log across all its provider switches.
"""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import List, Optional

from ..config import settings


def session_tag(session) -> str:
    """Context tag for a failover session, e.g. [#3 tv:1399:1:2]"""
    return f"[#{session.generation} {session.request.state_key}]"


class SessionContextFilter(logging.Filter):
    """Fill `record.session` so the formatter can always reference it"""

    def filter(self, record: logging.LogRecord) -> bool:
        tag = getattr(record, "session", None)
        record.session = f"{tag} " if tag else ""
        return True


class LogService:
    """Centralized logging service"""

    CHANNELS = ("error", "info", "stream")
    LINE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(session)s%(message)s"

    def __init__(self, log_dir: Path = None):
        self.log_dir = log_dir or settings.LOGS_DIR
        self.log_dir.mkdir(exist_ok=True, parents=True)

        self.error_logger = self._setup_logger("error", logging.ERROR)
        self.info_logger = self._setup_logger("info", logging.INFO)
        self.stream_logger = self._setup_logger("stream", logging.DEBUG)

    def _setup_logger(self, name: str, level: int) -> logging.Logger:
        """Setup a logger with rotating file handler"""
        logger = logging.getLogger(f"streamflix.{name}")
        logger.setLevel(level)

        # Prevent duplicate handlers
        if logger.handlers:
            return logger

        # 10MB max, 3 backups
        handler = RotatingFileHandler(
            self.log_dir / f"{name}.log",
            maxBytes=10 * 1024 * 1024,
            backupCount=3,
        )
        handler.addFilter(SessionContextFilter())
        handler.setFormatter(
            logging.Formatter(self.LINE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        )

        logger.addHandler(handler)
        return logger

    @staticmethod
    def _extra(session, kwargs) -> dict:
        if session is not None:
            kwargs["session"] = session_tag(session)
        return kwargs

    def error(self, message: str, session=None, **kwargs):
        """Log error message"""
        self.error_logger.error(message, extra=self._extra(session, kwargs))

    def warning(self, message: str, session=None, **kwargs):
        """Log recoverable failure (retry attempt, provider failover)"""
        self.info_logger.warning(message, extra=self._extra(session, kwargs))

    def info(self, message: str, **kwargs):
        """Log info message"""
        self.info_logger.info(message, extra=kwargs)

    def stream(self, message: str, session=None, **kwargs):
        """Log provider resolution and playback transitions"""
        self.stream_logger.info(message, extra=self._extra(session, kwargs))

    def get_logs(
        self, log_type: str = "error", limit: int = 100, contains: Optional[str] = None
    ) -> List[str]:
        """
        Read last N lines from a channel's log file.

        `contains` keeps only matching lines, e.g. a session tag like
        "[#3 " or an item key like "tv:1399:1:2".
        """
        log_file = self.log_dir / f"{log_type}.log"

        if not log_file.exists():
            return []

        try:
            with open(log_file, "r") as f:
                lines = [line.rstrip("\n") for line in f]
        except OSError as e:
            self.error(f"Failed to read log file {log_type}: {e}")
            return []

        if contains:
            lines = [line for line in lines if contains in line]
        return lines[-limit:]


# Global log service instance
log_service = LogService()
