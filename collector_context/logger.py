"""
Run-correlated structured logging for collector runs.

CollectorContext and collector_run log through the ``collector_context``
package logger and attach structured fields (slot name, slot kind, counts)
under ``extra_data``. A RunLogger hooks handlers onto that logger for the
duration of one run, stamping every record from the run's thread with the
run id and rendering it as JSON when a log directory is configured.

Example:
    run_logger = get_logger(run_id="doc-42", settings=LoggingSettings(json_log_dir="logs"))
    with collector_run(run_logger=run_logger) as context:
        ...
    run_logger.close()
"""

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Dict, List, Optional

from collector_context.config.settings import LoggingSettings

PACKAGE_LOGGER = "collector_context"
LOG_FILE_NAME = "collector_context.log"

_default_settings = LoggingSettings()


def slot_fields(**fields: Any) -> Dict[str, Any]:
    """Wrap structured fields for ``logger.debug(..., extra=slot_fields(...))``."""
    return {"extra_data": fields}


class JSONFormatter(logging.Formatter):
    """One JSON object per record: run id, event, and the record's structured fields."""

    def __init__(self, run_id: str):
        super().__init__()
        self.run_id = run_id

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "run_id": getattr(record, "run_id", self.run_id),
            "level": record.levelname,
            "logger": record.name,
            "event": record.getMessage(),
            "thread_name": record.threadName,
        }
        entry.update(getattr(record, "extra_data", {}))

        if record.exc_info and record.exc_info[0] is not None:
            exc_type, exc_value, _ = record.exc_info
            entry["exception"] = {
                "type": exc_type.__name__,
                "message": str(exc_value),
                "traceback": self.formatException(record.exc_info),
            }

        return json.dumps(entry, ensure_ascii=False, default=str)


class RunLogger:
    """
    Correlates the package's log records for one collector run.

    Handlers are attached to the ``collector_context`` logger and only accept
    records emitted on the thread that created the RunLogger, matching the
    one-context-per-thread model. Each accepted record gains a ``run_id``.

    Args:
        run_id: Identifier for the run. Generated when not provided.
        level: Minimum level for this run's handlers.
        log_dir: Directory for the rotating JSON log. Console only when None.
        console: Also write human-readable lines to stderr.
    """

    def __init__(
        self,
        run_id: Optional[str] = None,
        level: str = "INFO",
        log_dir: Optional[str] = None,
        console: bool = True,
    ):
        self.run_id = run_id or self._new_run_id()
        self.level = logging.getLevelName(level.upper())
        self.log_dir = log_dir
        self._thread_id = threading.get_ident()
        self._logger = logging.getLogger(PACKAGE_LOGGER)
        self._previous_level = self._logger.level
        self._handlers: List[logging.Handler] = []

        if log_dir:
            logs_dir = Path(log_dir)
            logs_dir.mkdir(parents=True, exist_ok=True)
            # 10MB per file, keep 10
            json_handler = RotatingFileHandler(
                logs_dir / LOG_FILE_NAME, maxBytes=10 * 1024 * 1024, backupCount=10
            )
            json_handler.setFormatter(JSONFormatter(self.run_id))
            self.add_handler(json_handler)

        if console:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(logging.Formatter(
                "%(asctime)s [%(levelname)s] [run=%(run_id)s] %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            ))
            self.add_handler(console_handler)

        # Lower the package logger so this run's level is reachable
        if self._previous_level == logging.NOTSET or self._previous_level > self.level:
            self._logger.setLevel(self.level)

    @staticmethod
    def _new_run_id() -> str:
        return f"{datetime.now().strftime('%Y%m%d_%H%M%S')}-{uuid.uuid4().hex[:8]}"

    def _accept(self, record: logging.LogRecord) -> bool:
        if record.thread != self._thread_id:
            return False
        record.run_id = self.run_id
        return True

    def add_handler(self, handler: logging.Handler) -> None:
        """Attach ``handler`` so it receives this run's records."""
        if handler.level == logging.NOTSET:
            handler.setLevel(self.level)
        handler.addFilter(self._accept)
        self._logger.addHandler(handler)
        self._handlers.append(handler)

    def event(self, level: str, message: str, **fields: Any) -> None:
        """Log ``message`` with ``fields`` as structured data."""
        self._logger.log(logging.getLevelName(level.upper()), message, extra=slot_fields(**fields))

    def info(self, message: str, **fields: Any) -> None:
        self.event("INFO", message, **fields)

    def exception(self, message: str, **fields: Any) -> None:
        """Log at ERROR with the exception currently being handled."""
        self._logger.error(message, exc_info=True, extra=slot_fields(**fields))

    def close(self) -> None:
        """Detach and close this run's handlers and restore the logger level."""
        for handler in self._handlers:
            self._logger.removeHandler(handler)
            handler.close()
        self._handlers = []
        self._logger.setLevel(self._previous_level)


def configure_logging(settings: LoggingSettings) -> None:
    """Install logging settings: package logger level and get_logger() defaults."""
    global _default_settings
    _default_settings = settings
    logging.getLogger(PACKAGE_LOGGER).setLevel(settings.level)


def get_logger(
    run_id: Optional[str] = None,
    settings: Optional[LoggingSettings] = None,
    console: bool = True,
) -> RunLogger:
    """
    Create a RunLogger for one run.

    Args:
        run_id: Optional run ID. Generated if not provided.
        settings: Level and JSON log directory. Defaults to the settings
            installed by configure_logging(), or the LoggingSettings defaults.
        console: Also log human-readable lines to stderr.
    """
    settings = settings or _default_settings
    return RunLogger(
        run_id=run_id, level=settings.level, log_dir=settings.json_log_dir, console=console
    )
