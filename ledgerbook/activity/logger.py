"""
Activity Logger

Every notable action in the system is written to the structured log:
debtors added, transactions recorded or rejected, invoices finalized,
backups restored, corrupted storage keys discarded.

The activity logger:
- Writes through structlog (JSON lines by default)
- Never raises; a logging failure must not break the caller
- Does not persist events anywhere
"""

import logging
import sys
from typing import Optional

import structlog

from ledgerbook.models.activity import ActivityEvent, ActivityEventBuilder


def _shared_processors() -> list:
    return [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(level: str = "INFO", log_format: str = "json") -> None:
    """
    Configure structlog and the stdlib root logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        log_format: "json" for JSON lines, "console" for human-readable output
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)
    if not root_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(handler)

    renderer = (
        structlog.dev.ConsoleRenderer()
        if log_format == "console"
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=_shared_processors() + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )


# Default configuration so library users get JSON logs without setup
configure_logging()


class ActivityLogger:
    """
    Central activity logging service.

    Logs events to the structured local log at the severity the
    event carries.
    """

    def __init__(self, logger: Optional[structlog.stdlib.BoundLogger] = None):
        self._logger = logger or structlog.get_logger("ledgerbook.activity")

    def log(self, event: ActivityEvent) -> bool:
        """
        Log an activity event.

        Returns True if the event was written.
        """
        log_dict = event.to_log_dict()
        try:
            if event.severity.value == "error":
                self._logger.error("activity_event", **log_dict)
            elif event.severity.value == "warning":
                self._logger.warning("activity_event", **log_dict)
            elif event.severity.value == "debug":
                self._logger.debug("activity_event", **log_dict)
            else:
                self._logger.info("activity_event", **log_dict)
        except Exception as e:
            # Logging must never take the caller down with it
            sys.stderr.write(f"activity log write failed: {e}\n")
            return False
        return True

    def log_storage_corruption(self, key: str, error_message: str) -> None:
        """Log that a corrupted storage value was discarded."""
        self.log(ActivityEventBuilder.storage_corruption_cleared(
            key=key,
            error_message=error_message,
        ))

    def log_save_failed(self, key: str, error_message: str) -> None:
        """Log a failed storage write."""
        self.log(ActivityEventBuilder.storage_save_failed(
            key=key,
            error_message=error_message,
        ))
