"""
Audit Logger

DESIGN DECISION: Every decision the caller-side flows make is logged.
This provides:
1. Traceability of allocation accept/reject decisions
2. Evidence when two concurrent edits raced each other
3. Debugging capability for re-projected debts

The audit logger:
- Always logs locally through structlog
- Gracefully handles storage failures (logging never breaks a flow)
- Supports correlation IDs to trace retries of one edit
"""

import logging
import sys
from typing import Optional
from uuid import UUID, uuid4

import structlog

from finance_engine.config import get_settings
from finance_engine.models.audit import AuditEvent, AuditSeverity
from finance_engine.services.storage.interface import AuditStorageInterface, StorageError


def _configure_structlog(json_output: bool) -> None:
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(level: Optional[str] = None, json_output: Optional[bool] = None) -> None:
    """
    Set up logging for an application that runs the engine.

    Call once at startup. Sets the root logger level and, only when the
    root logger has no handlers yet, attaches one writing to stdout.
    Handlers the host already installed are left in place. Defaults come
    from ``AppSettings``.
    """
    app_settings = get_settings().app
    level = (level or app_settings.log_level).upper()
    json_output = app_settings.log_json if json_output is None else json_output

    logging.basicConfig(format="%(message)s", stream=sys.stdout)
    logging.getLogger().setLevel(getattr(logging, level, logging.INFO))

    _configure_structlog(json_output)


# Importing the engine only shapes structlog output; stdlib logging is the host's.
_configure_structlog(get_settings().app.log_json)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("finance_engine.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except StorageError as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g., one goal edit).
    Pass it through all retries of that action.
    """
    return uuid4()
