"""SIEM-compatible security event logging.

Provides structured JSON logging for vault security events, suitable for
integration with SIEM platforms like Splunk, ELK, or QRadar.

Events go through a dedicated logger with a RotatingFileHandler to prevent
disk exhaustion. Callers must never put secrets into event details.
"""

import json
import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from threading import Lock
from typing import Optional

from vault_core.config import AUDIT_LOG_BACKUP_COUNT, AUDIT_LOG_FILE, AUDIT_LOG_MAX_BYTES
from vault_core.storage import ensure_directories, load_lines


AUDIT_LOGGER_NAME = "vault_core.security"

logger = logging.getLogger(__name__)

# Module-level state
_logging_configured = False
_configure_lock = Lock()


def _configure_audit_logger() -> logging.Logger:
    """Attach the rotating file handler on first use."""
    global _logging_configured
    audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)

    with _configure_lock:
        if _logging_configured:
            return audit_logger

        ensure_directories()
        handler = RotatingFileHandler(
            AUDIT_LOG_FILE,
            maxBytes=AUDIT_LOG_MAX_BYTES,
            backupCount=AUDIT_LOG_BACKUP_COUNT,
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter("%(message)s"))

        audit_logger.setLevel(logging.INFO)
        audit_logger.addHandler(handler)
        # Keep audit lines out of the application log
        audit_logger.propagate = False

        _logging_configured = True
    return audit_logger


def log_security_event(
    event_type: str,
    status: str,
    username: str = "unknown",
    details: Optional[dict] = None
) -> None:
    """Log event in JSON format suitable for SIEM tools.

    Args:
        event_type: Type of security event (e.g., 'vault_unlock', 'entry_deleted')
        status: Event status (e.g., 'SUCCESS', 'FAILURE', 'FORCED')
        username: Caller identity
        details: Optional additional event details
    """
    event = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "event_type": event_type,
        "status": status,
        "username": username,
        "source": "vault_api"
    }

    if details:
        event["details"] = details

    level = logging.WARNING if status in ("FAILURE", "FORCED") else logging.INFO
    try:
        audit_logger = _configure_audit_logger()
    except OSError:
        logger.exception("Audit log unavailable, dropped %s event", event_type)
        return
    audit_logger.log(level, json.dumps(event))


def get_security_events(limit: int = 100) -> list[dict]:
    """Read and parse logged security events.

    Args:
        limit: Maximum number of events to return

    Returns:
        List of parsed event dictionaries, oldest first
    """
    events = []
    for line in load_lines(AUDIT_LOG_FILE):
        try:
            events.append(json.loads(line))
        except json.JSONDecodeError:
            continue

    return events[-limit:]
