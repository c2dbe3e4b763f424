"""
Structured logging configuration.

Provides JSON-formatted logging for session state transitions.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from concierge.shared.contracts.session_state import SessionState


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter that outputs log records as JSON.

    Each log entry includes:
    - timestamp: ISO format datetime (UTC)
    - level: Log level name
    - logger: Logger name
    - message: Log message
    - extra: Any additional fields attached to the record
    """

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if hasattr(record, "extra"):
            log_entry["extra"] = record.extra

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry, default=str)


def setup_logging(
    level: int = logging.INFO,
    log_file: Optional[str] = None,
    logger_name: str = "concierge",
) -> logging.Logger:
    """
    Configure structured JSON logging.

    Args:
        level: Logging level (default: INFO)
        log_file: Optional path to log file. If not provided, logs to stderr only.
        logger_name: Name for the logger instance.

    Returns:
        Configured logger instance.
    """
    logger = logging.getLogger(logger_name)
    logger.setLevel(level)
    logger.handlers = []
    # The JSON handler replaces the root text handler for this logger
    logger.propagate = False

    formatter = StructuredFormatter()

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    return logger


def log_state_transition(
    event: str,
    state: Union[SessionState, Dict[str, Any]],
    extra: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Log a session state transition event.

    Args:
        event: Name of the event (e.g., "turn_committed", "turn_failed")
        state: Session state (model or dict); only the flow fields are logged
        extra: Additional context to include in the log
        logger: Logger instance to use. If not provided, uses the package logger.
    """
    if logger is None:
        logger = logging.getLogger("concierge")

    if isinstance(state, SessionState):
        state = state.model_dump(mode="json")

    state_summary = {
        "active_flow": state.get("active_flow"),
        "is_awaiting_user_response": state.get("is_awaiting_user_response"),
        "next_agent": state.get("next_agent"),
        "has_interrupted_flow": state.get("interrupted_flow") is not None,
    }

    log_data = {
        "event": event,
        "state_summary": state_summary,
    }

    if extra:
        log_data["extra"] = extra

    # The summary is in the message too so plain-text handlers keep it
    summary = ", ".join(f"{k}={v}" for k, v in state_summary.items())
    if extra:
        summary += ", " + ", ".join(f"{k}={v}" for k, v in extra.items())

    record = logger.makeRecord(
        logger.name,
        logging.INFO,
        "",
        0,
        f"State transition: {event} | {summary}",
        args=(),
        exc_info=None,
    )
    record.extra = log_data

    logger.handle(record)
