"""
Logging infrastructure for ats-grid.

Loguru sinks for the console, a rotating log file and a separate audit
file. Bulk actions and saved view changes are written to the audit file
through ``audit_log``; every other record goes through ``get_logger``.
"""

import sys
from typing import Any

from loguru import logger

from ats_grid.utils.config import LoggingSettings, get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)
AUDIT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[audit_type]} | {message}"

REDACTED = "***REDACTED***"
SENSITIVE_KEYS = frozenset({"password", "secret", "token", "api_key", "credential", "email", "phone"})


def _is_audit_record(record: dict) -> bool:
    return "audit_type" in record["extra"]


def _add_console_sink(log_settings: LoggingSettings, diagnose: bool) -> None:
    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level=log_settings.level,
        colorize=True,
        backtrace=True,
        diagnose=diagnose,
    )


def _add_file_sink(log_settings: LoggingSettings, diagnose: bool) -> None:
    log_settings.file_path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        log_settings.file_path,
        format=log_settings.format,
        level=log_settings.level,
        rotation=log_settings.rotation,
        retention=log_settings.retention,
        compression="zip",
        backtrace=True,
        diagnose=diagnose,
        enqueue=True,
    )


def _add_audit_sink(log_settings: LoggingSettings) -> None:
    audit_path = log_settings.audit_file_path or log_settings.file_path.parent / "audit.log"
    audit_path.parent.mkdir(parents=True, exist_ok=True)
    logger.add(
        audit_path,
        format=AUDIT_FORMAT,
        level="INFO",
        filter=_is_audit_record,
        rotation="1 week",
        retention=log_settings.audit_retention,
        compression="zip",
        enqueue=True,
    )


def setup_logging() -> None:
    """
    Configure application-wide logging.

    Replaces loguru's default handler with the sinks enabled in
    LoggingSettings. The library itself never calls this; entry points
    (the CLI) do.
    """
    settings = get_settings()
    log_settings = settings.logging

    logger.remove()

    # Tracebacks show local variables (row data included) only in development
    diagnose = settings.debug and settings.environment == "development"

    if log_settings.console_output:
        _add_console_sink(log_settings, diagnose)
    if log_settings.file_output:
        _add_file_sink(log_settings, diagnose)
        _add_audit_sink(log_settings)

    logger.info(f"Logging initialized - Level: {log_settings.level}")


def get_logger(name: str) -> Any:
    """
    Get a logger instance with the specified name.

    Args:
        name: The name for the logger (typically __name__)

    Returns:
        A configured logger instance
    """
    return logger.bind(name=name)


def _sanitize_for_logging(data: Any) -> Any:
    """Redact credentials and candidate contact fields, recursively."""
    if isinstance(data, dict):
        return {
            k: REDACTED if any(s in str(k).lower() for s in SENSITIVE_KEYS) else _sanitize_for_logging(v)
            for k, v in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [_sanitize_for_logging(item) for item in data]
    return data


def audit_log(action: str, details: dict[str, Any], audit_type: str = "BULK_ACTION") -> None:
    """
    Write an audit entry.

    Args:
        action: What happened (e.g. "bulk_reject", "view_deleted")
        details: Ids and counts describing it; contact fields are redacted
        audit_type: BULK_ACTION or VIEW
    """
    logger.bind(audit_type=audit_type).info(f"{action} | {_sanitize_for_logging(details)}")
