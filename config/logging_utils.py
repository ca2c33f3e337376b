"""
Debug Logging Utilities

Prefix-tagged helpers gated by the DEBUG setting, plus a small event logger
used by the auth flow and task store.
"""

import logging
from config.settings import settings


_debug_logger = logging.getLogger("taskflow.debug")
_debug_handler = logging.StreamHandler()
_debug_handler.setFormatter(
    logging.Formatter('[%(asctime)s] [%(levelname)s] %(message)s', datefmt='%H:%M:%S')
)
_debug_logger.addHandler(_debug_handler)
_debug_logger.setLevel(logging.DEBUG if settings.DEBUG else logging.WARNING)
_debug_logger.propagate = False

_event_logger = logging.getLogger("taskflow.events")

# Never written to logs, whatever the caller passes.
_REDACTED_FIELDS = {"password", "password_hash", "token", "access_token", "refresh_token"}


def _tag(message: str, prefix: str) -> str:
    return f"[{prefix}] {message}" if prefix else message


def log_debug(message: str, *args, prefix: str = "") -> None:
    """
    Log a debug message only if DEBUG is set to True in settings.

    Args:
        message: The message to log
        *args: Additional arguments to format into the message
        prefix: Optional prefix for categorizing logs (e.g., "AUTH", "TASKS")
    """
    if not settings.DEBUG:
        return

    formatted_message = _tag(message, prefix)
    if args:
        formatted_message = formatted_message % args

    _debug_logger.debug(formatted_message)


def log_success(message: str, prefix: str = "") -> None:
    """Log a completed step with a checkmark when DEBUG is on."""
    if not settings.DEBUG:
        return
    _debug_logger.info(_tag(f"✓ {message}", prefix))


def log_error(message: str, prefix: str = "") -> None:
    """Log a failed step with an X mark when DEBUG is on."""
    if not settings.DEBUG:
        return
    _debug_logger.error(_tag(f"✗ {message}", prefix))


def log_event(event: str, level: int = logging.INFO, **fields) -> None:
    """
    Emit a single key=value audit line for an auth or task event.

    Secret-bearing fields are dropped before formatting.

    Args:
        event: Short event name, e.g. "login_failed"
        level: Logging level for the record
        **fields: Context such as user_id or task_id
    """
    safe = {k: v for k, v in fields.items() if k not in _REDACTED_FIELDS and v is not None}
    details = " ".join(f"{k}={v}" for k, v in sorted(safe.items()))
    _event_logger.log(level, f"{event} {details}".rstrip())
