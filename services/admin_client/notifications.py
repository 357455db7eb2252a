# User-visible notifications raised by the session manager
import logging
from typing import Callable

SUCCESS = "success"
ERROR = "error"

SESSION_EXPIRED = "Session expired. Please login again."
LOGIN_SUCCEEDED = "Login successful!"
LOGIN_FAILED = "Login failed"

Notifier = Callable[[str, str], None]

logger = logging.getLogger(__name__)


def log_notifier(level: str, message: str):
    """Default notifier for headless use: send notifications to the log"""
    if level == ERROR:
        logger.warning(message)
    else:
        logger.info(message)


def console_notifier(level: str, message: str):
    prefix = "Error: " if level == ERROR else ""
    print(f"{prefix}{message}")
