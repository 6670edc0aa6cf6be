"""Error taxonomy and driver error sanitization"""

import re
from typing import List, Pattern, Tuple


GENERIC_ERROR_MESSAGE = "Database connection failed"

# Raised before any driver is involved, so there is no raw text to map.
UNSUPPORTED_DRIVER_MESSAGE = "Unsupported database driver"

# Checked in order; the first match wins.
_ERROR_PATTERNS: List[Tuple[Pattern[str], str]] = [
    (
        re.compile(r"\[2002\]|Connection refused", re.IGNORECASE),
        "Connection refused - check host and port",
    ),
    (
        re.compile(r"[\[(]1045\b|password authentication failed", re.IGNORECASE),
        "Access denied - check username and password",
    ),
    (
        re.compile(r"[\[(]1049\b|database \".*\" does not exist", re.IGNORECASE),
        "Unknown database - check database name",
    ),
    (
        re.compile(
            r"[\[(]2005\b|Name or service not known|nodename nor servname"
            r"|could not translate host name|getaddrinfo failed",
            re.IGNORECASE,
        ),
        "Unknown host - check hostname",
    ),
    (
        re.compile(
            r"SQLSTATE\[08006\]|\((?:2003|2006|2013),|could not connect to server"
            r"|timed out|timeout expired",
            re.IGNORECASE,
        ),
        "Connection failed - check connection settings",
    ),
    (
        re.compile(r"SQLSTATE\[.*\]|^\(\d{4},"),
        "Database connection error",
    ),
]

# Every category a sanitized failure can carry
SAFE_MESSAGES = frozenset(
    [replacement for _, replacement in _ERROR_PATTERNS]
    + [GENERIC_ERROR_MESSAGE, UNSUPPORTED_DRIVER_MESSAGE]
)


def sanitize_error_message(message: str) -> str:
    """
    Map a raw driver error message to a safe, user-presentable category

    The result is always one of a fixed set of messages; nothing from the raw
    message is echoed back.

    Args:
        message: Raw error text from the driver

    Returns:
        Safe error message
    """
    for pattern, replacement in _ERROR_PATTERNS:
        if pattern.search(message or ""):
            return replacement
    return GENERIC_ERROR_MESSAGE


def sanitize_exception(error: BaseException) -> str:
    """Sanitize an exception raised by a database driver"""
    if isinstance(error, ProjectDatabaseError):
        return error.message
    return sanitize_error_message(str(error))


class ProjectDatabaseError(Exception):
    """Base error for failures against a project's database; message is safe"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConnectionFailure(ProjectDatabaseError):
    """Opening or handshaking the connection failed"""


class IntrospectionError(ProjectDatabaseError):
    """A catalog query failed; callers degrade to a default"""


class QueryFailure(ProjectDatabaseError):
    """A data query failed after the connection was established"""
