"""
Error code catalog for the session persistence layer.

This module defines all error codes raised while loading, packing and
storing bot sessions, and maps each code to the log level used when the
error is reported at the middleware boundary.
"""

import logging
from enum import Enum


class ErrorCode(str, Enum):
    """
    Enumeration of all error codes used by the session layer.

    Each error code maps to the level at which it is logged:
    - Codec errors: a stored payload could not be packed or unpacked
    - Store errors: the backing key-value store failed
    - Internal errors: anything else escaping a store or codec call
    """

    CODEC_ERROR = "CODEC_ERROR"
    """Session could not be serialized, compressed or decoded"""

    SESSION_STORE_UNAVAILABLE = "SESSION_STORE_UNAVAILABLE"
    """DynamoDB (or another store) request failed"""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    """Unexpected failure inside a store or codec implementation"""


# Mapping of error codes to the level they are logged at
ERROR_CODE_LOG_LEVEL_MAP: dict[ErrorCode, int] = {
    ErrorCode.CODEC_ERROR: logging.WARNING,
    ErrorCode.SESSION_STORE_UNAVAILABLE: logging.ERROR,
    ErrorCode.INTERNAL_ERROR: logging.ERROR,
}


def get_default_log_level(error_code: ErrorCode) -> int:
    """
    Get the log level used when reporting an error code.

    Args:
        error_code: The error code to look up

    Returns:
        The logging level for the error code
    """
    return ERROR_CODE_LOG_LEVEL_MAP.get(error_code, logging.ERROR)
