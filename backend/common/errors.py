"""
Error Normalizer
Every failure in the wallet, executor and action layers ends up as a
TensaiError carrying a stable code.
"""

import json
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    INVALID_INPUT = "INVALID_INPUT"
    INVALID_NETWORK = "INVALID_NETWORK"
    CONTRACT_ERROR = "CONTRACT_ERROR"
    API_CALL_FAILED = "API_CALL_FAILED"
    TOKEN_METADATA_ERROR = "TOKEN_METADATA_ERROR"
    SWAP_QUOTE_FAILED = "SWAP_QUOTE_FAILED"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNKNOWN = "UNKNOWN_ERROR"


class TensaiError(Exception):
    """Typed error with a stable code and optional machine-readable details."""

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = ErrorCode(code)
        self.details: Dict[str, Any] = dict(details or {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "message": self.message,
            "code": self.code.value,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"TensaiError(code={self.code.value!r}, message={self.message!r})"


def create_error(
    message: str,
    code: ErrorCode,
    details: Optional[Dict[str, Any]] = None
) -> TensaiError:
    """Build a typed error at the point of failure."""
    return TensaiError(message, code, details)


def handle_error(
    context: str,
    error: Any,
    code: ErrorCode = ErrorCode.UNKNOWN
) -> TensaiError:
    """
    Normalize anything that was raised into a TensaiError.

    Args:
        context: Short description of the failed operation, used as message prefix
        error: The caught exception (or any other value)
        code: Code to use when the error is not already typed

    Returns:
        The original error when already typed, otherwise a new TensaiError.
        The caller is expected to raise the result.
    """
    if isinstance(error, TensaiError):
        return error

    if isinstance(error, BaseException):
        detail = str(error) or error.__class__.__name__
        return TensaiError(f"{context}: {detail}", code)

    if isinstance(error, str):
        return TensaiError(f"{context}: {error or 'empty error'}", code)

    try:
        detail = json.dumps(error, default=str)
    except (TypeError, ValueError):
        detail = repr(error)
    return TensaiError(f"{context}: {detail}", code)
