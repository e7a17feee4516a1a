"""
Common helpers: typed errors, amount conversion, formatting, HTTP
"""

from .errors import ErrorCode, TensaiError, create_error, handle_error

__all__ = ["ErrorCode", "TensaiError", "create_error", "handle_error"]
