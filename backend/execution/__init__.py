from .executor import (
    ResolvedToken,
    TokenOperation,
    TokenOperationExecutor,
    TokenOperationResult,
    TransactionIntent,
)
from .token_ops import approve, encode_call, encode_erc20_call, get_allowance, read_decimals

__all__ = [
    "ResolvedToken",
    "TokenOperation",
    "TokenOperationExecutor",
    "TokenOperationResult",
    "TransactionIntent",
    "approve",
    "encode_call",
    "encode_erc20_call",
    "get_allowance",
    "read_decimals",
]
