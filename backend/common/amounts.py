"""
Amount helpers
Human-readable decimal strings <-> atomic integer units.
Floats are never used: a binary float drifts at 18 decimals.
"""

import re
from decimal import Decimal, InvalidOperation, localcontext
from typing import Union

from common.errors import ErrorCode, create_error

MAX_UINT256 = 2**256 - 1

NATIVE_TOKEN_PLACEHOLDERS = frozenset({
    "0xeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeeee",
    "0x0000000000000000000000000000000000000000",
})

_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")

# uint256 has 78 digits; leave room for the fractional part
_PRECISION = 160
_UINT256_DIGITS = len(str(MAX_UINT256))


def parse_amount(amount: Union[str, int, Decimal]) -> Decimal:
    """
    Parse a human amount into a Decimal, rejecting anything that is not > 0.

    Raises:
        TensaiError(INVALID_INPUT) for non-numeric, non-finite or non-positive input
    """
    if isinstance(amount, float):
        # repr keeps the shortest round-trip form ("0.1", not 0.1000000000000000055...)
        amount = repr(amount)
    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise create_error(f"Invalid amount: {amount!r}", ErrorCode.INVALID_INPUT)

    if not value.is_finite():
        raise create_error(f"Invalid amount: {amount!r}", ErrorCode.INVALID_INPUT)
    if value <= 0:
        raise create_error(
            "Error: Assets amount must be greater than 0",
            ErrorCode.INVALID_INPUT
        )
    return value


def to_atomic_units(amount: Decimal, decimals: int) -> int:
    """
    floor(amount * 10^decimals), in exact integer arithmetic.

    Raises:
        TensaiError(INVALID_INPUT) when the result does not fit in uint256
    """
    if decimals < 0:
        raise create_error(f"Invalid token decimals: {decimals}", ErrorCode.TOKEN_METADATA_ERROR)
    if not amount.is_finite():
        raise create_error(f"Invalid amount: {amount!r}", ErrorCode.INVALID_INPUT)

    sign, digits, exponent = amount.as_tuple()
    if sign:
        raise create_error(f"Invalid amount: {amount!r}", ErrorCode.INVALID_INPUT)

    coefficient = int("".join(map(str, digits)) or "0")
    shift = exponent + decimals
    if coefficient == 0 or shift < -len(digits):
        atomic = 0
    elif shift >= 0:
        # any non-zero coefficient times 10^78 is already past uint256
        if shift > _UINT256_DIGITS:
            raise create_error(
                f"Amount {amount} exceeds uint256 at {decimals} decimals",
                ErrorCode.INVALID_INPUT
            )
        atomic = coefficient * 10 ** shift
    else:
        atomic = coefficient // 10 ** -shift

    if atomic > MAX_UINT256:
        raise create_error(
            f"Amount {amount} exceeds uint256 at {decimals} decimals",
            ErrorCode.INVALID_INPUT
        )
    return atomic


def from_atomic_units(atomic: int, decimals: int) -> Decimal:
    """Inverse of to_atomic_units, for display."""
    with localcontext() as ctx:
        ctx.prec = _PRECISION
        return Decimal(int(atomic)).scaleb(-decimals).normalize()


def format_units(atomic: int, decimals: int) -> str:
    value = from_atomic_units(atomic, decimals)
    return format(value, "f")


def is_native_token(token_address: str) -> bool:
    """True for the 0xEeee... and zero-address native asset placeholders."""
    return token_address.lower() in NATIVE_TOKEN_PLACEHOLDERS


def validate_address(address: str) -> str:
    if not address or not _ADDRESS_RE.match(address):
        raise create_error(f"Invalid Ethereum address: {address!r}", ErrorCode.INVALID_INPUT)
    return address
