"""
Result formatting for agent-facing action output
"""

import json
from decimal import Decimal
from typing import Any

from hexbytes import HexBytes


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, (HexBytes, bytes, bytearray)):
        return "0x" + bytes(value).hex()
    if isinstance(value, Decimal):
        return format(value, "f")
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    # web3 AttributeDict and other mappings
    if hasattr(value, "items"):
        return dict(value.items())
    return str(value)


def object_to_string(obj: Any) -> str:
    """Serialize receipts, dicts and tuples to JSON; strings pass through."""
    if obj is None:
        return "null"
    if isinstance(obj, str):
        return obj
    try:
        return json.dumps(obj, default=_to_jsonable)
    except (TypeError, ValueError):
        return str(obj)


def wrap_and_stringify(action: str, data: Any) -> str:
    """Wrap an action result as {"action": ..., "data": ...} JSON."""
    payload = {"action": action, "data": data}
    try:
        return json.dumps(payload, default=_to_jsonable)
    except (TypeError, ValueError):
        # circular structures
        return json.dumps({"action": action, "data": "[Unserializable Input]"})


def format_address(address: str) -> str:
    if not address:
        return ""
    return f"{address[:6]}...{address[-4:]}"
