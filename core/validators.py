"""
Address validators for RELAY.

All addresses inside the engine are lower-case 0x-prefixed 40-hex strings.
"""

import re
from typing import Any

from core.constants import ErrorCode, MAX_UINT256, NATIVE_TOKEN, ZERO_ADDRESS
from core.exceptions import StructuralError

_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


def is_valid_address(address: Any) -> bool:
    """
    Check if value is a 0x-prefixed 40-char hex address.

    Args:
        address: Value to validate

    Returns:
        True if valid
    """
    if not isinstance(address, str):
        return False
    return bool(_ADDRESS_RE.match(address))


def normalize_address(address: Any) -> str:
    """
    Normalize an address to lower case.

    Raises:
        StructuralError: if the value is not a well-formed address
    """
    if not is_valid_address(address):
        raise StructuralError(
            f"Invalid address: {address!r}",
            ErrorCode.INVALID_ADDRESS,
            {"address": address},
        )
    return address.lower()


def is_zero_address(address: str) -> bool:
    return address.lower() == ZERO_ADDRESS


def is_native(address: str) -> bool:
    return address.lower() == NATIVE_TOKEN


def validate_amount(value: Any, field_name: str = "amount") -> int:
    """
    Check an on-ledger amount: an int in uint256 range (bool and float rejected).

    Raises:
        StructuralError: if the value is not an integer in [0, 2**256)
    """
    if isinstance(value, bool) or not isinstance(value, int) or not 0 <= value <= MAX_UINT256:
        raise StructuralError(
            f"Invalid {field_name}: {value!r}",
            ErrorCode.INVALID_AMOUNT,
            {"field": field_name, "value": value},
        )
    return value
