# PATH: core/math.py
"""
Math utilities for RELAY.

Integer-only fee arithmetic (no float money). All amounts are in the
token's smallest unit.
"""

from decimal import Decimal
from typing import Tuple, Union

from core.constants import BPS_DENOMINATOR


def bps_to_decimal(bps: Union[int, str, Decimal]) -> Decimal:
    """
    Convert basis points to a decimal fraction (100 bps = 0.01 = 1%).

    Display helper only; settlement math stays in integers.
    """
    return Decimal(str(bps)) / Decimal(BPS_DENOMINATOR)


def calculate_fee(amount_out: int, fee_bps: int) -> int:
    """
    Protocol fee on a realized output amount.

    feeAmount = floor(amount_out * fee_bps / 10000)

    Args:
        amount_out: Realized output in smallest units
        fee_bps: Fee rate in basis points

    Returns:
        Fee amount (0 when the rate is 0 or the product rounds down to 0)
    """
    if fee_bps == 0 or amount_out == 0:
        return 0
    return (amount_out * fee_bps) // BPS_DENOMINATOR


def split_output(amount_out: int, fee_bps: int) -> Tuple[int, int]:
    """
    Split realized output between the relayer fee and the maker.

    Returns:
        (fee_amount, maker_amount), which always sum to amount_out
    """
    fee_amount = calculate_fee(amount_out, fee_bps)
    return fee_amount, amount_out - fee_amount


def get_amount_out(amount_in: int, reserve_in: int, reserve_out: int, fee_bps: int = 30) -> int:
    """
    Constant-product output for an exact input (x * y = k).

    out = in * (10000 - fee) * R_out / (R_in * 10000 + in * (10000 - fee))

    With fee_bps=30 this is the classic 997/1000 formula.
    """
    if amount_in <= 0 or reserve_in <= 0 or reserve_out <= 0:
        return 0
    amount_in_with_fee = amount_in * (BPS_DENOMINATOR - fee_bps)
    numerator = amount_in_with_fee * reserve_out
    denominator = reserve_in * BPS_DENOMINATOR + amount_in_with_fee
    return numerator // denominator
