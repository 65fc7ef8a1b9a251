"""
Trade classifier.

Tags a route by its endpoints:
  first == NATIVE_TOKEN → NATIVE_IN_TOKEN_OUT
  last  == NATIVE_TOKEN → TOKEN_IN_NATIVE_OUT
  otherwise             → TOKEN_IN_TOKEN_OUT

Native legs are classified here but currently rejected by route
validation; only TOKEN_IN_TOKEN_OUT reaches an adapter.
"""

from core.constants import TradeType
from core.validators import is_native


def classify_trade(token_in: str, token_out: str) -> TradeType:
    if is_native(token_in):
        return TradeType.NATIVE_IN_TOKEN_OUT
    if is_native(token_out):
        return TradeType.TOKEN_IN_NATIVE_OUT
    return TradeType.TOKEN_IN_TOKEN_OUT
