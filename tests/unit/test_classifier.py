"""
tests/unit/test_classifier.py - Trade classifier tests.
"""

import pytest

from core.constants import NATIVE_TOKEN, TradeType
from execution.classifier import classify_trade

TOKEN_A = "0x" + "a0" * 20
TOKEN_B = "0x" + "b0" * 20


@pytest.mark.parametrize("token_in,token_out,expected", [
    (NATIVE_TOKEN, TOKEN_B, TradeType.NATIVE_IN_TOKEN_OUT),
    (TOKEN_A, NATIVE_TOKEN, TradeType.TOKEN_IN_NATIVE_OUT),
    (TOKEN_A, TOKEN_B, TradeType.TOKEN_IN_TOKEN_OUT),
    (NATIVE_TOKEN.upper().replace("0X", "0x"), TOKEN_B, TradeType.NATIVE_IN_TOKEN_OUT),
])
def test_classify(token_in, token_out, expected):
    assert classify_trade(token_in, token_out) == expected


def test_native_input_takes_precedence():
    assert classify_trade(NATIVE_TOKEN, NATIVE_TOKEN) == TradeType.NATIVE_IN_TOKEN_OUT
