"""
tests/unit/test_transfer.py - Signature-based transfer service tests.
"""

import pytest
from dataclasses import replace

from conftest import (
    ADAPTER,
    EXECUTOR,
    EXPIRY,
    INPUT_AMOUNT,
    MAKER,
    MAKER_BALANCE,
    OTHER_MAKER,
    PERMIT2,
    TOKEN_A,
)
from core.constants import ErrorCode
from core.exceptions import LedgerError, TransferError
from core.signing import WITNESS_TYPE_STRING
from dex.transfer import TransferDetails


def _pull(env, trade, requested=INPUT_AMOUNT, caller=EXECUTOR, witness_type=WITNESS_TYPE_STRING):
    env.permit2.permit_witness_transfer_from(
        permit=trade.permit,
        transfer=TransferDetails(to=ADAPTER, requested_amount=requested),
        owner=trade.order.maker,
        witness=trade.order,
        witness_type_string=witness_type,
        signature=trade.permit_signature,
        caller=caller,
    )


class TestPermitTransfer:

    def test_pull(self, env):
        trade = env.make_trade()
        _pull(env, trade)

        assert env.balance(TOKEN_A, ADAPTER) == INPUT_AMOUNT
        assert env.balance(TOKEN_A, MAKER) == MAKER_BALANCE - INPUT_AMOUNT
        assert env.permit2.is_nonce_used(MAKER, 0)

    def test_partial_amount(self, env):
        _pull(env, env.make_trade(), requested=INPUT_AMOUNT // 2)
        assert env.balance(TOKEN_A, ADAPTER) == INPUT_AMOUNT // 2

    def test_expired(self, env):
        env.ledger.timestamp = EXPIRY + 1
        with pytest.raises(TransferError) as exc_info:
            _pull(env, env.make_trade())
        assert exc_info.value.code == ErrorCode.PERMIT_EXPIRED

    def test_nonce_single_use(self, env):
        trade = env.make_trade()
        _pull(env, trade)
        with pytest.raises(TransferError) as exc_info:
            _pull(env, trade)
        assert exc_info.value.code == ErrorCode.PERMIT_NONCE_USED

    def test_amount_ceiling(self, env):
        with pytest.raises(TransferError) as exc_info:
            _pull(env, env.make_trade(), requested=INPUT_AMOUNT + 1)
        assert exc_info.value.code == ErrorCode.PERMIT_AMOUNT_EXCEEDED

    def test_wrong_spender(self, env):
        with pytest.raises(TransferError) as exc_info:
            _pull(env, env.make_trade(), caller="0x" + "e1" * 20)
        assert exc_info.value.code == ErrorCode.INVALID_PERMIT_SIGNATURE
        assert not env.permit2.is_nonce_used(MAKER, 0)

    def test_wrong_witness_type(self, env):
        with pytest.raises(TransferError):
            _pull(env, env.make_trade(), witness_type="Order witness)")

    def test_tampered_permit(self, env):
        trade = env.make_trade()
        trade = replace(trade, permit=replace(trade.permit, amount=INPUT_AMOUNT * 2))
        with pytest.raises(TransferError) as exc_info:
            _pull(env, trade, requested=INPUT_AMOUNT * 2)
        assert exc_info.value.code == ErrorCode.INVALID_PERMIT_SIGNATURE

    def test_requires_allowance(self, env):
        env.ledger.approve(TOKEN_A, MAKER, PERMIT2, 0)
        with pytest.raises(LedgerError) as exc_info:
            _pull(env, env.make_trade())
        assert exc_info.value.code == ErrorCode.INSUFFICIENT_ALLOWANCE

    def test_invalidate_nonce(self, env):
        env.permit2.invalidate_nonce(4, caller=MAKER)
        assert env.permit2.is_nonce_used(MAKER, 4)

    def test_invalidate_nonce_scoped_to_caller(self, env):
        env.permit2.invalidate_nonce(0, caller=OTHER_MAKER)

        assert env.permit2.is_nonce_used(OTHER_MAKER, 0)
        assert not env.permit2.is_nonce_used(MAKER, 0)
        # The maker's own permit still goes through
        _pull(env, env.make_trade())
        assert env.permit2.is_nonce_used(MAKER, 0)
