"""
tests/unit/test_uniswap_v2_adapter.py - Constant-product adapter tests.
"""

import pytest

from conftest import ADAPTER, LIQUIDITY, PAIR_AB, TOKEN_A, TOKEN_B, TOKEN_C, TOKEN_D
from core.constants import ErrorCode, Protocol, TradeType
from core.exceptions import AdapterError
from core.math import get_amount_out
from dex.adapters.base import SwapParams, VenueAdapter
from dex.adapters.uniswap_v2 import UniswapV2Adapter

RECIPIENT = "0x" + "72" * 20


def _params(path, amount_in=10**18, min_amount_out=1):
    return SwapParams(
        token_in=path[0],
        token_out=path[-1],
        amount_in=amount_in,
        min_amount_out=min_amount_out,
        path=tuple(path),
        fees=(),
        recipient=RECIPIENT,
        trade_type=TradeType.TOKEN_IN_TOKEN_OUT,
        deadline=0,
    )


class TestPairs:

    def test_pair_sorted(self, env):
        pair = env.adapter.get_pair(TOKEN_B, TOKEN_A)
        assert pair.address == PAIR_AB
        assert (pair.token0, pair.token1) == (TOKEN_A, TOKEN_B)

    def test_missing_pair(self, env):
        with pytest.raises(AdapterError) as exc_info:
            env.adapter.get_pair(TOKEN_A, TOKEN_D)
        assert exc_info.value.code == ErrorCode.ADAPTER_POOL_NOT_FOUND

    def test_reserves_follow_balances(self, env):
        assert env.adapter.get_reserves(TOKEN_A, TOKEN_B) == (LIQUIDITY, LIQUIDITY)


class TestExecute:

    def test_single_hop(self, env):
        env.ledger.mint(TOKEN_A, ADAPTER, 10**18)
        expected = get_amount_out(10**18, LIQUIDITY, LIQUIDITY)

        amount_out = env.adapter.execute(_params((TOKEN_A, TOKEN_B)), caller=RECIPIENT)

        assert amount_out == expected
        assert env.balance(TOKEN_B, RECIPIENT) == expected
        assert env.balance(TOKEN_A, ADAPTER) == 0
        assert env.adapter.get_reserves(TOKEN_A, TOKEN_B) == (LIQUIDITY + 10**18, LIQUIDITY - expected)

    def test_multi_hop_chains_pairs(self, env):
        env.ledger.mint(TOKEN_A, ADAPTER, 10**18)
        path = (TOKEN_A, TOKEN_B, TOKEN_C, TOKEN_D)
        amounts = env.adapter.get_amounts_out(10**18, path)

        amount_out = env.adapter.execute(_params(path), caller=RECIPIENT)

        assert amount_out == amounts[-1]
        assert env.balance(TOKEN_D, RECIPIENT) == amounts[-1]
        # Intermediate outputs land in the next pair, not the recipient
        assert env.balance(TOKEN_B, RECIPIENT) == 0
        assert env.balance(TOKEN_C, RECIPIENT) == 0
        assert amounts[1] > amounts[2] > amounts[3]

    def test_unfunded(self, env):
        with pytest.raises(AdapterError) as exc_info:
            env.adapter.execute(_params((TOKEN_A, TOKEN_B)), caller=RECIPIENT)
        assert exc_info.value.code == ErrorCode.ADAPTER_INSUFFICIENT_INPUT


class TestFork:

    def test_sushiswap_protocol(self, ledger):
        adapter = UniswapV2Adapter(ledger, "0x" + "4c" * 20, protocol="SUSHISWAP_V2")
        assert adapter.protocol == Protocol.SUSHISWAP_V2.value
        assert isinstance(adapter, VenueAdapter)

    def test_base_is_abstract(self):
        with pytest.raises(TypeError):
            VenueAdapter("0x" + "4c" * 20)
