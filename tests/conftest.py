# PATH: tests/conftest.py
"""
Pytest configuration and fixtures for RELAY tests.
"""

import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Sequence

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from eth_account import Account  # noqa: E402

from core.constants import Protocol, ZERO_ADDRESS  # noqa: E402
from core.ledger import Ledger  # noqa: E402
from core.models import Order, RouteData, Trade, TransferAuthorization, VenueInfo  # noqa: E402
from dex.adapters.base import SwapParams, VenueAdapter  # noqa: E402
from dex.adapters.uniswap_v2 import UniswapV2Adapter  # noqa: E402
from dex.transfer import PermitTransferService  # noqa: E402
from discovery.registry import load_registry  # noqa: E402
from execution.executor import SettlementExecutor  # noqa: E402


def pytest_configure(config):
    """Configure pytest."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )


# =============================================================================
# ACTORS AND ADDRESSES
# =============================================================================

MAKER_KEY = "0x" + "11" * 32
OTHER_KEY = "0x" + "22" * 32
MAKER = Account.from_key(MAKER_KEY).address.lower()
OTHER_MAKER = Account.from_key(OTHER_KEY).address.lower()

OWNER = "0x" + "0a" * 20
RELAYER = "0x" + "0b" * 20
OTHER_RELAYER = "0x" + "0c" * 20
LIQUIDITY_PROVIDER = "0x" + "0d" * 20

EXECUTOR = "0x" + "e0" * 20
PERMIT2 = "0x000000000022d473030f116ddee9f6b43ac78ba3"
REGISTRY = "0x" + "3a" * 20
ADAPTER = "0x" + "4a" * 20

TOKEN_A = "0x" + "a0" * 20
TOKEN_B = "0x" + "b0" * 20
TOKEN_C = "0x" + "c0" * 20
TOKEN_D = "0x" + "d0" * 20

PAIR_AB = "0x" + "5a" * 20
PAIR_BC = "0x" + "5b" * 20
PAIR_AC = "0x" + "5c" * 20
PAIR_CD = "0x" + "5d" * 20

START_TIME = 1_700_000_000
EXPIRY = START_TIME + 3_600
LIQUIDITY = 10**24
MAKER_BALANCE = 10**21
INPUT_AMOUNT = 10**18


# =============================================================================
# SCRIPTED ADAPTERS
# =============================================================================

class FixedOutputAdapter(VenueAdapter):
    """Pays a fixed output from its own inventory, keeps the input."""

    def __init__(self, ledger: Ledger, address: str, amount_out: int,
                 protocol: str = Protocol.UNISWAP_V2.value):
        super().__init__(address)
        self.protocol = protocol
        self.amount_out = amount_out
        self._ledger = ledger
        self.calls = []

    def execute(self, params: SwapParams, caller: str) -> int:
        self.calls.append((params, caller))
        self._ledger.transfer(params.token_out, self.address, params.recipient, self.amount_out)
        return self.amount_out


class MisreportingAdapter(VenueAdapter):
    """Claims an output it never delivers."""

    protocol = Protocol.UNISWAP_V2.value

    def __init__(self, address: str, reported: int):
        super().__init__(address)
        self.reported = reported

    def execute(self, params: SwapParams, caller: str) -> int:
        return self.reported


class ReentrantAdapter(VenueAdapter):
    """Calls back into settle while its own settlement is running."""

    protocol = Protocol.UNISWAP_V2.value

    def __init__(self, address: str, executor: SettlementExecutor):
        super().__init__(address)
        self.executor = executor
        self.inner_trade: Optional[Trade] = None
        self.inner_route: Optional[RouteData] = None

    def execute(self, params: SwapParams, caller: str) -> int:
        self.executor.settle(self.inner_trade, self.inner_route, caller=RELAYER)
        return params.min_amount_out


# =============================================================================
# ENVIRONMENT
# =============================================================================

class RelayEnv:
    """
    Fully wired settlement environment.

    Tokens A, B, C, D; V2 pairs A/B, B/C, A/C, C/D; B whitelisted; maker
    funded with token A and approved on the transfer service.
    """

    def __init__(self, fee_bps: int = 0):
        self.ledger = Ledger(chain_id=1, timestamp=START_TIME)
        for address, symbol in (
            (TOKEN_A, "TKA"), (TOKEN_B, "TKB"), (TOKEN_C, "TKC"), (TOKEN_D, "TKD"),
        ):
            self.ledger.create_token(address, symbol)

        self.permit2 = PermitTransferService(self.ledger, PERMIT2)
        self.ledger.deploy(PERMIT2, self.permit2)

        self.adapter = UniswapV2Adapter(self.ledger, ADAPTER)
        self.ledger.deploy(ADAPTER, self.adapter)
        for token_a, token_b, pair in (
            (TOKEN_A, TOKEN_B, PAIR_AB),
            (TOKEN_B, TOKEN_C, PAIR_BC),
            (TOKEN_A, TOKEN_C, PAIR_AC),
            (TOKEN_C, TOKEN_D, PAIR_CD),
        ):
            self.adapter.create_pair(token_a, token_b, pair)
            self.ledger.mint(token_a, LIQUIDITY_PROVIDER, LIQUIDITY)
            self.ledger.mint(token_b, LIQUIDITY_PROVIDER, LIQUIDITY)
            self.adapter.add_liquidity(token_a, LIQUIDITY, token_b, LIQUIDITY, LIQUIDITY_PROVIDER)

        self.registry = load_registry(self.ledger, REGISTRY, OWNER)
        self.registry.register_venue(
            VenueInfo(protocol=Protocol.UNISWAP_V2.value, adapter=ADAPTER, name="Uniswap V2"),
            caller=OWNER,
        )

        self.executor = SettlementExecutor.deploy(
            self.ledger,
            EXECUTOR,
            OWNER,
            PERMIT2,
            registry=REGISTRY,
            fee_bps=fee_bps,
            whitelist=[TOKEN_B],
        )

        for maker in (MAKER, OTHER_MAKER):
            self.ledger.mint(TOKEN_A, maker, MAKER_BALANCE)
            self.ledger.approve(TOKEN_A, maker, PERMIT2, 2**256 - 1)

    # -------------------------------------------------------------------------

    def make_trade(
        self,
        input_amount: int = INPUT_AMOUNT,
        output_token: str = TOKEN_B,
        min_amount_out: int = 1,
        expiry: int = EXPIRY,
        nonce: int = 0,
        authorized_executor: str = ZERO_ADDRESS,
        key: str = MAKER_KEY,
        input_token: str = TOKEN_A,
        **permit_overrides,
    ) -> Trade:
        """Build an order + matching permit, both signed by key."""
        maker = Account.from_key(key).address.lower()
        order = Order(
            maker=maker,
            input_token=input_token,
            input_amount=input_amount,
            output_token=output_token,
            min_amount_out=min_amount_out,
            expiry=expiry,
            nonce=nonce,
            authorized_executor=authorized_executor,
        )
        permit = TransferAuthorization(
            token=input_token, amount=input_amount, nonce=nonce, deadline=expiry,
        )
        if permit_overrides:
            permit = replace(permit, **permit_overrides)

        return Trade(
            order=order,
            order_signature=self.executor.domain.sign_order(order, key),
            permit=permit,
            permit_signature=self.permit2.domain.sign_permit(permit, EXECUTOR, order, key),
        )

    def route(self, *path: str, protocol: str = Protocol.UNISWAP_V2.value,
              fees: Sequence[int] = ()) -> RouteData:
        return RouteData(protocol=protocol, path=tuple(path or (TOKEN_A, TOKEN_B)), fees=tuple(fees))

    def use_adapter(self, adapter: VenueAdapter, version: int = 1) -> None:
        """Deploy a replacement adapter and point the venue at it."""
        self.ledger.deploy(adapter.address, adapter)
        self.registry.register_venue(
            VenueInfo(protocol=adapter.protocol, adapter=adapter.address, version=version),
            caller=OWNER,
        )

    def balance(self, token: str, holder: str) -> int:
        return self.ledger.balance_of(token, holder)


@pytest.fixture
def env() -> RelayEnv:
    return RelayEnv()


@pytest.fixture
def fee_env() -> RelayEnv:
    """Environment with a 2.5% relayer fee."""
    return RelayEnv(fee_bps=250)


@pytest.fixture
def ledger() -> Ledger:
    return Ledger(chain_id=1, timestamp=START_TIME)
