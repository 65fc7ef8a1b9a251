"""
dex/adapters/uniswap_v2.py - Constant-product (Uniswap V2 style) adapter.

Reference venue adapter: multi-hop exact-input swaps over x*y=k pairs
whose reserves are the pair addresses' ledger balances.

Also serves forks of the same family (SushiSwap V2) via `protocol`.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Sequence, Tuple

from core.constants import ErrorCode, Protocol
from core.exceptions import AdapterError
from core.ledger import Ledger
from core.logging import get_logger
from core.math import get_amount_out
from core.validators import normalize_address
from dex.adapters.base import SwapParams, VenueAdapter

logger = get_logger(__name__)

# 0.3% LP fee
DEFAULT_PAIR_FEE_BPS = 30


@dataclass(frozen=True)
class Pair:
    """A constant-product pair deployed on the ledger."""
    address: str
    token0: str
    token1: str


class UniswapV2Adapter(VenueAdapter):
    """
    Adapter for Uniswap V2 style pairs.

    Usage:
        adapter = UniswapV2Adapter(ledger, adapter_address)
        ledger.deploy(adapter_address, adapter)
        adapter.create_pair(weth, usdc, pair_address)
        adapter.add_liquidity(weth, 10**20, usdc, 3 * 10**11, provider)
    """

    def __init__(
        self,
        ledger: Ledger,
        address: str,
        protocol: Protocol = Protocol.UNISWAP_V2,
        pair_fee_bps: int = DEFAULT_PAIR_FEE_BPS,
    ):
        super().__init__(address)
        self.protocol = Protocol(protocol).value
        self._ledger = ledger
        self._pair_fee_bps = pair_fee_bps
        self._pairs: Dict[FrozenSet[str], Pair] = {}

    # -------------------------------------------------------------------------
    # Pool management
    # -------------------------------------------------------------------------

    def create_pair(self, token_a: str, token_b: str, pair_address: str) -> Pair:
        token_a, token_b = normalize_address(token_a), normalize_address(token_b)
        token0, token1 = sorted((token_a, token_b))
        pair = Pair(address=normalize_address(pair_address), token0=token0, token1=token1)
        self._ledger.deploy(pair.address, pair)
        self._pairs[frozenset((token0, token1))] = pair
        return pair

    def get_pair(self, token_a: str, token_b: str) -> Pair:
        pair = self._pairs.get(frozenset((token_a.lower(), token_b.lower())))
        if pair is None:
            raise AdapterError(
                f"No {self.protocol} pair for {token_a}/{token_b}",
                ErrorCode.ADAPTER_POOL_NOT_FOUND,
                {"token_a": token_a, "token_b": token_b, "protocol": self.protocol},
            )
        return pair

    def add_liquidity(
        self,
        token_a: str,
        amount_a: int,
        token_b: str,
        amount_b: int,
        provider: str,
    ) -> None:
        pair = self.get_pair(token_a, token_b)
        self._ledger.transfer(token_a, provider, pair.address, amount_a)
        self._ledger.transfer(token_b, provider, pair.address, amount_b)

    def get_reserves(self, token_in: str, token_out: str) -> Tuple[int, int]:
        pair = self.get_pair(token_in, token_out)
        return (
            self._ledger.balance_of(token_in, pair.address),
            self._ledger.balance_of(token_out, pair.address),
        )

    # -------------------------------------------------------------------------
    # Quoting / execution
    # -------------------------------------------------------------------------

    def get_amounts_out(self, amount_in: int, path: Sequence[str]) -> List[int]:
        """Amounts at every hop of path for an exact input."""
        amounts = [amount_in]
        for token_in, token_out in zip(path, path[1:]):
            reserve_in, reserve_out = self.get_reserves(token_in, token_out)
            amounts.append(get_amount_out(amounts[-1], reserve_in, reserve_out, self._pair_fee_bps))
        return amounts

    def execute(self, params: SwapParams, caller: str) -> int:
        held = self._ledger.balance_of(params.token_in, self.address)
        if held < params.amount_in:
            raise AdapterError(
                "Adapter was not funded with the input amount",
                ErrorCode.ADAPTER_INSUFFICIENT_INPUT,
                {"held": held, "amount_in": params.amount_in, "token": params.token_in},
            )

        path = params.path
        amounts = self.get_amounts_out(params.amount_in, path)
        pairs = [self.get_pair(a, b) for a, b in zip(path, path[1:])]

        self._ledger.transfer(path[0], self.address, pairs[0].address, params.amount_in)
        for hop, pair in enumerate(pairs):
            to = pairs[hop + 1].address if hop + 1 < len(pairs) else params.recipient
            self._ledger.transfer(path[hop + 1], pair.address, to, amounts[hop + 1])

        logger.debug(
            "Swap executed",
            extra={"context": {
                "protocol": self.protocol,
                "caller": caller,
                "hops": len(pairs),
                "amount_in": params.amount_in,
                "amount_out": amounts[-1],
            }},
        )
        return amounts[-1]
