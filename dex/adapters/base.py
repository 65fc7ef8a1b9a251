# PATH: dex/adapters/base.py
"""
dex/adapters/base.py - Venue adapter contract.

ADAPTER CONTRACT:
=================

  execute(params, caller) -> amount_out

  - The executor has ALREADY moved params.amount_in of params.token_in to
    the adapter's own address before calling execute.
  - The adapter routes along params.path (with params.fees where the venue
    family uses them) and delivers the output to params.recipient.
  - It returns the realized output amount. The executor re-checks this
    against its own balance delta and against min_amount_out.
  - Any failure raises; the surrounding ledger transaction rolls back.

=================
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple

from core.constants import TradeType


@dataclass(frozen=True)
class SwapParams:
    """Parameters the executor hands to an adapter."""
    token_in: str
    token_out: str
    amount_in: int
    min_amount_out: int
    path: Tuple[str, ...]
    fees: Tuple[int, ...]
    recipient: str
    trade_type: TradeType
    deadline: int


class VenueAdapter(ABC):
    """Pluggable swap implementation for one liquidity protocol family."""

    #: Protocol identifier this adapter serves
    protocol: str = ""

    def __init__(self, address: str):
        self.address = address.lower()

    @abstractmethod
    def execute(self, params: SwapParams, caller: str) -> int:
        """Perform the swap and return the realized output amount."""
