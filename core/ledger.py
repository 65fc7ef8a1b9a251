# PATH: core/ledger.py
"""
In-memory execution environment for RELAY.

LEDGER CONTRACT
===============

The ledger plays the role the chain plays on-chain:
  - token balances keyed by (token, holder); the native asset is NATIVE_TOKEN
  - allowances keyed by (token, owner, spender)
  - a code registry: deploy(address, handle) turns an address into a contract;
    code_at(address) returns the handle, or None for a plain account
  - a block clock (timestamp, seconds) and chain_id
  - an append-only event log

ATOMICITY:
  with ledger.atomic():
      ...  # any exception restores balances, allowances, events and the
           # state of every attached component, then propagates

Components attached with attach() expose snapshot() -> object and
restore(snapshot). Nested atomic() blocks roll back to their own entry.
===============
"""

import copy
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Protocol, Tuple

from core.constants import DEFAULT_CHAIN_ID, ErrorCode, NATIVE_TOKEN
from core.exceptions import LedgerError
from core.logging import get_logger
from core.models import Record
from core.validators import normalize_address, validate_amount

logger = get_logger(__name__)


class Stateful(Protocol):
    """Component whose state participates in ledger transactions."""

    def snapshot(self) -> Any:
        ...

    def restore(self, snapshot: Any) -> None:
        ...


@dataclass(frozen=True)
class TokenInfo:
    """Token deployed on the ledger."""
    address: str
    symbol: str
    decimals: int = 18


class Ledger:
    """
    Balances, code registry, clock and event log with all-or-nothing
    transactions.

    Usage:
        ledger = Ledger(chain_id=1)
        ledger.create_token(usdc, "USDC", 6)
        ledger.mint(usdc, maker, 1_000_000)
        with ledger.atomic():
            ledger.transfer(usdc, maker, relayer, 10)
    """

    def __init__(self, chain_id: int = DEFAULT_CHAIN_ID, timestamp: Optional[int] = None):
        self.chain_id = chain_id
        self.timestamp = int(timestamp if timestamp is not None else time.time())
        self._balances: Dict[Tuple[str, str], int] = {}
        self._allowances: Dict[Tuple[str, str, str], int] = {}
        self._code: Dict[str, Any] = {}
        self._tokens: Dict[str, TokenInfo] = {}
        self._events: List[Record] = []
        self._participants: List[Stateful] = []
        self._depth = 0

    # -------------------------------------------------------------------------
    # Clock
    # -------------------------------------------------------------------------

    def now(self) -> int:
        return self.timestamp

    def advance(self, seconds: int) -> int:
        self.timestamp += seconds
        return self.timestamp

    # -------------------------------------------------------------------------
    # Code registry
    # -------------------------------------------------------------------------

    def deploy(self, address: str, handle: Any) -> str:
        """Bind a handle to an address, making it a contract."""
        address = normalize_address(address)
        if address in self._code:
            raise LedgerError(
                f"Address already has code: {address}",
                ErrorCode.ADDRESS_IN_USE,
                {"address": address},
            )
        self._code[address] = handle
        logger.debug(
            "Deployed handle",
            extra={"context": {"address": address, "type": type(handle).__name__}},
        )
        return address

    def code_at(self, address: str) -> Optional[Any]:
        return self._code.get(address.lower())

    def is_contract(self, address: str) -> bool:
        return address.lower() in self._code

    def create_token(self, address: str, symbol: str, decimals: int = 18) -> TokenInfo:
        info = TokenInfo(address=normalize_address(address), symbol=symbol, decimals=decimals)
        self.deploy(info.address, info)
        self._tokens[info.address] = info
        return info

    def token_info(self, address: str) -> Optional[TokenInfo]:
        return self._tokens.get(address.lower())

    # -------------------------------------------------------------------------
    # Balances
    # -------------------------------------------------------------------------

    def balance_of(self, token: str, holder: str) -> int:
        return self._balances.get((token.lower(), holder.lower()), 0)

    def mint(self, token: str, to: str, amount: int) -> None:
        token, to = normalize_address(token), normalize_address(to)
        validate_amount(amount)
        self._balances[(token, to)] = self.balance_of(token, to) + amount

    def transfer(self, token: str, sender: str, to: str, amount: int) -> None:
        """
        Move tokens (or the native asset) between holders.

        Raises:
            LedgerError: INSUFFICIENT_BALANCE
        """
        token, sender, to = (normalize_address(a) for a in (token, sender, to))
        validate_amount(amount)
        balance = self.balance_of(token, sender)
        if balance < amount:
            raise LedgerError(
                f"Insufficient balance: {balance} < {amount}",
                ErrorCode.INSUFFICIENT_BALANCE,
                {"token": token, "holder": sender, "balance": balance, "amount": amount},
            )
        self._balances[(token, sender)] = balance - amount
        self._balances[(token, to)] = self.balance_of(token, to) + amount

    def transfer_native(self, sender: str, to: str, amount: int) -> None:
        self.transfer(NATIVE_TOKEN, sender, to, amount)

    def approve(self, token: str, owner: str, spender: str, amount: int) -> None:
        token, owner, spender = (normalize_address(a) for a in (token, owner, spender))
        self._allowances[(token, owner, spender)] = validate_amount(amount)

    def allowance(self, token: str, owner: str, spender: str) -> int:
        return self._allowances.get((token.lower(), owner.lower(), spender.lower()), 0)

    def transfer_from(self, token: str, owner: str, to: str, amount: int, spender: str) -> None:
        """
        Spend an allowance granted by owner to spender.

        Raises:
            LedgerError: INSUFFICIENT_ALLOWANCE or INSUFFICIENT_BALANCE
        """
        allowed = self.allowance(token, owner, spender)
        if allowed < amount:
            raise LedgerError(
                f"Insufficient allowance: {allowed} < {amount}",
                ErrorCode.INSUFFICIENT_ALLOWANCE,
                {"token": token, "owner": owner, "spender": spender, "allowance": allowed},
            )
        self.transfer(token, owner, to, amount)
        self._allowances[(token.lower(), owner.lower(), spender.lower())] = allowed - amount

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def emit(self, record: Record) -> None:
        self._events.append(record)

    @property
    def events(self) -> List[Record]:
        return list(self._events)

    def events_of(self, record_type: type) -> List[Record]:
        return [e for e in self._events if isinstance(e, record_type)]

    # -------------------------------------------------------------------------
    # Transactions
    # -------------------------------------------------------------------------

    def attach(self, component: Stateful) -> None:
        """Include a component's state in every atomic() snapshot."""
        if component not in self._participants:
            self._participants.append(component)

    def _snapshot(self) -> Dict[str, Any]:
        return {
            "balances": dict(self._balances),
            "allowances": dict(self._allowances),
            "events": len(self._events),
            "participants": [copy.deepcopy(p.snapshot()) for p in self._participants],
        }

    def _restore(self, snap: Dict[str, Any]) -> None:
        self._balances = snap["balances"]
        self._allowances = snap["allowances"]
        del self._events[snap["events"]:]
        for component, state in zip(self._participants, snap["participants"]):
            component.restore(state)

    @contextmanager
    def atomic(self) -> Iterator["Ledger"]:
        """All-or-nothing state transition."""
        snap = self._snapshot()
        self._depth += 1
        try:
            yield self
        except BaseException:
            self._restore(snap)
            logger.debug("Transaction rolled back", extra={"context": {"depth": self._depth}})
            raise
        finally:
            self._depth -= 1

    @property
    def in_transaction(self) -> bool:
        return self._depth > 0
