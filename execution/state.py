# PATH: execution/state.py
"""
Executor-owned state: nonce ledger and configuration store.

NONCE LEDGER
  Append-only set of consumed (maker, nonce) pairs. A pair transitions
  unused -> used at most once; there is no removal API.

CONFIG STORE
  Fee rate (bps, always < MAX_FEE_BPS), venue-registry pointer and the
  intermediate-token whitelist. Mutated only through the executor's
  owner-gated administrative operations; read-only everywhere else.

Both participate in ledger transactions (snapshot/restore).
"""

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, Set, Tuple

from core.constants import ErrorCode, MAX_FEE_BPS, ZERO_ADDRESS
from core.exceptions import AdminError, NonceAlreadyUsedError


def validate_fee_bps(fee_bps: Any) -> int:
    """Fee rate must be an int in [0, MAX_FEE_BPS); bool rejected."""
    if isinstance(fee_bps, bool) or not isinstance(fee_bps, int) \
            or not 0 <= fee_bps < MAX_FEE_BPS:
        raise AdminError(
            f"Fee rate must be an integer below {MAX_FEE_BPS} bps",
            ErrorCode.FEE_TOO_HIGH,
            {"fee_bps": fee_bps, "max_fee_bps": MAX_FEE_BPS},
        )
    return fee_bps


class NonceLedger:
    """Append-only record of consumed (maker, nonce) pairs."""

    def __init__(self):
        self._used: Dict[str, Set[int]] = {}

    def is_used(self, maker: str, nonce: int) -> bool:
        return nonce in self._used.get(maker.lower(), ())

    def mark_used(self, maker: str, nonce: int) -> None:
        """
        Consume a nonce.

        Raises:
            NonceAlreadyUsedError: if (maker, nonce) was consumed before
        """
        maker = maker.lower()
        if self.is_used(maker, nonce):
            raise NonceAlreadyUsedError(
                f"Nonce {nonce} already used for {maker}",
                {"maker": maker, "nonce": nonce},
            )
        self._used.setdefault(maker, set()).add(nonce)

    def used_nonces(self, maker: str) -> FrozenSet[int]:
        return frozenset(self._used.get(maker.lower(), ()))

    def __len__(self) -> int:
        return sum(len(n) for n in self._used.values())

    def snapshot(self) -> Dict[str, Set[int]]:
        return {maker: set(nonces) for maker, nonces in self._used.items()}

    def restore(self, snapshot: Dict[str, Set[int]]) -> None:
        self._used = snapshot


@dataclass
class ConfigStore:
    """Owned configuration; mutation API used by the administrative surface."""
    fee_bps: int = 0
    registry: str = ZERO_ADDRESS
    whitelist: Set[str] = field(default_factory=set)

    def __post_init__(self):
        validate_fee_bps(self.fee_bps)
        self.whitelist = {t.lower() for t in self.whitelist}

    def is_whitelisted(self, token: str) -> bool:
        return token.lower() in self.whitelist

    def add_tokens(self, tokens: Iterable[str]) -> None:
        self.whitelist.update(t.lower() for t in tokens)

    def remove_token(self, token: str) -> None:
        self.whitelist.discard(token.lower())

    def snapshot(self) -> Tuple[int, str, FrozenSet[str]]:
        return (self.fee_bps, self.registry, frozenset(self.whitelist))

    def restore(self, snapshot: Tuple[int, str, FrozenSet[str]]) -> None:
        self.fee_bps, self.registry, whitelist = snapshot
        self.whitelist = set(whitelist)
