"""
dex/transfer.py - Signature-based transfer service (permit with witness).

Reference implementation of the external transfer service the executor
consumes. Given a permit signed by the token owner, it pulls the permitted
token from the owner to a recipient, once.

TRANSFER CONTRACT:
==================

  permit_witness_transfer_from(permit, transfer, owner, witness,
                               witness_type_string, signature, caller)

  - block time <= permit.deadline                     else PERMIT_EXPIRED
  - (owner, permit.nonce) unused (unordered nonces)   else PERMIT_NONCE_USED
  - transfer.requested_amount <= permit.amount        else PERMIT_AMOUNT_EXCEEDED
  - signature over (permit, spender=caller, witness)
    recovers to owner                                 else INVALID_PERMIT_SIGNATURE
  - owner must have approved this service on the token (ledger allowance)

==================
"""

from dataclasses import dataclass
from typing import Dict, Set

from core.constants import ErrorCode
from core.exceptions import TransferError
from core.ledger import Ledger
from core.logging import get_logger
from core.models import Order, TransferAuthorization
from core.signing import PermitDomain, WITNESS_TYPE_STRING
from core.validators import normalize_address, validate_amount

logger = get_logger(__name__)


@dataclass(frozen=True)
class TransferDetails:
    """Where the pulled tokens go, and how many."""
    to: str
    requested_amount: int


class PermitTransferService:
    """
    Permit2-style transfer service deployed on the ledger.

    Usage:
        service = PermitTransferService(ledger, permit2_address)
        ledger.deploy(permit2_address, service)
        ledger.approve(token, maker, permit2_address, 2**256 - 1)
    """

    def __init__(self, ledger: Ledger, address: str):
        self.address = normalize_address(address)
        self.domain = PermitDomain(ledger.chain_id, self.address)
        self._ledger = ledger
        self._used: Dict[str, Set[int]] = {}
        ledger.attach(self)

    def is_nonce_used(self, owner: str, nonce: int) -> bool:
        return nonce in self._used.get(owner.lower(), ())

    def invalidate_nonce(self, nonce: int, caller: str) -> None:
        """Cancel one of the caller's own permit nonces."""
        self._used.setdefault(normalize_address(caller), set()).add(validate_amount(nonce, "nonce"))

    def permit_witness_transfer_from(
        self,
        permit: TransferAuthorization,
        transfer: TransferDetails,
        owner: str,
        witness: Order,
        witness_type_string: str,
        signature: bytes,
        caller: str,
    ) -> None:
        owner = owner.lower()
        now = self._ledger.now()

        if now > permit.deadline:
            raise TransferError(
                "Permit expired",
                ErrorCode.PERMIT_EXPIRED,
                {"deadline": permit.deadline, "now": now},
            )
        if self.is_nonce_used(owner, permit.nonce):
            raise TransferError(
                "Permit nonce already used",
                ErrorCode.PERMIT_NONCE_USED,
                {"owner": owner, "nonce": permit.nonce},
            )
        if transfer.requested_amount > permit.amount:
            raise TransferError(
                "Requested amount exceeds permitted amount",
                ErrorCode.PERMIT_AMOUNT_EXCEEDED,
                {"requested": transfer.requested_amount, "permitted": permit.amount},
            )
        if witness_type_string != WITNESS_TYPE_STRING:
            raise TransferError(
                "Unknown witness type",
                ErrorCode.INVALID_PERMIT_SIGNATURE,
                {"witness_type_string": witness_type_string},
            )

        signer = self.domain.recover_permit_signer(permit, caller, witness, signature)
        if signer != owner:
            raise TransferError(
                "Permit signature does not match owner",
                ErrorCode.INVALID_PERMIT_SIGNATURE,
                {"owner": owner, "recovered": signer, "spender": caller.lower()},
            )

        self._used.setdefault(owner, set()).add(permit.nonce)
        self._ledger.transfer_from(
            permit.token, owner, transfer.to, transfer.requested_amount, spender=self.address
        )
        logger.debug(
            "Permit transfer",
            extra={"context": {
                "owner": owner,
                "to": transfer.to,
                "token": permit.token,
                "amount": transfer.requested_amount,
            }},
        )

    def snapshot(self) -> Dict[str, Set[int]]:
        return {owner: set(nonces) for owner, nonces in self._used.items()}

    def restore(self, snapshot: Dict[str, Set[int]]) -> None:
        self._used = snapshot
