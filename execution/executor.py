# PATH: execution/executor.py
"""
RELAY settlement executor.

SETTLEMENT CONTRACT:
====================

settle(trade, route, caller) → TradeSettled

  1. validate          full pipeline (execution/validation.py)
  2. classify          trade type from the route endpoints
  3. resolve venue     registry lookup + venue sanity checks
  4. consume nonce     (maker, nonce) marked used BEFORE any external call
  5. transfer in       permit pull of input_amount maker → adapter
  6. swap              adapter.execute → amount_out
  7. guarantee         amount_out >= min_amount_out, and actually delivered
  8. fee split         fee = floor(amount_out * fee_bps / 10000) → relayer
  9. payout            amount_out - fee → maker
 10. record            TradeSettled emitted

Steps 1-10 run inside one ledger transaction: any failure restores every
balance, nonce and record. The whole call is also wrapped in a
single-entry guard, so a reentrant settle from the transfer service or an
adapter is rejected immediately.

ADMINISTRATIVE SURFACE (owner only):
  set_registry, set_fee_rate, add_whitelisted, add_whitelisted_batch,
  remove_whitelisted, emergency_withdraw, transfer_ownership

cancel_nonce(nonce, caller) marks (caller, nonce) used without a trade.
====================
"""

from typing import Iterable, List, Optional, Tuple

from core.constants import (
    ErrorCode,
    NATIVE_TOKEN,
    TradeType,
    ZERO_ADDRESS,
)
from core.exceptions import AdminError, InsufficientOutputError, RelayError, VenueError
from core.ledger import Ledger
from core.logging import get_logger
from core.math import split_output
from core.models import (
    EmergencyWithdrawal,
    FeeRateUpdated,
    NonceCancelled,
    OwnershipTransferred,
    RegistryUpdated,
    RouteData,
    TokenRemovedFromWhitelist,
    TokenWhitelisted,
    Trade,
    TradeSettled,
    VenueInfo,
)
from core.signing import SignatureDomain, WITNESS_TYPE_STRING
from core.validators import is_native, is_zero_address, normalize_address
from dex.adapters.base import SwapParams, VenueAdapter
from dex.transfer import TransferDetails
from execution.access import OwnerAuth
from execution.guard import SingleEntryGuard
from execution.state import ConfigStore, NonceLedger, validate_fee_bps
from execution.validation import TradeValidator, check_venue

logger = get_logger(__name__)


class SettlementExecutor:
    """
    Settles signed orders against pluggable venues on behalf of makers.

    Capabilities are composed, not inherited: owner authorization
    (OwnerAuth), a single-entry guard (SingleEntryGuard) and the order
    signature domain (SignatureDomain) can each be injected.

    Usage:
        executor = SettlementExecutor.deploy(ledger, executor_address, owner, permit2_address)
        executor.set_registry(registry_address, caller=owner)
        executor.add_whitelisted(weth, caller=owner)
        record = executor.settle(trade, route, caller=relayer)
    """

    def __init__(
        self,
        ledger: Ledger,
        address: str,
        owner: str,
        transfer_service: str,
        registry: str = ZERO_ADDRESS,
        fee_bps: int = 0,
        whitelist: Iterable[str] = (),
        auth: Optional[OwnerAuth] = None,
        guard: Optional[SingleEntryGuard] = None,
        domain: Optional[SignatureDomain] = None,
    ):
        self.address = normalize_address(address)
        self._ledger = ledger
        self._auth = auth or OwnerAuth(owner)
        self._guard = guard or SingleEntryGuard()
        self.domain = domain or SignatureDomain(ledger.chain_id, self.address)

        self._transfer_service = normalize_address(transfer_service)
        if not ledger.is_contract(self._transfer_service):
            raise AdminError(
                "Transfer service has no code",
                ErrorCode.NOT_A_CONTRACT,
                {"address": self._transfer_service},
            )

        whitelist = [self._check_whitelist_target(t) for t in whitelist]
        self._config = ConfigStore(
            fee_bps=fee_bps,
            registry=normalize_address(registry),
            whitelist=set(whitelist),
        )
        self._nonces = NonceLedger()
        self._validator = TradeValidator(self._config, self._nonces, self.domain)

        for component in (self._nonces, self._config, self._auth):
            ledger.attach(component)

    @classmethod
    def deploy(cls, ledger: Ledger, address: str, owner: str, transfer_service: str, **kwargs):
        """Construct and bind the executor to its address on the ledger."""
        executor = cls(ledger, address, owner, transfer_service, **kwargs)
        ledger.deploy(executor.address, executor)
        return executor

    # -------------------------------------------------------------------------
    # Read accessors
    # -------------------------------------------------------------------------

    @property
    def owner(self) -> str:
        return self._auth.owner

    @property
    def fee_rate(self) -> int:
        return self._config.fee_bps

    @property
    def registry(self) -> str:
        return self._config.registry

    @property
    def transfer_service(self) -> str:
        return self._transfer_service

    def is_whitelisted(self, token: str) -> bool:
        return self._config.is_whitelisted(token)

    def whitelisted_tokens(self) -> List[str]:
        return sorted(self._config.whitelist)

    def is_nonce_used(self, maker: str, nonce: int) -> bool:
        return self._nonces.is_used(maker, nonce)

    # -------------------------------------------------------------------------
    # Settlement
    # -------------------------------------------------------------------------

    def settle(self, trade: Trade, route: RouteData, caller: str) -> TradeSettled:
        """
        Settle one trade atomically.

        Raises:
            RelayError: a subclass naming the exact failed check; nothing
                has changed when it propagates
        """
        caller = normalize_address(caller)
        order = trade.order

        with self._guard.enter("settle"):
            try:
                with self._ledger.atomic():
                    record = self._settle(trade, route, caller)
            except RelayError as exc:
                logger.warning(
                    f"Settlement rejected: {exc.code.value}",
                    extra={"context": {
                        "maker": order.maker,
                        "nonce": order.nonce,
                        "relayer": caller,
                        "kind": exc.kind.value,
                        "code": exc.code.value,
                        "details": exc.details,
                    }},
                )
                raise

        logger.info("Trade settled", extra={"context": record.to_dict()})
        return record

    def _settle(self, trade: Trade, route: RouteData, caller: str) -> TradeSettled:
        order = trade.order

        trade_type = self._validator.validate(trade, route, caller, self._ledger.now())
        venue, adapter = self._resolve_venue(route)

        # Consume before any external call
        self._nonces.mark_used(order.maker, order.nonce)

        transfer_service = self._ledger.code_at(self._transfer_service)
        transfer_service.permit_witness_transfer_from(
            permit=trade.permit,
            transfer=TransferDetails(to=venue.adapter, requested_amount=order.input_amount),
            owner=order.maker,
            witness=order,
            witness_type_string=WITNESS_TYPE_STRING,
            signature=trade.permit_signature,
            caller=self.address,
        )

        payout_asset = NATIVE_TOKEN if trade_type == TradeType.TOKEN_IN_NATIVE_OUT else order.output_token
        balance_before = self._ledger.balance_of(payout_asset, self.address)

        amount_out = adapter.execute(
            SwapParams(
                token_in=order.input_token,
                token_out=order.output_token,
                amount_in=order.input_amount,
                min_amount_out=order.min_amount_out,
                path=route.path,
                fees=route.fees,
                recipient=self.address,
                trade_type=trade_type,
                deadline=order.expiry,
            ),
            caller=self.address,
        )

        if amount_out < order.min_amount_out:
            raise InsufficientOutputError(
                f"Output {amount_out} below minimum {order.min_amount_out}",
                ErrorCode.INSUFFICIENT_OUTPUT,
                {"amount_out": amount_out, "min_amount_out": order.min_amount_out},
            )
        received = self._ledger.balance_of(payout_asset, self.address) - balance_before
        if received < amount_out:
            raise InsufficientOutputError(
                f"Adapter reported {amount_out} but delivered {received}",
                ErrorCode.OUTPUT_NOT_RECEIVED,
                {"reported": amount_out, "received": received, "adapter": venue.adapter},
            )

        fee_amount, maker_amount = split_output(amount_out, self._config.fee_bps)
        if fee_amount:
            self._pay(payout_asset, caller, fee_amount)
        self._pay(payout_asset, order.maker, maker_amount)

        record = TradeSettled(
            maker=order.maker,
            relayer=caller,
            adapter=venue.adapter,
            protocol=str(venue.protocol),
            input_token=order.input_token,
            input_amount=order.input_amount,
            output_token=order.output_token,
            amount_out=amount_out,
            fee_amount=fee_amount,
            maker_amount=maker_amount,
            nonce=order.nonce,
            trade_type=trade_type.value,
            order_hash=self.domain.order_hash(order),
        )
        self._ledger.emit(record)
        return record

    def _resolve_venue(self, route: RouteData) -> Tuple[VenueInfo, VenueAdapter]:
        registry = None
        if not is_zero_address(self._config.registry):
            registry = self._ledger.code_at(self._config.registry)
        if registry is None:
            raise VenueError(
                "Venue registry is not set",
                ErrorCode.REGISTRY_NOT_SET,
                {"registry": self._config.registry},
            )
        info = registry.resolve(route.protocol)
        return info, check_venue(info, route, self._ledger.code_at)

    def _pay(self, asset: str, to: str, amount: int) -> None:
        if is_native(asset):
            self._ledger.transfer_native(self.address, to, amount)
        else:
            self._ledger.transfer(asset, self.address, to, amount)

    # -------------------------------------------------------------------------
    # Cancellation
    # -------------------------------------------------------------------------

    def cancel_nonce(self, nonce: int, caller: str) -> NonceCancelled:
        """Invalidate the caller's own (caller, nonce) without trading."""
        caller = normalize_address(caller)
        with self._ledger.atomic():
            self._nonces.mark_used(caller, nonce)
            record = NonceCancelled(maker=caller, nonce=nonce)
            self._ledger.emit(record)
        logger.info("Nonce cancelled", extra={"context": {"maker": caller, "nonce": nonce}})
        return record

    # -------------------------------------------------------------------------
    # Administration
    # -------------------------------------------------------------------------

    def set_registry(self, registry: str, caller: str) -> None:
        self._auth.require_owner(caller)
        registry = normalize_address(registry)
        if is_zero_address(registry):
            raise AdminError("Registry cannot be the zero address", ErrorCode.ZERO_ADDRESS)

        with self._ledger.atomic():
            old = self._config.registry
            self._config.registry = registry
            self._ledger.emit(RegistryUpdated(old_registry=old, new_registry=registry))
        logger.info("Registry updated", extra={"context": {"old": old, "new": registry}})

    def set_fee_rate(self, fee_bps: int, caller: str) -> None:
        self._auth.require_owner(caller)
        validate_fee_bps(fee_bps)

        with self._ledger.atomic():
            old = self._config.fee_bps
            self._config.fee_bps = fee_bps
            self._ledger.emit(FeeRateUpdated(old_fee_bps=old, new_fee_bps=fee_bps))
        logger.info("Fee rate updated", extra={"context": {"old": old, "new": fee_bps}})

    def _check_whitelist_target(self, token: str) -> str:
        token = normalize_address(token)
        if is_zero_address(token):
            raise AdminError("Cannot whitelist the zero address", ErrorCode.ZERO_ADDRESS)
        if not self._ledger.is_contract(token):
            raise AdminError(
                f"Token {token} has no code",
                ErrorCode.NOT_A_CONTRACT,
                {"token": token},
            )
        return token

    def add_whitelisted(self, token: str, caller: str) -> None:
        self.add_whitelisted_batch([token], caller)

    def add_whitelisted_batch(self, tokens: Iterable[str], caller: str) -> None:
        """All-or-nothing: one bad token rejects the whole batch."""
        self._auth.require_owner(caller)
        added = []
        with self._ledger.atomic():
            for token in tokens:
                token = self._check_whitelist_target(token)
                self._config.add_tokens([token])
                self._ledger.emit(TokenWhitelisted(token=token))
                added.append(token)

        for token in added:
            logger.info("Token whitelisted", extra={"context": {"token": token}})

    def remove_whitelisted(self, token: str, caller: str) -> None:
        self._auth.require_owner(caller)
        token = normalize_address(token)
        if not self._config.is_whitelisted(token):
            raise AdminError(
                f"Token {token} is not whitelisted",
                ErrorCode.TOKEN_NOT_IN_WHITELIST,
                {"token": token},
            )

        with self._ledger.atomic():
            self._config.remove_token(token)
            self._ledger.emit(TokenRemovedFromWhitelist(token=token))
        logger.info("Token removed from whitelist", extra={"context": {"token": token}})

    def emergency_withdraw(self, asset: str, to: str, caller: str) -> int:
        """
        Sweep the executor's whole balance of asset (token or native) to `to`.

        Returns:
            Amount withdrawn
        """
        self._auth.require_owner(caller)
        asset, to = normalize_address(asset), normalize_address(to)
        if is_zero_address(to):
            raise AdminError("Recipient cannot be the zero address", ErrorCode.ZERO_ADDRESS)

        with self._ledger.atomic():
            amount = self._ledger.balance_of(asset, self.address)
            if amount:
                self._pay(asset, to, amount)
            self._ledger.emit(EmergencyWithdrawal(asset=asset, to=to, amount=amount))
        logger.warning(
            "Emergency withdrawal",
            extra={"context": {"asset": asset, "to": to, "amount": amount}},
        )
        return amount

    def transfer_ownership(self, new_owner: str, caller: str) -> None:
        with self._ledger.atomic():
            previous = self._auth.transfer(new_owner, caller)
            self._ledger.emit(OwnershipTransferred(previous_owner=previous, new_owner=self.owner))
        logger.info(
            "Ownership transferred",
            extra={"context": {"previous": previous, "new": self.owner}},
        )
