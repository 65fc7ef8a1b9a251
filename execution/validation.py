# PATH: execution/validation.py
"""
Validation engine for RELAY.

PIPELINE CONTRACT (strict order, first failure aborts):
=======================================================

  1. structure      zero addresses / zero amounts / uint256 range
  2. consistency    order vs permit: token, amount, nonce, deadline
  3. temporal       now <= expiry (boundary inclusive)
  4. replay         (maker, nonce) not yet consumed
  5. authorization  authorized_executor is zero or equals the caller
  6. route shape    2 <= len(path) <= 4, endpoints match the order,
                    input != output, no native asset anywhere
  7. trust          every intermediate hop is whitelisted
  8. protocol       venue-family fee-tier rules; unknown protocol rejected
  9. signature      order signature recovers to the maker

Cheap, fundamental checks run first. Every check raises its own ErrorCode
with the offending values in details. Nothing here mutates state.

VENUE CONTRACT (checked by the executor after resolution):
  active, adapter has code and implements VenueAdapter, version != 0,
  venue protocol == route protocol.
=======================================================
"""

from typing import Any, Callable, Optional

from core.constants import (
    ALLOWED_FEE_TIERS,
    ErrorCode,
    MAX_PATH_LENGTH,
    MIN_PATH_LENGTH,
    PROTOCOL_FAMILIES,
    Protocol,
    TradeType,
    VenueFamily,
)
from core.exceptions import (
    ConsistencyError,
    ExpiredOrderError,
    NonceAlreadyUsedError,
    RouteError,
    StructuralError,
    UnauthorizedExecutorError,
    VenueError,
)
from core.logging import get_logger
from core.models import Order, RouteData, Trade, TransferAuthorization, VenueInfo
from core.signing import SignatureDomain
from core.validators import is_native, is_zero_address, validate_amount
from dex.adapters.base import VenueAdapter
from execution.classifier import classify_trade
from execution.state import ConfigStore, NonceLedger

logger = get_logger(__name__)


# =============================================================================
# PIPELINE STEPS
# =============================================================================

def check_structure(trade: Trade) -> None:
    """Step 1: no zero addresses, no zero amounts, every uint field in range."""
    order, permit = trade.order, trade.permit

    for code, value, name in (
        (ErrorCode.ZERO_MAKER, order.maker, "maker"),
        (ErrorCode.ZERO_INPUT_TOKEN, order.input_token, "input_token"),
        (ErrorCode.ZERO_OUTPUT_TOKEN, order.output_token, "output_token"),
        (ErrorCode.ZERO_PERMIT_TOKEN, permit.token, "permit.token"),
    ):
        if is_zero_address(value):
            raise StructuralError(f"{name} is the zero address", code, {"field": name})

    for code, value, name in (
        (ErrorCode.ZERO_INPUT_AMOUNT, order.input_amount, "input_amount"),
        (ErrorCode.ZERO_MIN_AMOUNT_OUT, order.min_amount_out, "min_amount_out"),
        (ErrorCode.ZERO_PERMIT_AMOUNT, permit.amount, "permit.amount"),
    ):
        if value == 0:
            raise StructuralError(f"{name} is zero", code, {"field": name})

    # Signed fields must encode as uint256
    for name in ("input_amount", "min_amount_out", "expiry", "nonce"):
        validate_amount(getattr(order, name), name)
    for name in ("amount", "nonce", "deadline"):
        validate_amount(getattr(permit, name), f"permit.{name}")


def check_consistency(order: Order, permit: TransferAuthorization) -> None:
    """Step 2: the permit must authorize exactly what the order spends."""
    if permit.token != order.input_token:
        raise ConsistencyError(
            "Permit token does not match order input token",
            ErrorCode.PERMIT_TOKEN_MISMATCH,
            {"order": order.input_token, "permit": permit.token},
        )
    if permit.amount != order.input_amount:
        raise ConsistencyError(
            "Permit amount does not match order input amount",
            ErrorCode.PERMIT_AMOUNT_MISMATCH,
            {"order": order.input_amount, "permit": permit.amount},
        )
    if permit.nonce != order.nonce:
        raise ConsistencyError(
            "Permit nonce does not match order nonce",
            ErrorCode.PERMIT_NONCE_MISMATCH,
            {"order": order.nonce, "permit": permit.nonce},
        )
    if permit.deadline != order.expiry:
        raise ConsistencyError(
            "Permit deadline does not match order expiry",
            ErrorCode.PERMIT_DEADLINE_MISMATCH,
            {"order": order.expiry, "permit": permit.deadline},
        )


def check_expiry(order: Order, now: int) -> None:
    """Step 3: settlement allowed up to and including expiry."""
    if now > order.expiry:
        raise ExpiredOrderError(
            f"Order expired at {order.expiry} (now {now})",
            {"expiry": order.expiry, "now": now},
        )


def check_nonce(order: Order, nonces: NonceLedger) -> None:
    """Step 4: replay protection."""
    if nonces.is_used(order.maker, order.nonce):
        raise NonceAlreadyUsedError(
            f"Nonce {order.nonce} already used for {order.maker}",
            {"maker": order.maker, "nonce": order.nonce},
        )


def check_executor(order: Order, caller: str) -> None:
    """Step 5: zero authorized_executor means any relayer."""
    if is_zero_address(order.authorized_executor):
        return
    if caller.lower() != order.authorized_executor:
        raise UnauthorizedExecutorError(
            "Caller is not the order's authorized executor",
            {"caller": caller.lower(), "authorized_executor": order.authorized_executor},
        )


def check_route_shape(order: Order, route: RouteData) -> None:
    """Step 6: bounded path whose endpoints are the order's tokens."""
    length = len(route.path)
    if length < MIN_PATH_LENGTH:
        raise RouteError(
            f"Path has {length} tokens, minimum is {MIN_PATH_LENGTH}",
            ErrorCode.PATH_TOO_SHORT,
            {"length": length},
        )
    if length > MAX_PATH_LENGTH:
        raise RouteError(
            f"Path has {length} tokens, maximum is {MAX_PATH_LENGTH}",
            ErrorCode.PATH_TOO_LONG,
            {"length": length},
        )
    if route.path[0] != order.input_token:
        raise RouteError(
            "Path does not start with the order input token",
            ErrorCode.PATH_INPUT_MISMATCH,
            {"expected": order.input_token, "actual": route.path[0]},
        )
    if route.path[-1] != order.output_token:
        raise RouteError(
            "Path does not end with the order output token",
            ErrorCode.PATH_OUTPUT_MISMATCH,
            {"expected": order.output_token, "actual": route.path[-1]},
        )
    if order.input_token == order.output_token:
        raise RouteError(
            "Input and output token are the same",
            ErrorCode.SAME_INPUT_OUTPUT_TOKEN,
            {"token": order.input_token},
        )
    # TODO: lift once adapters wrap/unwrap the native asset themselves
    for token in route.path:
        if is_native(token):
            raise RouteError(
                "Native asset legs are not supported",
                ErrorCode.NATIVE_ASSET_NOT_SUPPORTED,
                {"token": token},
            )


def check_intermediates(route: RouteData, is_whitelisted: Callable[[str], bool]) -> None:
    """Step 7: every non-endpoint hop must be trusted."""
    for index, token in enumerate(route.intermediates, start=1):
        if not is_whitelisted(token):
            raise RouteError(
                f"Intermediate token {token} is not whitelisted",
                ErrorCode.TOKEN_NOT_WHITELISTED,
                {"token": token, "index": index},
            )


def parse_protocol(value: Any) -> Protocol:
    try:
        return Protocol(value)
    except ValueError:
        raise RouteError(
            f"Unsupported protocol: {value!r}",
            ErrorCode.UNSUPPORTED_PROTOCOL,
            {"protocol": str(value)},
        ) from None


def check_protocol_shape(route: RouteData) -> Protocol:
    """Step 8: fee-tier cardinality and values per venue family."""
    protocol = parse_protocol(route.protocol)
    family = PROTOCOL_FAMILIES[protocol]

    expected = route.hops if family == VenueFamily.FIXED_TIER else 0
    if len(route.fees) != expected:
        raise RouteError(
            f"{protocol.value} expects {expected} fee tiers, got {len(route.fees)}",
            ErrorCode.FEE_TIERS_LENGTH_MISMATCH,
            {"protocol": protocol.value, "expected": expected, "actual": len(route.fees)},
        )

    allowed = ALLOWED_FEE_TIERS.get(protocol, frozenset())
    for index, fee in enumerate(route.fees):
        if fee not in allowed:
            raise RouteError(
                f"Fee tier {fee} not allowed for {protocol.value}",
                ErrorCode.INVALID_FEE_TIER,
                {"protocol": protocol.value, "fee": fee, "index": index,
                 "allowed": sorted(allowed)},
            )
    return protocol


def check_venue(info: VenueInfo, route: RouteData, code_at: Callable[[str], Any]) -> VenueAdapter:
    """
    Sanity-check a resolved venue before dispatch.

    Returns:
        The adapter handle deployed at info.adapter
    """
    if not info.active:
        raise VenueError(
            f"Venue {info.protocol} is inactive",
            ErrorCode.VENUE_INACTIVE,
            {"protocol": info.protocol, "adapter": info.adapter},
        )
    handle = code_at(info.adapter)
    if handle is None or not isinstance(handle, VenueAdapter):
        raise VenueError(
            f"No adapter deployed at {info.adapter}",
            ErrorCode.INVALID_ADAPTER,
            {"adapter": info.adapter, "has_code": handle is not None},
        )
    if info.version == 0:
        raise VenueError(
            f"Venue {info.protocol} has no version",
            ErrorCode.INVALID_VENUE_VERSION,
            {"protocol": info.protocol, "version": info.version},
        )
    if info.protocol != route.protocol:
        raise VenueError(
            "Resolved venue protocol does not match route protocol",
            ErrorCode.VENUE_PROTOCOL_MISMATCH,
            {"route": str(route.protocol), "venue": str(info.protocol)},
        )
    return handle


# =============================================================================
# VALIDATOR
# =============================================================================

def validate_offline(
    trade: Trade,
    route: RouteData,
    is_whitelisted: Callable[[str], bool],
) -> TradeType:
    """
    Stateless subset of the pipeline (steps 1, 2, 6, 7, 8).

    Lets a relayer pre-check a trade without executor state.
    """
    check_structure(trade)
    check_consistency(trade.order, trade.permit)
    check_route_shape(trade.order, route)
    check_intermediates(route, is_whitelisted)
    check_protocol_shape(route)
    return classify_trade(route.path[0], route.path[-1])


class TradeValidator:
    """
    Full validation pipeline with read access to executor state.

    Usage:
        validator = TradeValidator(config, nonces, domain)
        trade_type = validator.validate(trade, route, caller=relayer, now=ts)
    """

    def __init__(
        self,
        config: ConfigStore,
        nonces: NonceLedger,
        domain: Optional[SignatureDomain] = None,
    ):
        self._config = config
        self._nonces = nonces
        self._domain = domain

    def validate(self, trade: Trade, route: RouteData, caller: str, now: int) -> TradeType:
        order = trade.order

        check_structure(trade)
        check_consistency(order, trade.permit)
        check_expiry(order, now)
        check_nonce(order, self._nonces)
        check_executor(order, caller)
        check_route_shape(order, route)
        check_intermediates(route, self._config.is_whitelisted)
        check_protocol_shape(route)
        if self._domain is not None:
            self._domain.verify_order(order, trade.order_signature)

        trade_type = classify_trade(route.path[0], route.path[-1])
        logger.debug(
            "Trade validated",
            extra={"context": {
                "maker": order.maker,
                "nonce": order.nonce,
                "protocol": str(route.protocol),
                "trade_type": trade_type.value,
            }},
        )
        return trade_type
