# PATH: core/models.py
"""
Core data models for RELAY.

ORDER / PERMIT CONTRACT
=======================

An Order is the maker's signed intent:
  maker, input_token, input_amount, output_token, min_amount_out,
  expiry, nonce, authorized_executor

A TransferAuthorization (permit) is the paired one-time pull authorization:
  token, amount, nonce, deadline

The two MUST agree field-by-field:
  permit.token    == order.input_token
  permit.amount   == order.input_amount
  permit.nonce    == order.nonce
  permit.deadline == order.expiry

The permit signature only authorizes the permit's own fields, so any
divergence is rejected before anything moves.

Orders are identified by (maker, nonce). authorized_executor == ZERO_ADDRESS
means any relayer may submit.
=======================
"""

from dataclasses import asdict, dataclass
from typing import Any, ClassVar, Dict, Mapping, Optional, Tuple

from core.constants import ZERO_ADDRESS
from core.validators import normalize_address, validate_amount


def _pick(data: Mapping[str, Any], snake: str, camel: str, default: Any = None) -> Any:
    """Read a field under its snake_case or camelCase (wire) name."""
    if snake in data:
        return data[snake]
    if camel in data:
        return data[camel]
    return default


def _to_bytes(value: Any) -> bytes:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    if isinstance(value, str):
        return bytes.fromhex(value[2:] if value.startswith("0x") else value)
    raise TypeError(f"Cannot convert {type(value).__name__} to signature bytes")


# ============================================================================
# ORDER / PERMIT / TRADE
# ============================================================================

@dataclass(frozen=True)
class Order:
    """Maker's signed trade intent. Immutable once signed."""
    maker: str
    input_token: str
    input_amount: int
    output_token: str
    min_amount_out: int
    expiry: int
    nonce: int
    authorized_executor: str = ZERO_ADDRESS

    def __post_init__(self):
        for name in ("maker", "input_token", "output_token", "authorized_executor"):
            object.__setattr__(self, name, normalize_address(getattr(self, name)))
        for name in ("input_amount", "min_amount_out", "expiry", "nonce"):
            validate_amount(getattr(self, name), name)

    @property
    def key(self) -> Tuple[str, int]:
        return (self.maker, self.nonce)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Order":
        return cls(
            maker=_pick(data, "maker", "maker"),
            input_token=_pick(data, "input_token", "inputToken"),
            input_amount=int(_pick(data, "input_amount", "inputAmount")),
            output_token=_pick(data, "output_token", "outputToken"),
            min_amount_out=int(_pick(data, "min_amount_out", "minAmountOut")),
            expiry=int(_pick(data, "expiry", "expiry")),
            nonce=int(_pick(data, "nonce", "nonce")),
            authorized_executor=_pick(
                data, "authorized_executor", "authorizedExecutor", ZERO_ADDRESS
            ),
        )


@dataclass(frozen=True)
class TransferAuthorization:
    """Permit fields; the signature travels separately in Trade."""
    token: str
    amount: int
    nonce: int
    deadline: int

    def __post_init__(self):
        object.__setattr__(self, "token", normalize_address(self.token))
        for name in ("amount", "nonce", "deadline"):
            validate_amount(getattr(self, name), name)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TransferAuthorization":
        return cls(
            token=data["token"],
            amount=int(data["amount"]),
            nonce=int(data["nonce"]),
            deadline=int(data["deadline"]),
        )


@dataclass(frozen=True)
class Trade:
    """The unit submitted for settlement."""
    order: Order
    order_signature: bytes
    permit: TransferAuthorization
    permit_signature: bytes

    def __post_init__(self):
        for name in ("order_signature", "permit_signature"):
            object.__setattr__(self, name, _to_bytes(getattr(self, name)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "order": self.order.to_dict(),
            "order_signature": "0x" + self.order_signature.hex(),
            "permit": self.permit.to_dict(),
            "permit_signature": "0x" + self.permit_signature.hex(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Trade":
        return cls(
            order=Order.from_dict(data["order"]),
            order_signature=_to_bytes(_pick(data, "order_signature", "orderSignature", b"")),
            permit=TransferAuthorization.from_dict(data["permit"]),
            permit_signature=_to_bytes(_pick(data, "permit_signature", "permitSignature", b"")),
        )


@dataclass(frozen=True)
class RouteData:
    """
    How the adapter should route the swap.

    path: ordered token addresses (2-4 entries)
    fees: per-hop fee tiers, venue-specific (possibly empty)
    """
    protocol: str
    path: Tuple[str, ...]
    fees: Tuple[int, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "path", tuple(normalize_address(t) for t in self.path))
        object.__setattr__(self, "fees", tuple(int(f) for f in self.fees))

    @property
    def hops(self) -> int:
        return max(len(self.path) - 1, 0)

    @property
    def token_in(self) -> Optional[str]:
        return self.path[0] if self.path else None

    @property
    def token_out(self) -> Optional[str]:
        return self.path[-1] if self.path else None

    @property
    def intermediates(self) -> Tuple[str, ...]:
        return self.path[1:-1]

    def to_dict(self) -> Dict[str, Any]:
        return {"protocol": self.protocol, "path": list(self.path), "fees": list(self.fees)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RouteData":
        return cls(
            protocol=str(data["protocol"]),
            path=tuple(data.get("path", ())),
            fees=tuple(data.get("fees", ())),
        )


@dataclass(frozen=True)
class VenueInfo:
    """Adapter metadata owned by the venue registry."""
    protocol: str
    adapter: str
    active: bool = True
    version: int = 1
    name: str = ""

    def __post_init__(self):
        object.__setattr__(self, "adapter", normalize_address(self.adapter))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "VenueInfo":
        return cls(
            protocol=str(data["protocol"]),
            adapter=data["adapter"],
            active=bool(data.get("active", True)),
            version=int(data.get("version", 1)),
            name=data.get("name", ""),
        )


# ============================================================================
# EVENT RECORDS
# ============================================================================

@dataclass(frozen=True)
class Record:
    """Base for emitted records. `event` names the record type."""
    event: ClassVar[str] = "Record"

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["event"] = self.event
        return data


@dataclass(frozen=True)
class TradeSettled(Record):
    event: ClassVar[str] = "TradeSettled"
    maker: str
    relayer: str
    adapter: str
    protocol: str
    input_token: str
    input_amount: int
    output_token: str
    amount_out: int
    fee_amount: int
    maker_amount: int
    nonce: int
    trade_type: str
    order_hash: str = ""


@dataclass(frozen=True)
class NonceCancelled(Record):
    event: ClassVar[str] = "NonceCancelled"
    maker: str
    nonce: int


@dataclass(frozen=True)
class RegistryUpdated(Record):
    event: ClassVar[str] = "RegistryUpdated"
    old_registry: str
    new_registry: str


@dataclass(frozen=True)
class FeeRateUpdated(Record):
    event: ClassVar[str] = "FeeRateUpdated"
    old_fee_bps: int
    new_fee_bps: int


@dataclass(frozen=True)
class TokenWhitelisted(Record):
    event: ClassVar[str] = "TokenWhitelisted"
    token: str


@dataclass(frozen=True)
class TokenRemovedFromWhitelist(Record):
    event: ClassVar[str] = "TokenRemovedFromWhitelist"
    token: str


@dataclass(frozen=True)
class EmergencyWithdrawal(Record):
    event: ClassVar[str] = "EmergencyWithdrawal"
    asset: str
    to: str
    amount: int


@dataclass(frozen=True)
class OwnershipTransferred(Record):
    event: ClassVar[str] = "OwnershipTransferred"
    previous_owner: str
    new_owner: str


@dataclass(frozen=True)
class VenueRegistered(Record):
    event: ClassVar[str] = "VenueRegistered"
    protocol: str
    adapter: str
    version: int


@dataclass(frozen=True)
class VenueStatusChanged(Record):
    event: ClassVar[str] = "VenueStatusChanged"
    protocol: str
    active: bool

