"""
core - Core utilities and models for RELAY.

This package contains:
- models.py: Data models (Order, TransferAuthorization, Trade, RouteData, VenueInfo, records)
- constants.py: Sentinels, limits, enums and error codes
- exceptions.py: Typed exceptions with error codes
- math.py: Integer fee arithmetic (no float)
- validators.py: Address helpers
- signing.py: Typed-signature domains (EIP-712)
- ledger.py: In-memory execution environment with atomic transactions
- logging.py: Structured JSON logging
"""

from core.constants import (
    ErrorCode,
    ErrorKind,
    MAX_FEE_BPS,
    NATIVE_TOKEN,
    Protocol,
    TradeType,
    ZERO_ADDRESS,
)
from core.exceptions import (
    AdminError,
    ConsistencyError,
    ExpiredOrderError,
    InsufficientOutputError,
    NonceAlreadyUsedError,
    RelayError,
    RouteError,
    StructuralError,
    UnauthorizedExecutorError,
    VenueError,
)
from core.ledger import Ledger
from core.logging import get_logger, setup_logging
from core.models import (
    Order,
    RouteData,
    Trade,
    TradeSettled,
    TransferAuthorization,
    VenueInfo,
)

__all__ = [
    # Constants
    "ErrorCode",
    "ErrorKind",
    "MAX_FEE_BPS",
    "NATIVE_TOKEN",
    "Protocol",
    "TradeType",
    "ZERO_ADDRESS",
    # Exceptions
    "AdminError",
    "ConsistencyError",
    "ExpiredOrderError",
    "InsufficientOutputError",
    "NonceAlreadyUsedError",
    "RelayError",
    "RouteError",
    "StructuralError",
    "UnauthorizedExecutorError",
    "VenueError",
    # Models
    "Order",
    "RouteData",
    "Trade",
    "TradeSettled",
    "TransferAuthorization",
    "VenueInfo",
    # Environment
    "Ledger",
    # Logging
    "get_logger",
    "setup_logging",
]
