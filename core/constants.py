# PATH: core/constants.py
"""
Constants for RELAY.

Contains sentinels, settlement limits, enums and error codes.

Addresses are always lower-case 0x-prefixed hex strings.
"""

from enum import Enum
from typing import Dict, Final, FrozenSet, Tuple

# =============================================================================
# ADDRESS SENTINELS
# =============================================================================

ZERO_ADDRESS: Final[str] = "0x" + "0" * 40

# Native asset pseudo-token (aggregator convention)
NATIVE_TOKEN: Final[str] = "0x" + "e" * 40

# =============================================================================
# SETTLEMENT LIMITS
# =============================================================================

BPS_DENOMINATOR: Final[int] = 10_000

# Largest value a uint256 field can carry
MAX_UINT256: Final[int] = 2**256 - 1

# Fee rate must stay strictly below this (10%)
MAX_FEE_BPS: Final[int] = 1_000

MIN_PATH_LENGTH: Final[int] = 2
MAX_PATH_LENGTH: Final[int] = 4

# Typed-signature domains
EXECUTOR_DOMAIN_NAME: Final[str] = "RelayExecutor"
EXECUTOR_DOMAIN_VERSION: Final[str] = "1"
PERMIT2_DOMAIN_NAME: Final[str] = "Permit2"

DEFAULT_CHAIN_ID: Final[int] = 1


class Protocol(str, Enum):
    """Venue protocol identifiers accepted in route data."""
    UNISWAP_V2 = "UNISWAP_V2"
    SUSHISWAP_V2 = "SUSHISWAP_V2"
    UNISWAP_V3 = "UNISWAP_V3"
    PANCAKESWAP_V3 = "PANCAKESWAP_V3"
    ALGEBRA = "ALGEBRA"

    def __str__(self) -> str:
        return self.value


class VenueFamily(str, Enum):
    """Fee-tier shape families."""
    CONSTANT_PRODUCT = "CONSTANT_PRODUCT"
    FIXED_TIER = "FIXED_TIER"
    DYNAMIC_FEE = "DYNAMIC_FEE"


PROTOCOL_FAMILIES: Final[Dict[Protocol, VenueFamily]] = {
    Protocol.UNISWAP_V2: VenueFamily.CONSTANT_PRODUCT,
    Protocol.SUSHISWAP_V2: VenueFamily.CONSTANT_PRODUCT,
    Protocol.UNISWAP_V3: VenueFamily.FIXED_TIER,
    Protocol.PANCAKESWAP_V3: VenueFamily.FIXED_TIER,
    # Algebra pools set their own (dynamic) fee
    Protocol.ALGEBRA: VenueFamily.DYNAMIC_FEE,
}

# Fee tiers in hundredths of a bip
V3_FEE_TIERS: Final[Tuple[int, ...]] = (100, 500, 3000, 10000)
PANCAKESWAP_V3_FEE_TIERS: Final[Tuple[int, ...]] = (100, 500, 2500, 10000)

ALLOWED_FEE_TIERS: Final[Dict[Protocol, FrozenSet[int]]] = {
    Protocol.UNISWAP_V3: frozenset(V3_FEE_TIERS),
    Protocol.PANCAKESWAP_V3: frozenset(PANCAKESWAP_V3_FEE_TIERS),
}


class TradeType(str, Enum):
    """Trade type derived from the route endpoints."""
    NATIVE_IN_TOKEN_OUT = "NATIVE_IN_TOKEN_OUT"
    TOKEN_IN_NATIVE_OUT = "TOKEN_IN_NATIVE_OUT"
    TOKEN_IN_TOKEN_OUT = "TOKEN_IN_TOKEN_OUT"


class ErrorKind(str, Enum):
    """Error taxonomy kinds."""
    STRUCTURAL = "STRUCTURAL"
    CONSISTENCY = "CONSISTENCY"
    TEMPORAL = "TEMPORAL"
    REPLAY = "REPLAY"
    AUTHORIZATION = "AUTHORIZATION"
    ROUTE = "ROUTE"
    VENUE = "VENUE"
    OUTCOME = "OUTCOME"
    ADMIN = "ADMIN"
    SIGNATURE = "SIGNATURE"
    REENTRANCY = "REENTRANCY"
    TRANSFER = "TRANSFER"
    LEDGER = "LEDGER"
    ADAPTER = "ADAPTER"
    CONFIG = "CONFIG"
    UNKNOWN = "UNKNOWN"


class ErrorCode(str, Enum):
    """
    Distinct error codes.

    Every rejection carries exactly one of these so a relayer can decide
    whether to retry with different parameters or drop the order.
    """
    # Structural
    ZERO_MAKER = "ZERO_MAKER"
    ZERO_INPUT_TOKEN = "ZERO_INPUT_TOKEN"
    ZERO_OUTPUT_TOKEN = "ZERO_OUTPUT_TOKEN"
    ZERO_PERMIT_TOKEN = "ZERO_PERMIT_TOKEN"
    ZERO_INPUT_AMOUNT = "ZERO_INPUT_AMOUNT"
    ZERO_MIN_AMOUNT_OUT = "ZERO_MIN_AMOUNT_OUT"
    ZERO_PERMIT_AMOUNT = "ZERO_PERMIT_AMOUNT"

    # Consistency
    PERMIT_TOKEN_MISMATCH = "PERMIT_TOKEN_MISMATCH"
    PERMIT_AMOUNT_MISMATCH = "PERMIT_AMOUNT_MISMATCH"
    PERMIT_NONCE_MISMATCH = "PERMIT_NONCE_MISMATCH"
    PERMIT_DEADLINE_MISMATCH = "PERMIT_DEADLINE_MISMATCH"

    # Temporal
    ORDER_EXPIRED = "ORDER_EXPIRED"

    # Replay
    NONCE_ALREADY_USED = "NONCE_ALREADY_USED"

    # Authorization
    UNAUTHORIZED_EXECUTOR = "UNAUTHORIZED_EXECUTOR"

    # Route shape
    PATH_TOO_SHORT = "PATH_TOO_SHORT"
    PATH_TOO_LONG = "PATH_TOO_LONG"
    PATH_INPUT_MISMATCH = "PATH_INPUT_MISMATCH"
    PATH_OUTPUT_MISMATCH = "PATH_OUTPUT_MISMATCH"
    SAME_INPUT_OUTPUT_TOKEN = "SAME_INPUT_OUTPUT_TOKEN"
    NATIVE_ASSET_NOT_SUPPORTED = "NATIVE_ASSET_NOT_SUPPORTED"
    TOKEN_NOT_WHITELISTED = "TOKEN_NOT_WHITELISTED"
    UNSUPPORTED_PROTOCOL = "UNSUPPORTED_PROTOCOL"
    FEE_TIERS_LENGTH_MISMATCH = "FEE_TIERS_LENGTH_MISMATCH"
    INVALID_FEE_TIER = "INVALID_FEE_TIER"

    # Venue
    REGISTRY_NOT_SET = "REGISTRY_NOT_SET"
    VENUE_NOT_REGISTERED = "VENUE_NOT_REGISTERED"
    VENUE_INACTIVE = "VENUE_INACTIVE"
    INVALID_ADAPTER = "INVALID_ADAPTER"
    VENUE_PROTOCOL_MISMATCH = "VENUE_PROTOCOL_MISMATCH"
    INVALID_VENUE_VERSION = "INVALID_VENUE_VERSION"

    # Outcome
    INSUFFICIENT_OUTPUT = "INSUFFICIENT_OUTPUT"
    OUTPUT_NOT_RECEIVED = "OUTPUT_NOT_RECEIVED"

    # Administrative
    NOT_OWNER = "NOT_OWNER"
    FEE_TOO_HIGH = "FEE_TOO_HIGH"
    ZERO_ADDRESS = "ZERO_ADDRESS"
    NOT_A_CONTRACT = "NOT_A_CONTRACT"
    TOKEN_NOT_IN_WHITELIST = "TOKEN_NOT_IN_WHITELIST"

    # Signatures
    INVALID_ORDER_SIGNATURE = "INVALID_ORDER_SIGNATURE"
    INVALID_PERMIT_SIGNATURE = "INVALID_PERMIT_SIGNATURE"
    MALFORMED_SIGNATURE = "MALFORMED_SIGNATURE"

    # Guard
    REENTRANT_CALL = "REENTRANT_CALL"

    # Transfer service
    PERMIT_EXPIRED = "PERMIT_EXPIRED"
    PERMIT_NONCE_USED = "PERMIT_NONCE_USED"
    PERMIT_AMOUNT_EXCEEDED = "PERMIT_AMOUNT_EXCEEDED"

    # Ledger
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    INSUFFICIENT_ALLOWANCE = "INSUFFICIENT_ALLOWANCE"
    ADDRESS_IN_USE = "ADDRESS_IN_USE"
    INVALID_ADDRESS = "INVALID_ADDRESS"
    INVALID_AMOUNT = "INVALID_AMOUNT"

    # Adapter
    ADAPTER_POOL_NOT_FOUND = "ADAPTER_POOL_NOT_FOUND"
    ADAPTER_INSUFFICIENT_INPUT = "ADAPTER_INSUFFICIENT_INPUT"

    # Config
    INVALID_CONFIG = "INVALID_CONFIG"

    UNKNOWN = "UNKNOWN"
