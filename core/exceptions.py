# PATH: core/exceptions.py
"""
Typed exceptions for RELAY.

Every failure carries an ErrorCode plus a details dict with the offending
values. One subclass per error kind; the code distinguishes the exact check.
"""

from typing import Any, Dict, Optional

from core.constants import ErrorCode, ErrorKind


class RelayError(Exception):
    """Base exception for RELAY."""

    kind: ErrorKind = ErrorKind.UNKNOWN

    def __init__(
        self,
        message: str,
        code: ErrorCode = ErrorCode.UNKNOWN,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self):
        return f"[{self.code.value}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class StructuralError(RelayError):
    """Zero address or zero amount in an order/permit field."""
    kind = ErrorKind.STRUCTURAL


class ConsistencyError(RelayError):
    """Order and permit fields disagree."""
    kind = ErrorKind.CONSISTENCY


class ExpiredOrderError(RelayError):
    """Order expiry is in the past."""
    kind = ErrorKind.TEMPORAL

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.ORDER_EXPIRED, details)


class NonceAlreadyUsedError(RelayError):
    """(maker, nonce) already consumed."""
    kind = ErrorKind.REPLAY

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.NONCE_ALREADY_USED, details)


class UnauthorizedExecutorError(RelayError):
    """Caller is not the order's designated executor."""
    kind = ErrorKind.AUTHORIZATION

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.UNAUTHORIZED_EXECUTOR, details)


class RouteError(RelayError):
    """Route shape, whitelist or protocol fee-tier failure."""
    kind = ErrorKind.ROUTE


class VenueError(RelayError):
    """Resolved venue failed its checks."""
    kind = ErrorKind.VENUE


class InsufficientOutputError(RelayError):
    """Realized output below the guaranteed minimum (or not delivered)."""
    kind = ErrorKind.OUTCOME


class AdminError(RelayError):
    """Administrative misuse."""
    kind = ErrorKind.ADMIN


class SignatureError(RelayError):
    """Signature did not verify."""
    kind = ErrorKind.SIGNATURE


class ReentrancyError(RelayError):
    """Nested call into a guarded operation."""
    kind = ErrorKind.REENTRANCY

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.REENTRANT_CALL, details)


class TransferError(RelayError):
    """Signature-based transfer service rejected the permit."""
    kind = ErrorKind.TRANSFER


class LedgerError(RelayError):
    """Balance / allowance / deployment failure in the ledger."""
    kind = ErrorKind.LEDGER


class AdapterError(RelayError):
    """Venue adapter could not perform the swap."""
    kind = ErrorKind.ADAPTER


class ConfigError(RelayError):
    """Invalid configuration value."""
    kind = ErrorKind.CONFIG

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message, ErrorCode.INVALID_CONFIG, details)
