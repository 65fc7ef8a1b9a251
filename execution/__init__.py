# PATH: execution/__init__.py
"""
RELAY Execution Layer.

This module contains the settlement components:
- validation: ordered validation pipeline and venue checks
- classifier: trade type from route endpoints
- guard: single-entry guard
- access: owner authorization
- state: nonce ledger and configuration store
- executor: settlement orchestrator and administrative surface
"""

from execution.access import OwnerAuth
from execution.classifier import classify_trade
from execution.executor import SettlementExecutor
from execution.guard import GuardState, SingleEntryGuard
from execution.state import ConfigStore, NonceLedger
from execution.validation import TradeValidator, check_venue, validate_offline

__all__ = [
    # Executor
    "SettlementExecutor",
    # Validation
    "TradeValidator",
    "check_venue",
    "validate_offline",
    "classify_trade",
    # Capabilities
    "OwnerAuth",
    "GuardState",
    "SingleEntryGuard",
    # State
    "ConfigStore",
    "NonceLedger",
]
