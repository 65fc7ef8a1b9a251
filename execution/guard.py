# PATH: execution/guard.py
"""
Single-entry guard.

GUARD STATE CONTRACT:
=====================

States (GuardState):
  IDLE         → no guarded operation running
  IN_PROGRESS  → a guarded operation is running

Transitions:
  IDLE        → IN_PROGRESS  (enter)
  IN_PROGRESS → IDLE         (exit, on every path including errors)
  IN_PROGRESS → IN_PROGRESS  is rejected with ReentrancyError

=====================
"""

from contextlib import contextmanager
from enum import Enum
from typing import Dict, Iterator, List, Optional

from core.exceptions import ReentrancyError


class GuardState(str, Enum):
    IDLE = "IDLE"
    IN_PROGRESS = "IN_PROGRESS"


VALID_TRANSITIONS: Dict[GuardState, List[GuardState]] = {
    GuardState.IDLE: [GuardState.IN_PROGRESS],
    GuardState.IN_PROGRESS: [GuardState.IDLE],
}


class SingleEntryGuard:
    """
    Rejects nested calls into guarded operations.

    Usage:
        guard = SingleEntryGuard()
        with guard.enter("settle"):
            ...  # any nested guard.enter() raises ReentrancyError
    """

    def __init__(self):
        self.state = GuardState.IDLE
        self._operation: Optional[str] = None

    @property
    def locked(self) -> bool:
        return self.state == GuardState.IN_PROGRESS

    def _transition(self, new_state: GuardState) -> None:
        if new_state not in VALID_TRANSITIONS[self.state]:
            raise ReentrancyError(
                f"Reentrant call rejected while {self._operation} is in progress",
                {"operation": self._operation, "state": self.state.value},
            )
        self.state = new_state

    @contextmanager
    def enter(self, operation: str = "guarded") -> Iterator[None]:
        self._transition(GuardState.IN_PROGRESS)
        self._operation = operation
        try:
            yield
        finally:
            self._operation = None
            self._transition(GuardState.IDLE)
