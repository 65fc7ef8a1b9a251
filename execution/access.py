"""
Owner authorization module.

Composed into the executor and the venue registry; gates every
administrative mutation on the caller being the current owner.
"""

from typing import Any

from core.constants import ErrorCode
from core.exceptions import AdminError
from core.validators import is_zero_address, normalize_address


class OwnerAuth:
    """Single-owner access control."""

    def __init__(self, owner: str):
        owner = normalize_address(owner)
        if is_zero_address(owner):
            raise AdminError("Owner cannot be the zero address", ErrorCode.ZERO_ADDRESS)
        self._owner = owner

    @property
    def owner(self) -> str:
        return self._owner

    def require_owner(self, caller: str) -> None:
        """
        Raises:
            AdminError: NOT_OWNER if caller is not the owner
        """
        if caller.lower() != self._owner:
            raise AdminError(
                "Caller is not the owner",
                ErrorCode.NOT_OWNER,
                {"caller": caller.lower(), "owner": self._owner},
            )

    def transfer(self, new_owner: str, caller: str) -> str:
        """Hand ownership to new_owner; returns the previous owner."""
        self.require_owner(caller)
        new_owner = normalize_address(new_owner)
        if is_zero_address(new_owner):
            raise AdminError(
                "New owner cannot be the zero address",
                ErrorCode.ZERO_ADDRESS,
                {"new_owner": new_owner},
            )
        previous, self._owner = self._owner, new_owner
        return previous

    def snapshot(self) -> Any:
        return self._owner

    def restore(self, snapshot: Any) -> None:
        self._owner = snapshot
