"""
auth.py - Controller authorization for privileged launcher actions.

The requester arrives already verified by the host (signature checks are
not this module's concern). The guard only compares it with the controller
recorded at initialization.
"""

from __future__ import annotations

from .core import IssuanceRecord, Unauthorized


class AuthorizationGuard:
    """Checks that privileged actions come from a record's controller."""

    @staticmethod
    def is_controller(record: IssuanceRecord, requester: str) -> bool:
        return bool(requester) and requester == record.controller

    @classmethod
    def require_controller(cls, record: IssuanceRecord, requester: str, action: str = "withdraw") -> None:
        """
        Raises:
            Unauthorized: If requester is not the record's controller
        """
        if not cls.is_controller(record, requester):
            raise Unauthorized(
                f"{requester!r} may not {action} for {record.asset_id}: "
                f"not the controller"
            )
