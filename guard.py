"""
Access guard: one capability check shared by every protected operation.
"""
from dataclasses import dataclass
from typing import Optional

from errors import ForbiddenError

ADMIN = "admin"
CUSTOMER = "customer"
ROLES = (CUSTOMER, ADMIN)


@dataclass(frozen=True)
class Caller:
    """Identity resolved by the auth layer from a bearer token."""

    user_id: Optional[int]
    role: str = CUSTOMER

    @property
    def is_admin(self) -> bool:
        return self.role == ADMIN


def authorize(caller_role: Optional[str], required_role: str) -> bool:
    if required_role == ADMIN and caller_role != ADMIN:
        raise ForbiddenError("Access denied. Admin only.")
    return True


def require_admin(caller: Caller) -> None:
    authorize(caller.role if caller else None, ADMIN)
