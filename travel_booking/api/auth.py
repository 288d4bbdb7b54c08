"""
Request principal.

Token issuance and verification happen upstream; the gateway forwards the
authenticated user in trusted headers.
"""

from dataclasses import dataclass
from enum import Enum
from uuid import UUID

from fastapi import Header, HTTPException, status


class Role(str, Enum):
    CUSTOMER = "CUSTOMER"
    VENDOR = "VENDOR"
    ADMIN = "ADMIN"


@dataclass(frozen=True)
class Principal:
    user_id: UUID
    role: Role

    @property
    def is_staff(self) -> bool:
        return self.role in (Role.ADMIN, Role.VENDOR)


async def get_principal(
    user_id: str | None = Header(default=None, alias="X-User-Id"),
    role: str | None = Header(default=None, alias="X-User-Role"),
) -> Principal:
    if not user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        parsed_id = UUID(user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user id"
        ) from None
    try:
        parsed_role = Role((role or Role.CUSTOMER.value).upper())
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user role"
        ) from None
    return Principal(user_id=parsed_id, role=parsed_role)
