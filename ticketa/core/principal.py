"""Authenticated principal handed to the reservation engine.

Authentication happens upstream; the gateway forwards the caller's id and
role in the ``X-User-Id`` and ``X-User-Role`` headers.
"""

import enum
from dataclasses import dataclass

from fastapi import Depends, Header, HTTPException, status


class Role(str, enum.Enum):
    ADMIN = "admin"
    PARTICIPANT = "participant"


@dataclass(frozen=True)
class Principal:
    user_id: int
    role: Role

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN


def get_principal(
    x_user_id: str | None = Header(default=None),
    x_user_role: str | None = Header(default=None),
) -> Principal:
    if not x_user_id or not x_user_role:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    try:
        user_id = int(x_user_id)
        role = Role(x_user_role.lower())
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid principal")
    if user_id < 1:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid principal")
    return Principal(user_id=user_id, role=role)


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return principal
