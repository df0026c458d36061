"""
Pydantic schemas for authentication.
Defines the session principal and the login page model.
"""
import datetime as dt
from enum import Enum

from pydantic import BaseModel


class Role(str, Enum):
    """Access level carried in the session. Admin is a strict superset of User."""
    USER = "User"
    ADMIN = "Admin"


class Principal(BaseModel):
    """
    Authenticated identity materialized from a valid session cookie.
    Timestamps are UTC with whole-second precision so a cookie round-trip
    reproduces the same value.
    """
    username: str
    display_name: str
    role: Role
    issued_at: dt.datetime
    expires_at: dt.datetime

    class Config:
        frozen = True

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN


class PrincipalOut(BaseModel):
    """Principal as exposed to page models (no timestamps beyond expiry)."""
    username: str
    displayName: str
    role: Role
    expiresAt: str

    @classmethod
    def from_principal(cls, principal: Principal) -> "PrincipalOut":
        return cls(
            username=principal.username,
            displayName=principal.display_name,
            role=principal.role,
            expiresAt=principal.expires_at.isoformat(),
        )


class LoginPageOut(BaseModel):
    """
    Login page model. returnUrl is already sanitized and is what the form
    posts back.
    """
    returnUrl: str
    user: PrincipalOut | None = None
