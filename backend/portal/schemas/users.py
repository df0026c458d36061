"""
Pydantic schemas for the user management pages.
"""
from typing import List, Optional

from pydantic import BaseModel

from portal.schemas.auth import Role


class UserOut(BaseModel):
    """
    User information returned by the user pages.
    Never includes the password hash.
    """
    id: str
    username: str
    displayName: Optional[str] = None
    isAdmin: bool
    role: Role
    createdAt: Optional[str] = None


class UserListOut(BaseModel):
    """All users ordered by username."""
    items: List[UserOut]
    total: int


class UserDetailOut(BaseModel):
    user: UserOut
