# portal/api/routers/users.py
from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, Form, HTTPException, status
from fastapi.responses import RedirectResponse
from tortoise.exceptions import IntegrityError

from portal.api.deps import get_current_principal, require_admin
from portal.core.security import hash_password
from portal.models.user import User
from portal.schemas.auth import Principal
from portal.schemas.users import UserDetailOut, UserListOut
from portal.services import user_store

logger = logging.getLogger("uvicorn.error")

router = APIRouter(prefix="/users", tags=["users"])

USERNAME_MAX = 64
DISPLAY_NAME_MAX = 128


def _user_to_dict(u: User) -> dict:
    """
    Convert User model instance to dictionary format for page responses.
    The password hash is never included.
    """
    return {
        "id": str(u.id),
        "username": u.username,
        "displayName": u.display_name,
        "isAdmin": u.is_admin,
        "role": u.role,
        "createdAt": u.created_at.isoformat() if u.created_at else None,
    }


def _bad_request(code: str, message: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"code": code, "message": message},
    )


async def _get_user_or_404(user_id: str) -> User:
    try:
        user_id = uuid.UUID(user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="USER_NOT_FOUND")
    u = await user_store.find_by_id(user_id)
    if not u:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="USER_NOT_FOUND")
    return u


@router.get(
    "",
    response_model=UserListOut,
    dependencies=[Depends(get_current_principal)],
)
async def list_users():
    """
    All users ordered by username (any signed-in user).
    """
    rows = await user_store.list_all_ordered_by_username()
    return {"items": [_user_to_dict(u) for u in rows], "total": len(rows)}


@router.post("")
async def create_user(
    username: str = Form(default=""),
    displayName: str = Form(default=""),
    password: str = Form(default=""),
    isAdmin: bool = Form(default=False),
    admin: Principal = Depends(require_admin),
):
    """
    Create a user (admin only) and redirect back to the list.

    Raises:
        HTTPException (400): REQUIRED_FIELDS, USERNAME_TOO_LONG,
            DISPLAY_NAME_TOO_LONG or USERNAME_EXISTS
        Forbidden (403): caller is not an admin
    """
    username = username.strip()
    displayName = displayName.strip()
    if not username or not displayName or not password.strip():
        raise _bad_request("REQUIRED_FIELDS", "username, displayName and password are required")
    if len(username) > USERNAME_MAX:
        raise _bad_request("USERNAME_TOO_LONG", f"Username must be at most {USERNAME_MAX} characters")
    if len(displayName) > DISPLAY_NAME_MAX:
        raise _bad_request("DISPLAY_NAME_TOO_LONG", f"Display name must be at most {DISPLAY_NAME_MAX} characters")

    if await user_store.find_by_username(username):
        raise _bad_request("USERNAME_EXISTS", "Username already exists")
    try:
        u = await user_store.insert(
            username=username,
            display_name=displayName,
            password_hash=hash_password(password),
            is_admin=isAdmin,
        )
    except IntegrityError:
        # Lost a race with a concurrent insert of the same username
        raise _bad_request("USERNAME_EXISTS", "Username already exists")

    logger.info("[users] %s created user %s (admin=%s)", admin.username, u.username, u.is_admin)
    return RedirectResponse(url="/users", status_code=status.HTTP_303_SEE_OTHER)


@router.get(
    "/{user_id}",
    response_model=UserDetailOut,
    dependencies=[Depends(get_current_principal)],
)
async def get_user_detail(user_id: str):
    """
    One user, as shown on the delete confirmation page.

    Raises:
        HTTPException (404): USER_NOT_FOUND
    """
    u = await _get_user_or_404(user_id)
    return {"user": _user_to_dict(u)}


@router.post("/{user_id}/delete")
async def delete_user(
    user_id: str,
    admin: Principal = Depends(require_admin),
):
    """
    Delete a user (admin only) and redirect back to the list.

    Raises:
        HTTPException (404): USER_NOT_FOUND
        HTTPException (400): CANNOT_DELETE_SELF
    """
    u = await _get_user_or_404(user_id)
    if u.username == admin.username:
        raise _bad_request("CANNOT_DELETE_SELF", "Cannot delete yourself")

    await user_store.delete(u.id)
    logger.info("[users] %s deleted user %s", admin.username, u.username)
    return RedirectResponse(url="/users", status_code=status.HTTP_303_SEE_OTHER)
