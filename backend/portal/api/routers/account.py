# portal/api/routers/account.py
import logging

from fastapi import APIRouter, Depends, Form, HTTPException, status

from portal.api.deps import get_current_principal
from portal.core.errors import SessionInvalid
from portal.core.security import hash_password
from portal.schemas.auth import Principal
from portal.services import user_store

logger = logging.getLogger("uvicorn.error")

router = APIRouter(tags=["account"])

PASSWORD_MIN = 8
PASSWORD_MAX = 100


@router.get("/change-password")
async def change_password_page(principal: Principal = Depends(get_current_principal)):
    return {
        "username": principal.username,
        "passwordMinLength": PASSWORD_MIN,
        "passwordMaxLength": PASSWORD_MAX,
    }


@router.post("/change-password")
async def change_password(
    newPassword: str = Form(default=""),
    confirmPassword: str = Form(default=""),
    principal: Principal = Depends(get_current_principal),
):
    """
    Change the password of the signed-in user.

    The current password is not asked for; holding a valid session is
    enough. Note the bootstrap reseed puts the admin password back to
    ADMIN_PASSWORD on the next restart.

    Raises:
        HTTPException (400): PASSWORD_LENGTH or PASSWORD_MISMATCH
        SessionInvalid (401): the session's user no longer exists
    """
    if not PASSWORD_MIN <= len(newPassword) <= PASSWORD_MAX:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "PASSWORD_LENGTH",
                    "message": f"Password must be {PASSWORD_MIN} to {PASSWORD_MAX} characters."},
        )
    if newPassword != confirmPassword:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"code": "PASSWORD_MISMATCH", "message": "Passwords do not match."},
        )

    user = await user_store.find_by_username(principal.username)
    if user is None:
        logger.warning("[auth] password change for missing user %s", principal.username)
        raise SessionInvalid()

    user.password_hash = hash_password(newPassword)
    await user_store.update(user, "password_hash")
    logger.info("[auth] password updated for user %s", principal.username)
    return {"success": True, "message": "Password updated successfully."}
