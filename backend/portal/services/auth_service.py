"""
Authentication workflow: credentials in, signed session out.
"""
import datetime as dt
import logging

from portal.config import settings
from portal.core import session_codec
from portal.core.errors import InvalidCredentials
from portal.core.security import verify_password
from portal.models.user import User
from portal.schemas.auth import Principal
from portal.services import user_store

logger = logging.getLogger("uvicorn.error")


def build_principal(user: User, now: dt.datetime | None = None) -> Principal:
    """
    Principal for a verified user, valid for SESSION_LIFETIME_HOURS.
    Timestamps are truncated to whole seconds to match the cookie encoding.
    """
    issued_at = (now or dt.datetime.now(dt.timezone.utc)).replace(microsecond=0)
    return Principal(
        username=user.username,
        display_name=user.display_name or user.username,
        role=user.role,
        issued_at=issued_at,
        expires_at=issued_at + dt.timedelta(hours=settings.session_lifetime_hours),
    )


async def authenticate(username: str, password: str) -> Principal:
    """
    Check credentials and build the session principal. The user record is
    only read, never modified.

    Raises:
        InvalidCredentials: unknown username or wrong password (same error
            for both)
        StorageUnavailable: user lookup failed after retries
    """
    user = await user_store.find_by_username(username)
    if user is None or not verify_password(password, user.password_hash):
        logger.info("[auth] rejected login attempt")
        raise InvalidCredentials()
    logger.info("[auth] login succeeded for %s", user.username)
    return build_principal(user)


async def issue_session(principal: Principal) -> str:
    """Cookie value for a principal, signed with the current key."""
    return await session_codec.encode(principal)
