# portal/core/bootstrap.py
"""
Bootstrap module for application initialization.
Guarantees the privileged "admin" account exists and that its password
matches ADMIN_PASSWORD on every start.
"""
import logging

from portal.config import settings
from portal.core.errors import BootstrapFailed
from portal.core.security import hash_password
from portal.services import user_store

logger = logging.getLogger("uvicorn.error")

ADMIN_DISPLAY_NAME = "Administrator"


async def ensure_admin_account(password: str | None = None) -> str:
    """
    Create or reseed the admin account.

    - No user named "admin": create one with is_admin=True.
    - Already present: overwrite its password hash and restore is_admin
      unconditionally, so the configured password always wins over any
      change made through the UI since the last restart.

    Args:
        password: overrides settings.admin_password (used by tests)

    Returns:
        "created" or "updated"

    Raises:
        BootstrapFailed: wraps any storage error
    """
    password = settings.admin_password if password is None else password
    username = settings.admin_username
    try:
        user = await user_store.find_by_username(username)
        if user is None:
            await user_store.insert(
                username=username,
                display_name=ADMIN_DISPLAY_NAME,
                password_hash=hash_password(password),
                is_admin=True,
            )
            logger.info("[bootstrap] Seeded new admin user.")
            return "created"

        user.password_hash = hash_password(password)
        user.is_admin = True
        await user_store.update(user, "password_hash", "is_admin")
        logger.info("[bootstrap] Updated existing admin password.")
        return "updated"
    except Exception as exc:
        raise BootstrapFailed(f"admin reseed failed: {exc}") from exc


async def run_bootstrap() -> bool:
    """
    Startup entry point. A failure is logged and startup continues, so the
    service can come up without guaranteed admin access.

    Returns:
        True if the admin account was seeded or updated
    """
    if settings.admin_password_is_default:
        logger.warning("[bootstrap] ADMIN_PASSWORD not set -> using development default, do not run this in production.")
    try:
        await ensure_admin_account()
    except BootstrapFailed:
        logger.exception("[bootstrap] Database migration or seeding failed.")
        return False
    return True
