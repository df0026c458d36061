from fastapi import Depends, Request

from portal.core.errors import Forbidden, SessionInvalid
from portal.schemas.auth import Principal


def get_optional_principal(request: Request) -> Principal | None:
    """
    Principal attached by the authorization middleware, or None for an
    anonymous request on an allowlisted page.
    """
    return getattr(request.state, "principal", None)


def get_current_principal(
    principal: Principal | None = Depends(get_optional_principal),
) -> Principal:
    """
    FastAPI dependency to get the current authenticated principal.

    The middleware already redirects anonymous callers away from protected
    routes; this dependency guards handlers that must never run without a
    session.

    Raises:
        SessionInvalid (401): no valid session cookie on this request
    """
    if principal is None:
        raise SessionInvalid()
    return principal


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    """
    FastAPI dependency to ensure the current principal is an administrator.
    Applies regardless of the allowlist.

    Raises:
        Forbidden (403): principal role is not Admin
        SessionInvalid (401): no valid session
    """
    if not principal.is_admin:
        raise Forbidden()
    return principal
