# portal/core/authorization.py
"""
Fallback authorization policy.

Every route requires a valid session unless its path is allowlisted. The
middleware decodes the session cookie on each request, attaches the
principal to ``request.state.principal`` and redirects anonymous callers
of protected routes to the login page with the requested path preserved.
"""
from urllib.parse import urlencode

from fastapi import Request
from fastapi.responses import RedirectResponse

from portal.config import settings
from portal.core import session_codec
from portal.core.security import safe_return_url

# Paths anonymous callers may reach
ALLOWLIST = frozenset({
    "/",
    "/login",
    "/logout",
    "/privacy",
    "/links",
    "/error",
    "/healthz",
})


def is_allowlisted(path: str) -> bool:
    normalized = path.rstrip("/") or "/"
    return normalized in ALLOWLIST


def login_redirect_url(request: Request) -> str:
    """Login URL carrying the originally requested path as returnUrl."""
    target = request.url.path
    if request.url.query:
        target = f"{target}?{request.url.query}"
    target = safe_return_url(target, default="/")
    return f"{settings.login_path}?{urlencode({'returnUrl': target})}"


async def authorize_request(request: Request, call_next):
    """
    HTTP middleware implementing the fallback policy.

    Order: decode cookie -> valid session allows everything (role checks
    happen in route dependencies) -> allowlisted path allows anonymously
    -> otherwise redirect to login.
    """
    token = request.cookies.get(settings.session_cookie_name)
    principal = await session_codec.decode(token) if token else None
    request.state.principal = principal

    if principal is None and not is_allowlisted(request.url.path):
        return RedirectResponse(url=login_redirect_url(request), status_code=302)
    return await call_next(request)
