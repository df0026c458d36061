# portal/api/routers/auth.py
from fastapi import APIRouter, Depends, Form, Query, status
from fastapi.responses import RedirectResponse

from portal.api.deps import get_optional_principal
from portal.config import settings
from portal.core.security import safe_return_url
from portal.schemas.auth import LoginPageOut, Principal, PrincipalOut
from portal.services import auth_service

router = APIRouter(tags=["auth"])


def _cookie_attributes() -> dict:
    return {
        "path": "/",
        "httponly": True,
        "secure": settings.cookie_secure,
        "samesite": settings.cookie_samesite,
    }


@router.get("/login", response_model=LoginPageOut)
async def login_page(
    returnUrl: str | None = Query(default=None),
    principal: Principal | None = Depends(get_optional_principal),
):
    """
    Login page model.

    The return URL is sanitized here so the form only ever posts back a
    same-origin path.
    """
    return LoginPageOut(
        returnUrl=safe_return_url(returnUrl, default="/"),
        user=PrincipalOut.from_principal(principal) if principal else None,
    )


@router.post("/login")
async def login(
    username: str = Form(...),
    password: str = Form(...),
    returnUrl: str | None = Form(default=None),
    returnUrlQuery: str | None = Query(default=None, alias="returnUrl"),
):
    """
    Authenticate and start a session.

    On success the signed session is set as an HttpOnly, Secure, persistent
    cookie expiring with the session, and the caller is redirected (303) to
    the return URL if it is a local path, else to the default landing page.

    Raises:
        InvalidCredentials (401): unknown user or wrong password, no cookie set
    """
    principal = await auth_service.authenticate(username, password)
    token = await auth_service.issue_session(principal)

    target = safe_return_url(returnUrl or returnUrlQuery, default=settings.default_landing_path)
    response = RedirectResponse(url=target, status_code=status.HTTP_303_SEE_OTHER)
    response.set_cookie(
        settings.session_cookie_name,
        token,
        max_age=int((principal.expires_at - principal.issued_at).total_seconds()),
        expires=principal.expires_at,
        **_cookie_attributes(),
    )
    return response


@router.post("/logout")
async def logout(
    returnUrl: str | None = Form(default=None),
    returnUrlQuery: str | None = Query(default=None, alias="returnUrl"),
):
    """
    Clear the session cookie and redirect home (or to a local return URL).

    Safe to call without a session. The signed token itself stays valid
    until it expires; only the client copy is removed.
    """
    target = safe_return_url(returnUrl or returnUrlQuery, default="/")
    response = RedirectResponse(url=target, status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(settings.session_cookie_name, **_cookie_attributes())
    return response
