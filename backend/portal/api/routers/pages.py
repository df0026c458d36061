# portal/api/routers/pages.py
"""
Informational pages. All of them are allowlisted, so the principal may be
None here.
"""
from fastapi import APIRouter, Depends

from portal.api.deps import get_optional_principal
from portal.config import build_info, settings
from portal.schemas.auth import Principal, PrincipalOut

router = APIRouter(tags=["pages"])

LINKS = [
    {
        "title": "Home",
        "url": "/",
        "description": "Application welcome page",
        "requiresLogin": False,
    },
    {
        "title": "Login",
        "url": "/login",
        "description": "User sign-in",
        "requiresLogin": False,
    },
    {
        "title": "Users",
        "url": "/users",
        "description": "Registered users (sign-in required)",
        "requiresLogin": True,
    },
    {
        "title": "Add user",
        "url": "/users",
        "description": "Create a new user (administrators only)",
        "requiresLogin": True,
    },
    {
        "title": "Change password",
        "url": "/change-password",
        "description": "Update your own password (sign-in required)",
        "requiresLogin": True,
    },
]


def _user_or_none(principal: Principal | None) -> dict | None:
    return PrincipalOut.from_principal(principal).model_dump() if principal else None


@router.get("/")
async def home(principal: Principal | None = Depends(get_optional_principal)):
    return {
        "app": settings.APP_NAME,
        "build": build_info.model_dump(),
        "user": _user_or_none(principal),
    }


@router.get("/privacy")
async def privacy():
    return {
        "title": "Privacy",
        "message": "Only your username, display name and a password hash are stored.",
    }


@router.get("/links")
async def links(principal: Principal | None = Depends(get_optional_principal)):
    return {"items": LINKS, "user": _user_or_none(principal)}


@router.get("/error")
async def error_page():
    return {"title": "Error", "message": "An error occurred while processing your request."}
