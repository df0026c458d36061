# portal/core/session_codec.py
"""
Session cookie codec.
Turns a Principal into a signed, time-limited cookie value and back.

The cookie is an HS256 JWT signed with the key ring's current key. The key's
id travels in the JWT "kid" header so the matching key can be found after a
rotation, and the audience is the application identity so deployments with
separate key rings reject each other's cookies.
"""
import datetime as dt
import logging

import jwt  # PyJWT

from portal.config import settings
from portal.core import key_ring
from portal.core.errors import KeyRingError, StorageUnavailable
from portal.schemas.auth import Principal, Role

logger = logging.getLogger("uvicorn.error")

JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)


def _timestamp(value: dt.datetime) -> int:
    return int(value.timestamp())


def _from_timestamp(value: int) -> dt.datetime:
    return dt.datetime.fromtimestamp(value, tz=dt.timezone.utc)


async def encode(principal: Principal) -> str:
    """
    Sign a principal with the current key.

    Token payload:
        - sub: username
        - name: display name
        - role: "User" or "Admin"
        - iat / exp: issue and expiry timestamps (seconds)
        - aud: application identity
    """
    entry = await key_ring.current_key()
    payload = {
        "sub": principal.username,
        "name": principal.display_name,
        "role": principal.role.value,
        "iat": _timestamp(principal.issued_at),
        "exp": _timestamp(principal.expires_at),
        "aud": settings.application_name,
    }
    return jwt.encode(
        payload,
        key_ring.unwrap(entry),
        algorithm=JWT_ALG,
        headers={"kid": entry.key_id},
    )


async def decode(token: str | None) -> Principal | None:
    """
    Verify a cookie value and rebuild its principal.

    Returns None instead of raising for every failure: empty or malformed
    token, unknown or undecryptable key, bad signature, wrong audience,
    expired token, unexpected claims, or the key ring being unreachable.
    Callers treat None as anonymous.
    """
    if not token:
        return None
    try:
        key_id = jwt.get_unverified_header(token).get("kid")
        if not isinstance(key_id, str):
            return None
        entry = await key_ring.lookup(key_id)
        if entry is None:
            return None
        payload = jwt.decode(
            token,
            key_ring.unwrap(entry),
            algorithms=[JWT_ALG],
            audience=settings.application_name,
            options={"require": ["sub", "role", "iat", "exp", "aud"]},
        )
        return Principal(
            username=payload["sub"],
            display_name=payload.get("name") or payload["sub"],
            role=Role(payload["role"]),
            issued_at=_from_timestamp(payload["iat"]),
            expires_at=_from_timestamp(payload["exp"]),
        )
    except jwt.InvalidTokenError:
        return None
    except (KeyRingError, KeyError, ValueError, TypeError):
        return None
    except StorageUnavailable:
        logger.warning("[auth] key ring unavailable, treating request as anonymous")
        return None
