# portal/core/security.py
"""
Security module for credential handling.
Handles password hashing/verification and the same-origin guard applied to
every post-login or post-logout redirect target.
"""
from urllib.parse import urlsplit

from passlib.context import CryptContext

# Password hashing context
# Argon2 is a modern, memory-hard password hashing algorithm; the salt is
# embedded in the encoded hash so each call produces a different string.
pwd_context = CryptContext(
    schemes=["argon2"],  # Use Argon2 for password hashing
    deprecated="auto",   # Automatically handle deprecated schemes
)


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Encoded hash string (safe to store in database, well under 200 chars)
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str | None) -> bool:
    """
    Verify a plain text password against a stored hash.

    Args:
        plain: Plain text password to verify
        hashed: Hashed password from database

    Returns:
        True if password matches, False otherwise. A corrupt, empty or
        unrecognised hash is a mismatch, never an error.
    """
    if not hashed:
        return False
    try:
        return pwd_context.verify(plain, hashed)
    except (ValueError, TypeError):
        return False


def safe_return_url(raw: str | None, default: str) -> str:
    """
    Return ``raw`` only if it is a same-origin relative path, else ``default``.

    Rejects absolute URLs, scheme-relative URLs (``//evil.example``),
    backslash tricks (``/\\evil.example``) and anything with control
    characters, so a return target can never leave this host.
    """
    if not raw:
        return default
    if not raw.startswith("/") or raw.startswith("//"):
        return default
    if "\\" in raw or any(ord(ch) < 0x20 or ord(ch) == 0x7F for ch in raw):
        return default
    parts = urlsplit(raw)
    if parts.scheme or parts.netloc:
        return default
    return raw
