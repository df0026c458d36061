# portal/core/key_ring.py
"""
Persisted key ring for session cookie signing.

Keys live in the ``key_ring`` table so that a cookie issued before a restart
or redeploy can still be verified afterwards: losing a key silently logs out
every session signed with it. Raw key bytes are wrapped with Fernet under a
master key derived from KEY_RING_SECRET before they reach the database.

The current key is the newest entry (by created_at, then key_id) whose
activation window covers "now". Older entries stay addressable by key_id.
"""
import asyncio
import base64
import datetime as dt
import logging
import secrets
import uuid
import weakref
from functools import lru_cache

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC
from tortoise.expressions import Q

from portal.config import settings
from portal.core.db import with_storage_retry
from portal.core.errors import KeyRingError
from portal.models.key_ring import KeyRingEntry

logger = logging.getLogger("uvicorn.error")

KEY_BYTES = 32  # HS256 key size
KDF_ITERATIONS = 480_000

# One generation lock per event loop: concurrent first callers in this process
# wait for the winner instead of each inserting their own key.
_generation_locks: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, asyncio.Lock]" = (
    weakref.WeakKeyDictionary()
)


def utc_now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


@lru_cache(maxsize=8)
def _cipher(secret: str, application: str) -> Fernet:
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=32,
        salt=f"{application}.key-ring".encode("utf-8"),
        iterations=KDF_ITERATIONS,
    )
    return Fernet(base64.urlsafe_b64encode(kdf.derive(secret.encode("utf-8"))))


async def warm_cipher() -> None:
    """
    Derive the master key off the event loop so the first request does not
    pay for the PBKDF2 rounds.
    """
    await asyncio.to_thread(_cipher, settings.key_ring_secret, settings.application_name)


def _generation_lock() -> asyncio.Lock:
    loop = asyncio.get_running_loop()
    lock = _generation_locks.get(loop)
    if lock is None:
        lock = _generation_locks[loop] = asyncio.Lock()
    return lock


def _active_filter(now: dt.datetime) -> Q:
    return Q(application=settings.application_name) & Q(activation_start__lte=now) & (
        Q(activation_end__isnull=True) | Q(activation_end__gt=now)
    )


async def _select_current(now: dt.datetime) -> KeyRingEntry | None:
    return await (
        KeyRingEntry.filter(_active_filter(now))
        .order_by("-created_at", "-key_id")
        .first()
    )


async def _create_entry(label: str | None) -> KeyRingEntry:
    now = utc_now()
    material = secrets.token_bytes(KEY_BYTES)
    wrapped = _cipher(settings.key_ring_secret, settings.application_name).encrypt(material)
    entry = await KeyRingEntry.create(
        key_id=uuid.uuid4().hex,
        application=settings.application_name,
        key_material=wrapped.decode("ascii"),
        label=label,
        created_at=now,
        activation_start=now,
    )
    logger.info("[key-ring] generated key %s for %s (label=%s)",
                entry.key_id, entry.application, label)
    return entry


async def current_key() -> KeyRingEntry:
    """
    Return the key used for new cookies, generating the first one on demand.

    Concurrent callers in one process are serialized behind a lock and
    re-check after acquiring it. Another process may still insert at the
    same moment; both rows are valid and the ordering picks one, so after
    inserting we re-read instead of trusting our own row.
    """
    entry = await with_storage_retry(_select_current, utc_now())
    if entry is not None:
        return entry

    async with _generation_lock():
        entry = await with_storage_retry(_select_current, utc_now())
        if entry is not None:
            return entry
        created = await with_storage_retry(_create_entry, "initial")
        return await with_storage_retry(_select_current, utc_now()) or created


async def lookup(key_id: str) -> KeyRingEntry | None:
    """
    Fetch a key by id whether or not it is still active, so cookies signed
    before a rotation keep validating.
    """
    if not key_id:
        return None
    return await with_storage_retry(
        KeyRingEntry.get_or_none, key_id=key_id, application=settings.application_name
    )


async def rotate(label: str | None = None) -> KeyRingEntry:
    """Generate a fresh key that immediately becomes current."""
    async with _generation_lock():
        return await with_storage_retry(_create_entry, label)


async def retire(key_id: str) -> bool:
    """
    Close a key's activation window. It stops signing new cookies but still
    verifies cookies already issued under it.

    Returns False if the key does not exist or was already retired.
    """
    now = utc_now()
    updated = await with_storage_retry(
        KeyRingEntry.filter(
            key_id=key_id,
            application=settings.application_name,
            activation_end__isnull=True,
        ).update,
        activation_end=now,
    )
    if updated:
        logger.info("[key-ring] retired key %s", key_id)
    return bool(updated)


async def prune(older_than: dt.datetime) -> int:
    """
    Delete keys whose activation window closed before ``older_than``.
    Cookies signed with a pruned key stop validating.
    """
    deleted = await with_storage_retry(
        KeyRingEntry.filter(
            application=settings.application_name,
            activation_end__lt=older_than,
        ).delete
    )
    if deleted:
        logger.info("[key-ring] pruned %d retired key(s)", deleted)
    return deleted


async def list_keys() -> list[KeyRingEntry]:
    return await with_storage_retry(
        KeyRingEntry.filter(application=settings.application_name)
        .order_by("-created_at", "-key_id")
        .all
    )


def unwrap(entry: KeyRingEntry) -> bytes:
    """
    Decrypt the raw key bytes of an entry.

    Raises:
        KeyRingError: the entry was wrapped under a different KEY_RING_SECRET
            or application name, or the stored token is corrupt
    """
    try:
        return _cipher(settings.key_ring_secret, entry.application).decrypt(
            entry.key_material.encode("ascii")
        )
    except (InvalidToken, ValueError) as exc:
        logger.error("[key-ring] cannot unwrap key %s", entry.key_id)
        raise KeyRingError() from exc
