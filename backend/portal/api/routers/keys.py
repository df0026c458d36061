# portal/api/routers/keys.py
from __future__ import annotations

import datetime as dt
import logging

from fastapi import APIRouter, Depends, Form, HTTPException, status

from portal.api.deps import require_admin
from portal.core import key_ring
from portal.models.key_ring import KeyRingEntry
from portal.schemas.key_ring import KeyListOut, KeyOut, PruneOut

logger = logging.getLogger("uvicorn.error")

# Operator controls for the session key ring; admin only
router = APIRouter(prefix="/keys", tags=["keys"], dependencies=[Depends(require_admin)])


def _key_to_dict(entry: KeyRingEntry, current_id: str | None) -> dict:
    return {
        "keyId": entry.key_id,
        "label": entry.label,
        "createdAt": entry.created_at.isoformat(),
        "activationStart": entry.activation_start.isoformat(),
        "activationEnd": entry.activation_end.isoformat() if entry.activation_end else None,
        "current": entry.key_id == current_id,
    }


@router.get("", response_model=KeyListOut)
async def list_keys():
    """
    Every key of this application, newest first. ``current`` marks the key
    that signs new cookies.
    """
    current = await key_ring.current_key()
    rows = await key_ring.list_keys()
    return {
        "application": current.application,
        "items": [_key_to_dict(k, current.key_id) for k in rows],
        "total": len(rows),
    }


@router.post("/rotate", response_model=KeyOut, status_code=status.HTTP_201_CREATED)
async def rotate_key(label: str | None = Form(default=None)):
    entry = await key_ring.rotate(label or None)
    return _key_to_dict(entry, entry.key_id)


@router.post("/{key_id}/retire")
async def retire_key(key_id: str):
    """
    Stop signing with a key. Cookies it already signed stay valid.
    """
    if not await key_ring.retire(key_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="KEY_NOT_ACTIVE")
    return {"success": True}


@router.post("/prune", response_model=PruneOut)
async def prune_keys(olderThanDays: int = Form(..., ge=0)):
    """
    Delete keys retired more than ``olderThanDays`` days ago; their cookies
    stop validating.
    """
    cutoff = key_ring.utc_now() - dt.timedelta(days=olderThanDays)
    return {"deleted": await key_ring.prune(cutoff)}
