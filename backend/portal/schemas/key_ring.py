"""
Pydantic schemas for the key ring admin routes.
Key material never leaves the server.
"""
from typing import List, Optional

from pydantic import BaseModel


class KeyOut(BaseModel):
    keyId: str
    label: Optional[str] = None
    createdAt: str
    activationStart: str
    activationEnd: Optional[str] = None
    current: bool


class KeyListOut(BaseModel):
    application: str
    items: List[KeyOut]
    total: int


class PruneOut(BaseModel):
    deleted: int
