# portal/models/__init__.py
"""
Database models module initialization.
Exports all Tortoise ORM models for convenient imports.

Models exported:
- User: User account and authentication model
- KeyRingEntry: Session cookie signing key
"""
from .user import User
from .key_ring import KeyRingEntry
