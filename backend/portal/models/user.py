# portal/models/user.py
"""
Database model for users.
Represents an account the portal authenticates against.
"""
import uuid
from tortoise import fields, models

from portal.schemas.auth import Role


class User(models.Model):
    """
    User database model.

    Security:
    - Password is stored as a hash (never store plain text passwords)
    - Username must be unique across all users (case-sensitive exact match)
    - is_admin grants the Admin role; everyone else is a plain User
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)  # Primary key: generated on insert
    username = fields.CharField(
        max_length=64,
        unique=True,
        index=True
    )  # Login name (unique, indexed for fast lookups)
    display_name = fields.CharField(max_length=128, null=True)  # Shown instead of username when set
    password_hash = fields.CharField(max_length=200)  # Argon2 hash, never logged or displayed
    is_admin = fields.BooleanField(default=False)
    created_at = fields.DatetimeField(auto_now_add=True)  # Set once at creation (UTC)

    class Meta:
        """Tortoise ORM metadata configuration."""
        table = "users"

    @property
    def role(self) -> Role:
        return Role.ADMIN if self.is_admin else Role.USER

    def __str__(self) -> str:
        return self.username
