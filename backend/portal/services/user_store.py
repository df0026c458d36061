"""
User record storage backed by Tortoise ORM.
Every call goes through the storage retry wrapper, so a dropped connection
is retried a bounded number of times and then reported as StorageUnavailable.
"""
from typing import List, Optional

from portal.core.db import with_storage_retry
from portal.models.user import User


async def find_by_username(username: str) -> Optional[User]:
    """Exact, case-sensitive match."""
    return await with_storage_retry(User.get_or_none, username=username)


async def find_by_id(user_id) -> Optional[User]:
    return await with_storage_retry(User.get_or_none, id=user_id)


async def insert(
    username: str,
    password_hash: str,
    display_name: Optional[str] = None,
    is_admin: bool = False,
) -> User:
    """
    Create a user. Uniqueness of username is enforced by the database, a
    duplicate raises tortoise.exceptions.IntegrityError.
    """
    return await with_storage_retry(
        User.create,
        username=username,
        display_name=display_name,
        password_hash=password_hash,
        is_admin=is_admin,
    )


async def update(user: User, *fields: str) -> None:
    """Persist changes; ``fields`` limits the UPDATE to those columns."""
    await with_storage_retry(user.save, update_fields=list(fields) or None)


async def delete(user_id) -> bool:
    deleted = await with_storage_retry(User.filter(id=user_id).delete)
    return bool(deleted)


async def list_all_ordered_by_username() -> List[User]:
    return await with_storage_retry(User.all().order_by("username").all)
