"""
Unit tests for the admin bootstrap/reseed.
"""
import pytest

from portal.config import settings
from portal.core import bootstrap
from portal.core.errors import BootstrapFailed, StorageUnavailable
from portal.core.security import hash_password, verify_password
from portal.models.user import User
from portal.schemas.auth import Role
from portal.services import auth_service, user_store


pytestmark = pytest.mark.asyncio


async def test_creates_admin_on_empty_store(db):
    result = await bootstrap.ensure_admin_account()

    assert result == "created"
    admin = await User.get(username="admin")
    assert admin.is_admin is True
    assert admin.display_name == "Administrator"
    assert verify_password(settings.admin_password, admin.password_hash)


async def test_running_twice_keeps_single_admin_and_follows_config(db):
    await bootstrap.ensure_admin_account(password="First#Pass1")
    assert await User.filter(username="admin").count() == 1

    result = await bootstrap.ensure_admin_account(password="Second#Pass2")

    assert result == "updated"
    assert await User.filter(username="admin").count() == 1
    admin = await User.get(username="admin")
    assert verify_password("Second#Pass2", admin.password_hash)
    assert not verify_password("First#Pass1", admin.password_hash)


async def test_reseed_overwrites_password_changed_since_last_start(db):
    await User.create(
        username="admin",
        display_name="Renamed Admin",
        password_hash=hash_password("ChangedInUi#1"),
        is_admin=True,
    )

    await bootstrap.ensure_admin_account()

    admin = await User.get(username="admin")
    assert verify_password(settings.admin_password, admin.password_hash)
    assert not verify_password("ChangedInUi#1", admin.password_hash)
    assert admin.display_name == "Renamed Admin"


async def test_storage_failure_is_wrapped(db, monkeypatch):
    async def unavailable(username):
        raise StorageUnavailable()

    monkeypatch.setattr(user_store, "find_by_username", unavailable)

    with pytest.raises(BootstrapFailed):
        await bootstrap.ensure_admin_account()


async def test_run_bootstrap_logs_and_continues_on_failure(db, monkeypatch, caplog):
    async def unavailable(username):
        raise StorageUnavailable()

    monkeypatch.setattr(user_store, "find_by_username", unavailable)

    with caplog.at_level("ERROR", logger="uvicorn.error"):
        assert await bootstrap.run_bootstrap() is False
    assert "seeding failed" in caplog.text


async def test_run_bootstrap_succeeds(db):
    assert await bootstrap.run_bootstrap() is True
    assert await User.filter(username="admin", is_admin=True).count() == 1


async def test_reseed_restores_admin_role(db):
    await User.create(
        username="admin",
        display_name="Recreated",
        password_hash=hash_password("Whatever#1"),
        is_admin=False,
    )

    await bootstrap.ensure_admin_account(password="Configured#1")

    principal = await auth_service.authenticate("admin", "Configured#1")
    assert principal.role == Role.ADMIN
    assert (await User.get(username="admin")).is_admin is True
