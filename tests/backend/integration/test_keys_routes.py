import datetime as dt

import pytest

from portal.core import key_ring, session_codec
from portal.models.key_ring import KeyRingEntry


pytestmark = pytest.mark.asyncio


async def test_admin_rotates_and_retires_keys(client, login, create_admin, cookie_name):
    admin, password = await create_admin()
    old_token = (await login(admin.username, password)).cookies[cookie_name]
    first = await key_ring.current_key()

    rotated = await client.post("/keys/rotate", data={"label": "quarterly"})
    assert rotated.status_code == 201
    new_id = rotated.json()["keyId"]
    assert rotated.json()["label"] == "quarterly"
    assert rotated.json()["current"] is True
    assert new_id != first.key_id

    listing = (await client.get("/keys")).json()
    assert listing["total"] == 2
    assert [k["keyId"] for k in listing["items"] if k["current"]] == [new_id]
    assert all("keyMaterial" not in k and "key_material" not in k for k in listing["items"])

    retired = await client.post(f"/keys/{first.key_id}/retire")
    assert retired.status_code == 200
    assert (await client.post(f"/keys/{first.key_id}/retire")).status_code == 404

    # cookies signed before the rotation still verify
    assert await session_codec.decode(old_token) is not None


async def test_prune_drops_long_retired_keys(client, login, create_admin, cookie_name):
    admin, password = await create_admin()
    old_token = (await login(admin.username, password)).cookies[cookie_name]
    first = await key_ring.current_key()
    await client.post("/keys/rotate")
    await KeyRingEntry.filter(key_id=first.key_id).update(
        activation_end=key_ring.utc_now() - dt.timedelta(days=40)
    )

    kept = await client.post("/keys/prune", data={"olderThanDays": "60"})
    assert kept.json() == {"deleted": 0}

    pruned = await client.post("/keys/prune", data={"olderThanDays": "30"})
    assert pruned.json() == {"deleted": 1}
    assert await session_codec.decode(old_token) is None


async def test_key_routes_are_admin_only(client, login, create_user):
    user, password = await create_user()
    await login(user.username, password)

    assert (await client.get("/keys")).status_code == 403
    resp = await client.post("/keys/rotate")
    assert resp.status_code == 403
    assert resp.json()["detail"]["code"] == "FORBIDDEN_ADMIN_ONLY"


async def test_key_routes_redirect_anonymous_callers(client):
    resp = await client.get("/keys")
    assert resp.status_code == 302
    assert resp.headers["location"] == "/login?returnUrl=%2Fkeys"
