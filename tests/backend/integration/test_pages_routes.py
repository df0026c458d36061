import pytest

from portal.config import build_info


pytestmark = pytest.mark.asyncio


@pytest.mark.parametrize("path", ["/", "/login", "/privacy", "/links", "/error", "/healthz"])
async def test_allowlisted_pages_are_public(client, path):
    resp = await client.get(path)
    assert resp.status_code == 200


@pytest.mark.parametrize(
    "path, expected",
    [
        ("/users", "/login?returnUrl=%2Fusers"),
        ("/change-password", "/login?returnUrl=%2Fchange-password"),
        ("/users/abc?tab=1", "/login?returnUrl=%2Fusers%2Fabc%3Ftab%3D1"),
        ("/no-such-page", "/login?returnUrl=%2Fno-such-page"),
    ],
)
async def test_protected_pages_redirect_to_login(client, path, expected):
    resp = await client.get(path)
    assert resp.status_code == 302
    assert resp.headers["location"] == expected


async def test_protected_post_without_session_redirects(client):
    resp = await client.post("/users", data={"username": "x", "displayName": "x", "password": "x"})
    assert resp.status_code == 302
    assert resp.headers["location"].startswith("/login?returnUrl=")


async def test_tampered_cookie_is_treated_as_anonymous(client, login, create_user, cookie_name):
    user, password = await create_user()
    token = (await login(user.username, password)).cookies[cookie_name]
    client.cookies.clear()
    header, payload, signature = token.split(".")
    middle = len(payload) // 2
    flipped = payload[:middle] + ("A" if payload[middle] != "A" else "B") + payload[middle + 1:]

    resp = await client.get("/users", headers={"Cookie": f"{cookie_name}={header}.{flipped}.{signature}"})
    assert resp.status_code == 302

    home = await client.get("/", headers={"Cookie": f"{cookie_name}={header}.{flipped}.{signature}"})
    assert home.status_code == 200
    assert home.json()["user"] is None


async def test_home_shows_build_info_and_user(client, login, create_user):
    anonymous = await client.get("/")
    assert anonymous.json()["build"]["version"] == build_info.version
    assert anonymous.json()["user"] is None

    user, password = await create_user(display_name="Erin")
    await login(user.username, password)

    home = await client.get("/")
    assert home.json()["user"]["username"] == user.username
    assert home.json()["user"]["displayName"] == "Erin"


async def test_links_page_flags_login_requirements(client):
    items = (await client.get("/links")).json()["items"]
    by_url = {item["url"]: item["requiresLogin"] for item in items}
    assert by_url["/"] is False
    assert by_url["/login"] is False
    assert by_url["/users"] is True


async def test_build_info_is_immutable():
    with pytest.raises(Exception):
        build_info.version = "v9.9.9"
