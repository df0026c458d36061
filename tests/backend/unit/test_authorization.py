"""
Unit tests for the fallback authorization policy helpers.
"""
import pytest
from starlette.requests import Request

from portal.core.authorization import is_allowlisted, login_redirect_url


def _request(path: str, query: str = "") -> Request:
    return Request({
        "type": "http",
        "method": "GET",
        "scheme": "https",
        "server": ("testserver", 443),
        "path": path,
        "query_string": query.encode("ascii"),
        "headers": [],
    })


@pytest.mark.parametrize("path", ["/", "/login", "/logout", "/privacy", "/links", "/error", "/healthz", "/links/"])
def test_allowlisted_paths(path):
    assert is_allowlisted(path) is True


@pytest.mark.parametrize("path", ["/users", "/users/abc", "/change-password", "/docs", "/login/extra", "/unknown"])
def test_everything_else_requires_a_session(path):
    assert is_allowlisted(path) is False


def test_login_redirect_preserves_path_and_query():
    url = login_redirect_url(_request("/users/42", "tab=details"))
    assert url == "/login?returnUrl=%2Fusers%2F42%3Ftab%3Ddetails"


def test_login_redirect_without_query():
    assert login_redirect_url(_request("/users")) == "/login?returnUrl=%2Fusers"


def test_login_redirect_never_carries_scheme_relative_target():
    assert login_redirect_url(_request("//evil.example/x")) == "/login?returnUrl=%2F"
