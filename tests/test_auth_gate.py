"""
tests/test_auth_gate.py -- Route classification and the page-level redirect gate.

Two layers:
  - unit tests for classify_path() / gate_redirect() (pure functions)
  - integration tests through the real ASGI stack with web_client
    (follow_redirects=False), asserting on the Location header

A valid cookie means a token that verifies; the gate does not look the user
up, so an unknown user id with a good signature still counts as signed in.
"""

from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from auth.gate import LANDING_PATH, LOGIN_PATH, RouteClass, classify_path, gate_redirect
from auth.tokens import COOKIE_NAME


class TestClassifyPath:
    @pytest.mark.parametrize("path", ["/dashboard", "/dashboard/", "/dashboard/expenses"])
    def test_dashboard_tree_is_protected(self, path: str) -> None:
        assert classify_path(path) is RouteClass.PROTECTED

    @pytest.mark.parametrize("path", ["/", "/auth/login", "/auth/signup"])
    def test_landing_and_auth_pages_are_public_only(self, path: str) -> None:
        assert classify_path(path) is RouteClass.PUBLIC_ONLY

    @pytest.mark.parametrize(
        "path",
        ["/api/v1/expenses", "/api/v1/auth/login", "/logout", "/static/app.css", "/dashboards", "/authx"],
    )
    def test_everything_else_is_unrestricted(self, path: str) -> None:
        assert classify_path(path) is RouteClass.UNRESTRICTED


class TestGateRedirect:
    def test_protected_without_auth_goes_to_login(self) -> None:
        assert gate_redirect("/dashboard", authenticated=False) == LOGIN_PATH

    def test_protected_with_auth_passes(self) -> None:
        assert gate_redirect("/dashboard", authenticated=True) is None

    def test_public_only_with_auth_goes_to_dashboard(self) -> None:
        assert gate_redirect("/auth/login", authenticated=True) == LANDING_PATH
        assert gate_redirect("/", authenticated=True) == LANDING_PATH

    def test_public_only_without_auth_passes(self) -> None:
        assert gate_redirect("/auth/signup", authenticated=False) is None

    @pytest.mark.parametrize("authenticated", [True, False])
    def test_unrestricted_never_redirects(self, authenticated: bool) -> None:
        assert gate_redirect("/api/v1/auth/verify", authenticated) is None

    def test_same_inputs_same_answer(self) -> None:
        answers = {gate_redirect("/dashboard/x", False) for _ in range(5)}
        assert answers == {LOGIN_PATH}


class TestGateMiddleware:
    def test_dashboard_without_cookie_redirects_to_login(self, web_client: TestClient) -> None:
        resp = web_client.get("/dashboard")
        assert resp.status_code == 302
        assert resp.headers["location"] == LOGIN_PATH

    def test_dashboard_with_invalid_cookie_redirects_to_login(self, web_client: TestClient) -> None:
        web_client.cookies.set(COOKIE_NAME, "forged.token.value")
        resp = web_client.get("/dashboard/settings")
        assert resp.status_code == 302
        assert resp.headers["location"] == LOGIN_PATH

    def test_login_page_with_valid_cookie_redirects_to_dashboard(self, web_client: TestClient, user, login_as) -> None:
        login_as(web_client, user.id)
        resp = web_client.get("/auth/login")
        assert resp.status_code == 302
        assert resp.headers["location"] == LANDING_PATH

    def test_landing_page_with_valid_cookie_redirects_to_dashboard(self, web_client: TestClient, login_as) -> None:
        """No user lookup: a correctly signed token for id 999 is enough."""
        login_as(web_client, 999)
        resp = web_client.get("/")
        assert resp.status_code == 302
        assert resp.headers["location"] == LANDING_PATH

    def test_dashboard_with_valid_cookie_passes_through(self, web_client: TestClient, user, login_as) -> None:
        login_as(web_client, user.id)
        resp = web_client.get("/dashboard")
        assert resp.status_code == 200, f"Expected 200, got {resp.status_code}: {resp.text}"
        assert "Ada" in resp.text

    def test_api_routes_are_not_redirected(self, web_client: TestClient) -> None:
        """JSON clients get a 401 from the handler, never an HTML redirect."""
        resp = web_client.get("/api/v1/expenses")
        assert resp.status_code == 401
