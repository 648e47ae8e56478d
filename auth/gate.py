"""
auth/gate.py -- Route classification and redirect decision for page requests.

The gate is a pure function of (path, authenticated). It holds no state, does
no I/O, and gives the same answer for the same inputs every time. The HTTP
middleware in api/main.py supplies `authenticated` by verifying the
auth-token cookie and turns a non-None answer into a 302.

Classification:
  PROTECTED     /dashboard and everything below it
  PUBLIC_ONLY   / and everything under /auth/ (landing, login, signup)
  UNRESTRICTED  everything else -- /api/..., /logout, /static/...

API routes are UNRESTRICTED on purpose: JSON clients get a 401 from the
handler, not an HTML redirect.

Layer rule: no imports from api/, web/, core/, or ledger/.
"""

from __future__ import annotations

from enum import Enum

LOGIN_PATH = "/auth/login"
LANDING_PATH = "/dashboard"


class RouteClass(str, Enum):
    PUBLIC_ONLY = "public_only"
    PROTECTED = "protected"
    UNRESTRICTED = "unrestricted"


def _under(path: str, prefix: str) -> bool:
    return path == prefix or path.startswith(prefix + "/")


def classify_path(path: str) -> RouteClass:
    """Map a request path to its access class."""
    if _under(path, "/dashboard"):
        return RouteClass.PROTECTED
    if path == "/" or path.startswith("/auth/"):
        return RouteClass.PUBLIC_ONLY
    return RouteClass.UNRESTRICTED


def gate_redirect(path: str, authenticated: bool) -> str | None:
    """Return the redirect target for this request, or None to pass through.

    - protected page, no valid token      -> login page
    - login/signup/landing, valid token   -> dashboard (no re-login loops)
    - anything else                       -> None
    """
    route_class = classify_path(path)
    if route_class is RouteClass.PROTECTED and not authenticated:
        return LOGIN_PATH
    if route_class is RouteClass.PUBLIC_ONLY and authenticated:
        return LANDING_PATH
    return None
