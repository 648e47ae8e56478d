"""
auth/dependencies.py -- FastAPI Depends() helpers for the authenticated identity.

The auth-token cookie is the only credential. get_user_id() recovers the user
id from it; every ledger query is filtered by that id, which is the whole
authorization model (ownership by identifier, no roles).

get_user_id() is the soft variant (returns None on failure).
require_user_id() wraps it and raises HTTP 401 if unauthenticated.
try_get_current_user() additionally loads the User row for page handlers that
need profile fields.

Layer rule: no imports from web/, core/, or ledger/.
  auth/dependencies.py may import from fastapi (for Depends/HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import User
from auth.tokens import COOKIE_NAME, decode_access_token


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"code": "unauthorized", "message": "Unauthorized", "detail": None},
    )


def get_user_id(request: Request) -> int | None:
    """Return the user id carried by the request's auth-token cookie, or None.

    Never raises. Missing cookie, malformed token, bad signature and expiry
    all look the same to the caller.
    """
    token = request.cookies.get(COOKIE_NAME)
    if not token:
        return None
    payload = decode_access_token(token)
    return payload.user_id if payload is not None else None


def require_user_id(request: Request) -> int:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.get("/expenses")
        def route(user_id: int = Depends(require_user_id)): ...
    """
    user_id = get_user_id(request)
    if user_id is None:
        raise _unauthorized()
    return user_id


def try_get_current_user(request: Request) -> User | None:
    """Return the User for a valid cookie, None if unauthenticated or the row is gone."""
    user_id = get_user_id(request)
    if user_id is None:
        return None
    return request.app.state.user_store.get_by_id(user_id)
