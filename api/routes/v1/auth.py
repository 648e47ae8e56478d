"""
api/routes/v1/auth.py -- Signup, login, logout and session inspection endpoints.

Routes:
  POST /api/v1/auth/signup   -- create account; sets auth-token cookie
  POST /api/v1/auth/login    -- password login; sets auth-token cookie
  POST /api/v1/auth/logout   -- clears cookie; 200
  GET  /api/v1/auth/verify   -- {isAuthenticated, user?, error?}
  GET  /api/v1/auth/me       -- current user (requires auth)

Security:
  [H2] POST /login and /signup are rate-limited per IP (LOGIN_RATE_LIMIT).
  [C1] authenticate_user() provides timing equalization -- use it, never inline.
  [M5] Cache-Control: no-store on login/signup responses.
  Unknown email and wrong password produce the same 401 body.
  Duplicate email at signup is a 409; the signup form already implies
  uniqueness, so revealing it there leaks nothing new.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from api.limiter import limiter
from api.models import (
    AlreadyAuthenticatedResponse,
    AuthResponse,
    ErrorDetail,
    ErrorResponse,
    LoginRequest,
    MeResponse,
    MessageResponse,
    SignupRequest,
    UserOut,
    VerifyResponse,
)
from auth.dependencies import get_user_id, require_user_id
from auth.models import User
from auth.store import UserStore
from auth.tokens import (
    COOKIE_NAME,
    authenticate_user,
    clear_auth_cookie,
    create_access_token,
    hash_password,
    set_auth_cookie,
)
from auth.validators import validate_email, validate_password
from core.config import get_settings

logger = logging.getLogger("fintrack.api.auth")

_RATE_LIMIT = get_settings().login_rate_limit

# Auth policy:
# - POST /api/v1/auth/signup:  public
# - POST /api/v1/auth/login:   public
# - POST /api/v1/auth/logout:  public -- clearing a cookie needs no prior auth
# - GET  /api/v1/auth/verify:  public -- answers the auth question itself
# - GET  /api/v1/auth/me:      requires auth (require_user_id)
router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _error(status_code: int, code: str, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail=ErrorDetail(code=code, message=message).model_dump())


def _bad_request(code: str, message: str) -> HTTPException:
    return _error(400, code, message)


def _already_authenticated(request: Request) -> JSONResponse | None:
    """Short-circuit login/signup when the caller already holds a valid session."""
    user_id = get_user_id(request)
    if user_id is None:
        return None
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(user_id)
    if user is None:
        return None
    body = AlreadyAuthenticatedResponse(user=UserOut.from_user(user))
    return JSONResponse(status_code=200, content=body.model_dump(by_alias=True))


def _session_response(user: User, message: str, status_code: int) -> JSONResponse:
    """Build the login/signup success body and attach a fresh session cookie."""
    token = create_access_token(user.id)
    resp = JSONResponse(
        status_code=status_code,
        content=AuthResponse(user=UserOut.from_user(user), message=message).model_dump(by_alias=True),
    )
    set_auth_cookie(resp, token)
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


# ---------------------------------------------------------------------------
# Public endpoints
# ---------------------------------------------------------------------------


@limiter.limit(_RATE_LIMIT)  # [H2] must be ABOVE @router to preserve FastAPI introspection
@router.post("/auth/signup", response_model=AuthResponse, status_code=201)
def signup(request: Request, body: SignupRequest) -> JSONResponse:
    """Create an account and start a session.

    Validation order: required fields, email syntax, password strength, then
    uniqueness. Each failure returns the first problem found.
    """
    if (already := _already_authenticated(request)) is not None:
        return already

    if not body.email or not body.password:
        raise _bad_request("missing_fields", "Email and password are required")
    if not validate_email(body.email):
        raise _bad_request("invalid_email", "Invalid email format")
    check = validate_password(body.password)
    if not check.valid:
        raise _bad_request("weak_password", check.reason or "Invalid password")

    user_store: UserStore = request.app.state.user_store
    conflict = _error(409, "conflict", "User with this email already exists")
    if user_store.email_exists(body.email):
        raise conflict

    new_user = User(
        email=body.email,
        password_hash=hash_password(body.password),
        first_name=body.first_name or None,
        last_name=body.last_name or None,
    )
    try:
        user_id = user_store.create_user(new_user)
    except IntegrityError as exc:
        # Lost a race with a concurrent signup for the same email
        raise conflict from exc

    created = user_store.get_by_id(user_id)
    if created is None:
        raise RuntimeError(f"user {user_id} missing after insert")
    logger.info("User %d signed up", user_id)
    return _session_response(created, "User created successfully", status_code=201)


@limiter.limit(_RATE_LIMIT)  # [H2]
@router.post("/auth/login", response_model=AuthResponse)
def login(request: Request, body: LoginRequest) -> JSONResponse:
    """Authenticate with email and password; set the auth-token cookie.

    Uses authenticate_user() which includes timing equalization [C1].
    Returns the same error for an unknown email and a wrong password.
    """
    if (already := _already_authenticated(request)) is not None:
        return already

    if not body.email or not body.password:
        raise _bad_request("missing_fields", "Email and password are required")
    if not validate_email(body.email):
        raise _bad_request("invalid_email", "Invalid email format")

    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, body.email, body.password)
    if user is None:
        resp = JSONResponse(
            status_code=401,
            content=ErrorResponse(
                error=ErrorDetail(code="bad_credentials", message="Invalid email or password")
            ).model_dump(),
        )
        resp.headers["Cache-Control"] = "no-store"  # [M5]
        return resp

    logger.info("User %d logged in", user.id)
    return _session_response(user, "Login successful", status_code=200)


@router.post("/auth/logout", response_model=MessageResponse)
def logout() -> JSONResponse:
    """Clear the auth-token cookie.

    The token itself stays valid until it expires -- there is no server-side
    session to destroy.
    """
    resp = JSONResponse(content=MessageResponse(message="Logged out").model_dump())
    clear_auth_cookie(resp)
    return resp


@router.get("/auth/verify", response_model=VerifyResponse)
def verify(request: Request) -> JSONResponse:
    """Report whether the request carries a valid session for an existing user."""

    def _fail(error: str) -> JSONResponse:
        body = VerifyResponse(is_authenticated=False, error=error)
        content = body.model_dump(by_alias=True, include={"is_authenticated", "error"})
        return JSONResponse(status_code=401, content=content)

    if not request.cookies.get(COOKIE_NAME):
        return _fail("No authentication token found")
    user_id = get_user_id(request)
    if user_id is None:
        return _fail("Invalid token")
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(user_id)
    if user is None:
        return _fail("User not found")

    body = VerifyResponse(is_authenticated=True, user=UserOut.from_user(user), success=True)
    return JSONResponse(status_code=200, content=body.model_dump(by_alias=True, exclude={"error"}))


# ---------------------------------------------------------------------------
# Authenticated endpoints
# ---------------------------------------------------------------------------


@router.get("/auth/me", response_model=MeResponse, response_model_by_alias=True)
def me(request: Request, user_id: int = Depends(require_user_id)) -> MeResponse:
    """Return the profile of the currently authenticated user."""
    user_store: UserStore = request.app.state.user_store
    user = user_store.get_by_id(user_id)
    if user is None:
        raise _error(404, "not_found", "User not found")
    return MeResponse(user=UserOut.from_user(user))
