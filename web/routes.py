"""
web/routes.py -- Jinja2 template routes for the fintrack web UI.

These routes serve server-rendered HTML forms. They share app.state with the
API routes (same user store) and the same auth helpers, but answer with pages
and redirects instead of JSON.

Which visitor may see which page is decided before these handlers run, by the
auth gate middleware in api/main.py: a signed-in visitor never reaches the
login or signup form, and a signed-out one never reaches the dashboard.

Routes:
  GET  /               -- landing page
  GET  /auth/login     -- login form
  POST /auth/login     -- handle password login, redirect /dashboard
  GET  /auth/signup    -- signup form
  POST /auth/signup    -- create account, redirect /dashboard
  GET  /dashboard      -- greeting for the signed-in user
  POST /logout         -- clear cookie, redirect /auth/login

/logout sits outside /auth/ so the gate lets a signed-in visitor reach it.

The two form posts carry the same per-IP rate limit as the JSON login and
signup; web/ borrows the shared limiter from api/limiter.py and nothing else
from api/.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.exc import IntegrityError

from api.limiter import limiter
from auth.dependencies import try_get_current_user
from auth.gate import LANDING_PATH, LOGIN_PATH
from auth.models import User
from auth.store import UserStore
from auth.tokens import (
    authenticate_user,
    clear_auth_cookie,
    create_access_token,
    hash_password,
    set_auth_cookie,
)
from auth.validators import validate_email, validate_password
from core.config import get_settings

logger = logging.getLogger("fintrack.web")

# Same per-IP budget as the JSON login, counted separately per form [H2]
_RATE_LIMIT = get_settings().login_rate_limit

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
router = APIRouter()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _form_error(request: Request, template: str, message: str, status_code: int, **values) -> HTMLResponse:
    """Re-render a form with an error banner and the user's non-secret input."""
    return templates.TemplateResponse(
        request,
        template,
        {"error_msg": message, **values},
        status_code=status_code,
    )


def _signed_in_redirect(user: User) -> RedirectResponse:
    resp = RedirectResponse(LANDING_PATH, status_code=302)
    set_auth_cookie(resp, create_access_token(user.id))
    resp.headers["Cache-Control"] = "no-store"  # [M5]
    return resp


# ---------------------------------------------------------------------------
# Pages
# ---------------------------------------------------------------------------


@router.get("/", response_class=HTMLResponse)
def index(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(request, "index.html", {})


@router.get("/auth/login", response_class=HTMLResponse)
def login_form(request: Request) -> HTMLResponse:
    """Render the login page."""
    return templates.TemplateResponse(request, "login.html", {"error_msg": None, "email": ""})


@limiter.limit(_RATE_LIMIT)
@router.post("/auth/login", response_class=HTMLResponse)
def login_post(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
):
    """Handle the login form. Bad credentials re-render the form with a 401."""
    if not email or not password:
        return _form_error(request, "login.html", "Email and password are required", 400, email=email)
    if not validate_email(email):
        return _form_error(request, "login.html", "Invalid email format", 400, email=email)

    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, email, password)  # [C1] timing equalization
    if user is None:
        return _form_error(request, "login.html", "Invalid email or password", 401, email=email)

    logger.info("User %d logged in via web form", user.id)
    return _signed_in_redirect(user)


@router.get("/auth/signup", response_class=HTMLResponse)
def signup_form(request: Request) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "signup.html",
        {"error_msg": None, "email": "", "first_name": "", "last_name": ""},
    )


@limiter.limit(_RATE_LIMIT)
@router.post("/auth/signup", response_class=HTMLResponse)
def signup_post(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    first_name: Optional[str] = Form(None),
    last_name: Optional[str] = Form(None),
):
    """Handle the signup form with the same checks, in the same order, as the JSON API."""
    values = {"email": email, "first_name": first_name or "", "last_name": last_name or ""}
    if not email or not password:
        return _form_error(request, "signup.html", "Email and password are required", 400, **values)
    if not validate_email(email):
        return _form_error(request, "signup.html", "Invalid email format", 400, **values)
    check = validate_password(password)
    if not check.valid:
        return _form_error(request, "signup.html", check.reason or "Invalid password", 400, **values)

    user_store: UserStore = request.app.state.user_store
    duplicate = "User with this email already exists"
    if user_store.email_exists(email):
        return _form_error(request, "signup.html", duplicate, 409, **values)
    try:
        user_id = user_store.create_user(
            User(
                email=email,
                password_hash=hash_password(password),
                first_name=first_name or None,
                last_name=last_name or None,
            )
        )
    except IntegrityError:
        return _form_error(request, "signup.html", duplicate, 409, **values)

    user = user_store.get_by_id(user_id)
    logger.info("User %d signed up via web form", user_id)
    return _signed_in_redirect(user)


@router.get("/dashboard", response_class=HTMLResponse)
def dashboard(request: Request):
    """Greet the signed-in user.

    The gate has already checked the token. The row can still be gone (deleted
    account with a live cookie); in that case drop the cookie and start over.
    """
    user = try_get_current_user(request)
    if user is None:
        resp = RedirectResponse(LOGIN_PATH, status_code=302)
        clear_auth_cookie(resp)
        return resp
    return templates.TemplateResponse(request, "dashboard.html", {"user": user})


@router.post("/logout")
def logout(request: Request) -> RedirectResponse:
    """Clear the auth-token cookie and send the visitor to the login page."""
    resp = RedirectResponse(LOGIN_PATH, status_code=302)
    clear_auth_cookie(resp)
    return resp
