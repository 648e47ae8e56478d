"""
auth/tokens.py -- Password hashing, session JWTs, and the auth cookie.

Security design decisions:
  JWT: python-jose with HS256. Tokens are signed with SECRET_KEY and carry
       user_id, iat and exp (fixed 7-day lifetime). Verification returns None
       on any failure -- malformed, bad signature, wrong algorithm, expired.
       The route layer turns that into a 401. All failure modes collapse into
       one outcome so callers cannot build an oracle from the difference.

  Passwords: bcrypt directly, cost factor 12. The _DUMMY_HASH constant
       enables timing equalization in authenticate_user() so response time
       does not reveal whether an email is registered [C1].

  SECRET_KEY: sourced from core.config.get_settings(). Rotating it
       invalidates every outstanding token immediately; there is no
       dual-secret verification window.

  No revocation: tokens are stateless bearer credentials. Logout clears the
       cookie on the client and nothing else.

Layer rule: no imports from api/, web/, or ledger/. Import from core/ is
allowed -- core/ is the kernel and has no reverse dependencies.
"""

from __future__ import annotations

import logging
from calendar import timegm
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING

import bcrypt
from jose import JWTError, jwt

from auth.models import TokenPayload
from core.config import get_settings

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("fintrack.auth")

# ---------------------------------------------------------------------------
# Config -- read once at module load via the lru_cache singleton [M6]
# ---------------------------------------------------------------------------

_settings = get_settings()

_ALGORITHM = "HS256"

COOKIE_NAME = "auth-token"

# Fixed 7-day session; both the JWT exp and the cookie max-age use it
TOKEN_LIFETIME_SECONDS = 7 * 24 * 60 * 60

# ---------------------------------------------------------------------------
# Password hashing (bcrypt -- direct usage, no passlib wrapper)
# ---------------------------------------------------------------------------

_BCRYPT_ROUNDS = 12

# bcrypt only ever looks at the first 72 bytes. Newer bcrypt releases raise
# instead of truncating, so both hash and verify cut the input the same way.
_BCRYPT_MAX_BYTES = 72


def _password_bytes(plain: str) -> bytes:
    return plain.encode("utf-8")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str) -> str:
    """Return a bcrypt digest ($2b$12$<salt><hash>) of the plaintext password."""
    return bcrypt.hashpw(_password_bytes(plain), bcrypt.gensalt(rounds=_BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    """Return True if the plaintext password matches the bcrypt digest.

    Malformed digests and any other internal error count as a mismatch.
    """
    try:
        return bcrypt.checkpw(_password_bytes(plain), hashed.encode("utf-8"))
    except Exception:
        logger.warning("Stored password digest is not a valid bcrypt hash")
        return False


# Timing equalization dummy hash [C1].
# Computed once at module load so the first login attempt is not measurably
# slower than subsequent ones.
_DUMMY_HASH: str = hash_password("fintrack_timing_dummy")


# ---------------------------------------------------------------------------
# JWT encode / decode
# ---------------------------------------------------------------------------


def create_access_token(user_id: int, *, issued_at: datetime | None = None) -> str:
    """Encode a signed JWT for user_id that expires TOKEN_LIFETIME_SECONDS after issuance.

    Args:
        user_id:   Primary key of the user. Stored as `user_id` and as the
                   string `sub` claim.
        issued_at: Issuance instant. Defaults to now; tests pass a fixed
                   value to pin the expiry boundary.
    """
    iat = issued_at or datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "user_id": user_id,
        "iat": iat,
        "exp": iat + timedelta(seconds=TOKEN_LIFETIME_SECONDS),
    }
    return jwt.encode(payload, _settings.secret_key, algorithm=_ALGORITHM)


def decode_access_token(token: str, *, now: datetime | None = None) -> TokenPayload | None:
    """Verify a JWT and return its payload, or None on any failure.

    Accepted iff the signature verifies against the current SECRET_KEY and
    now < exp. Expiry is checked here rather than inside jose so the
    comparison is strict and `now` can be pinned in tests.
    """
    if not token:
        return None
    try:
        claims = jwt.decode(
            token,
            _settings.secret_key,
            algorithms=[_ALGORITHM],
            options={"verify_exp": False, "require_exp": True, "require_iat": True},
        )
    except JWTError:
        return None

    user_id = claims.get("user_id")
    exp = claims.get("exp")
    iat = claims.get("iat")
    if not isinstance(user_id, int) or isinstance(user_id, bool):
        return None
    if not isinstance(exp, int) or not isinstance(iat, int):
        return None

    current = timegm((now or datetime.now(timezone.utc)).utctimetuple())
    if current >= exp:
        return None
    return TokenPayload(
        user_id=user_id,
        issued_at=datetime.fromtimestamp(iat, tz=timezone.utc),
        expires_at=datetime.fromtimestamp(exp, tz=timezone.utc),
    )


# ---------------------------------------------------------------------------
# User authentication (constant-time) [C1]
# ---------------------------------------------------------------------------


def authenticate_user(store: UserStore, email: str, password: str) -> User | None:
    """Authenticate an email/password login with timing equalization.

    Always runs bcrypt whether or not the account exists:
    - Unknown email: bcrypt runs against _DUMMY_HASH (same cost as real check)
    - Wrong password: bcrypt runs against the real digest (same cost)

    Returns the User on success, None on any failure.
    """
    user = store.get_by_email(email)
    if user is None:
        # Equalize timing -- do NOT return early before running bcrypt [C1]
        verify_password(password, _DUMMY_HASH)
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user


# ---------------------------------------------------------------------------
# Cookie helpers
# ---------------------------------------------------------------------------


def set_auth_cookie(response, token: str) -> None:
    """Write the session JWT as the auth-token cookie on the response.

    httponly=True: JS cannot read the cookie (XSS mitigation).
    samesite="lax": sent on same-site navigations and top-level GETs only.
    secure: only sent over HTTPS when SECURE_COOKIES is on (the default
        outside DEBUG mode).
    max_age: matches the JWT lifetime so both expire together.
    """
    response.set_cookie(
        COOKIE_NAME,
        value=token,
        httponly=True,
        samesite="lax",
        secure=bool(_settings.secure_cookies),
        max_age=TOKEN_LIFETIME_SECONDS,
        path="/",
    )


def clear_auth_cookie(response) -> None:
    """Expire the auth-token cookie. The token itself stays valid until exp."""
    response.delete_cookie(
        COOKIE_NAME,
        path="/",
        httponly=True,
        samesite="lax",
        secure=bool(_settings.secure_cookies),
    )
