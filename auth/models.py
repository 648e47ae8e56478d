"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in ledger/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/, web/, core/, or ledger/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """A registered account.

    email is the login key. It is stored lower-cased so uniqueness is
    case-insensitive; callers normalise before lookups.

    password_hash is the full bcrypt digest (algorithm, cost, salt, hash).
    It never leaves the server.
    """

    email: str
    password_hash: str
    id: int | None = None
    first_name: str | None = None
    last_name: str | None = None
    created_at: str | None = None


@dataclass(frozen=True)
class TokenPayload:
    """Verified claims recovered from a session token."""

    user_id: int
    issued_at: datetime
    expires_at: datetime


@dataclass(frozen=True)
class PasswordCheck:
    """Outcome of validate_password(). reason is set only when valid is False."""

    valid: bool
    reason: str | None = None
