"""
auth/validators.py -- Syntactic checks for signup and login credentials.

Both functions are pure: no I/O, no exceptions for bad input.

validate_email() is deliberately loose (local@domain.tld, no whitespace).
Exotic RFC-valid addresses may be rejected; that tradeoff is accepted.

validate_password() reports the FIRST failing rule only, in a fixed order,
so the signup form shows one actionable message at a time.

Layer rule: no imports from api/, web/, core/, or ledger/.
"""

from __future__ import annotations

import re

from auth.models import PasswordCheck

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

MIN_PASSWORD_LENGTH = 8

# (predicate, message) pairs, checked in order.
_PASSWORD_RULES = (
    (lambda p: len(p) >= MIN_PASSWORD_LENGTH, "Password must be at least 8 characters long"),
    (lambda p: re.search(r"[a-z]", p) is not None, "Password must contain at least one lowercase letter"),
    (lambda p: re.search(r"[A-Z]", p) is not None, "Password must contain at least one uppercase letter"),
    (lambda p: re.search(r"\d", p) is not None, "Password must contain at least one number"),
)


def validate_email(email: str) -> bool:
    """Return True if email looks like local@domain.tld."""
    return bool(email) and _EMAIL_RE.fullmatch(email) is not None


def validate_password(password: str) -> PasswordCheck:
    """Check password strength and return the first failing rule's reason."""
    for rule, reason in _PASSWORD_RULES:
        if not rule(password):
            return PasswordCheck(valid=False, reason=reason)
    return PasswordCheck(valid=True)
