"""
tests/test_tokens.py -- Unit tests for password hashing, session JWTs and the auth cookie.

Coverage:
  - bcrypt round trip, wrong password, malformed digest, 72-byte truncation
  - token round trip and repeat decoding
  - expiry boundary: one second before exp valid, at and after exp invalid
  - foreign secret, wrong algorithm, tampered payload, bad claim types -> None
  - authenticate_user: unknown email, wrong password, case-insensitive email
  - cookie attributes written by set_auth_cookie / clear_auth_cookie
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from jose import jwt
from starlette.responses import Response

from auth.store import UserStore
from auth.tokens import (
    COOKIE_NAME,
    TOKEN_LIFETIME_SECONDS,
    authenticate_user,
    clear_auth_cookie,
    create_access_token,
    decode_access_token,
    hash_password,
    set_auth_cookie,
    verify_password,
)
from core.config import get_settings

TEST_PASSWORD = "Correct1horse"

_T0 = datetime(2026, 3, 1, 12, 0, 0, tzinfo=timezone.utc)
_LIFETIME = timedelta(seconds=604800)


def _claims(user_id=7, iat=_T0, exp=_T0 + _LIFETIME) -> dict:
    return {"sub": str(user_id), "user_id": user_id, "iat": iat, "exp": exp}


class TestPasswordHashing:
    def test_round_trip(self) -> None:
        digest = hash_password("Secret123")
        assert digest.startswith("$2b$12$")
        assert verify_password("Secret123", digest)

    def test_wrong_password_fails(self) -> None:
        digest = hash_password("Secret123")
        assert not verify_password("Secret124", digest)

    def test_same_password_gets_different_salt(self) -> None:
        assert hash_password("Secret123") != hash_password("Secret123")

    def test_malformed_digest_is_a_mismatch(self) -> None:
        """A corrupt stored digest must not raise out of verify_password."""
        assert verify_password("Secret123", "not-a-bcrypt-digest") is False

    def test_only_first_72_bytes_count(self) -> None:
        base = "A1" * 36  # 72 bytes
        digest = hash_password(base + "tail-one")
        assert verify_password(base + "tail-two", digest)


class TestAccessTokens:
    def test_round_trip(self) -> None:
        token = create_access_token(42)
        payload = decode_access_token(token)
        assert payload is not None
        assert payload.user_id == 42

    def test_decoding_twice_gives_same_user(self) -> None:
        token = create_access_token(5)
        first = decode_access_token(token)
        second = decode_access_token(token)
        assert first == second
        assert first.user_id == 5

    def test_lifetime_is_fixed_at_seven_days(self) -> None:
        assert TOKEN_LIFETIME_SECONDS == 604800

    def test_expiry_is_seven_days_after_issue(self) -> None:
        payload = decode_access_token(create_access_token(1, issued_at=_T0), now=_T0)
        assert payload.issued_at == _T0
        assert payload.expires_at - payload.issued_at == _LIFETIME

    def test_valid_one_second_before_expiry(self) -> None:
        token = create_access_token(1, issued_at=_T0)
        assert decode_access_token(token, now=_T0 + _LIFETIME - timedelta(seconds=1)) is not None

    def test_invalid_at_expiry(self) -> None:
        token = create_access_token(1, issued_at=_T0)
        assert decode_access_token(token, now=_T0 + _LIFETIME) is None

    def test_invalid_one_second_after_expiry(self) -> None:
        token = create_access_token(1, issued_at=_T0)
        assert decode_access_token(token, now=_T0 + _LIFETIME + timedelta(seconds=1)) is None

    def test_foreign_secret_rejected(self) -> None:
        token = jwt.encode(_claims(), "x" * 48, algorithm="HS256")
        assert decode_access_token(token, now=_T0) is None

    def test_other_algorithm_rejected(self) -> None:
        token = jwt.encode(_claims(), get_settings().secret_key, algorithm="HS512")
        assert decode_access_token(token, now=_T0) is None

    def test_tampered_payload_rejected(self) -> None:
        header, payload, signature = create_access_token(1).split(".")
        forged_payload = jwt.encode(_claims(user_id=2), "irrelevant", algorithm="HS256").split(".")[1]
        assert decode_access_token(f"{header}.{forged_payload}.{signature}") is None

    def test_string_user_id_rejected(self) -> None:
        token = jwt.encode(_claims(user_id="7"), get_settings().secret_key, algorithm="HS256")
        assert decode_access_token(token, now=_T0) is None

    def test_missing_exp_rejected(self) -> None:
        claims = _claims()
        del claims["exp"]
        token = jwt.encode(claims, get_settings().secret_key, algorithm="HS256")
        assert decode_access_token(token, now=_T0) is None

    def test_garbage_and_empty_rejected(self) -> None:
        assert decode_access_token("") is None
        assert decode_access_token("not.a.jwt") is None
        assert decode_access_token("abc") is None


class TestAuthenticateUser:
    def test_valid_credentials(self, user_store: UserStore, user) -> None:
        found = authenticate_user(user_store, "ada@example.com", TEST_PASSWORD)
        assert found is not None
        assert found.id == user.id

    def test_email_match_is_case_insensitive(self, user_store: UserStore, user) -> None:
        assert authenticate_user(user_store, "ADA@Example.COM", TEST_PASSWORD) is not None

    def test_wrong_password(self, user_store: UserStore, user) -> None:
        assert authenticate_user(user_store, "ada@example.com", "Wrong1password") is None

    def test_unknown_email(self, user_store: UserStore, user) -> None:
        assert authenticate_user(user_store, "nobody@example.com", TEST_PASSWORD) is None


class TestAuthCookie:
    def test_set_cookie_attributes(self) -> None:
        resp = Response()
        set_auth_cookie(resp, "tok123")
        header = resp.headers["set-cookie"]
        lowered = header.lower()
        assert header.startswith(f"{COOKIE_NAME}=tok123")
        assert "httponly" in lowered
        assert "samesite=lax" in lowered
        assert "path=/" in lowered
        assert "max-age=604800" in lowered
        # DEBUG=true in the test environment, so Secure is off
        assert "secure" not in lowered

    def test_clear_cookie_expires_it(self) -> None:
        resp = Response()
        clear_auth_cookie(resp)
        lowered = resp.headers["set-cookie"].lower()
        assert lowered.startswith(f"{COOKIE_NAME}=")
        assert "max-age=0" in lowered
