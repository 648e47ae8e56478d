"""
core/config.py -- fintrack settings, read from the environment and .env.

Every environment lookup in the project goes through get_settings(); other
modules never touch os.environ. The Settings instance is built on first use
and cached, so the SECRET_KEY check below runs exactly once per process.

Secret policy:
  [M6] A SECRET_KEY under 32 characters is refused. Session tokens are HMAC
       signed with it, and a short key can be brute-forced offline.

  [M7] Outside DEBUG a missing SECRET_KEY stops the process at startup.
       With DEBUG=true a throwaway key is generated instead, which logs
       everybody out on each restart.

Session token lifetime is fixed at 7 days in auth/tokens.py and is not read
from the environment.

Derived values (filled in after the environment is read):
  secure_cookies  None -> Secure cookies unless DEBUG
  database_url    ""   -> local SQLite file; postgres:// -> postgresql://

Layer rule: core/ imports nothing from api/, web/, auth/, or ledger/.
"""

import logging
import secrets
from functools import lru_cache
from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger("fintrack.config")

_LOCAL_DB_URL = "sqlite:///./fintrack.db"
_MIN_SECRET_LEN = 32


class Settings(BaseSettings):
    """Runtime configuration. Field FOO is read from env var FOO (case-insensitive)."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    debug: bool = False
    # "" = unset; resolved by check_secret_key()
    secret_key: str = ""

    # SQLAlchemy URL; "" = local SQLite
    database_url: str = ""

    secure_cookies: Optional[bool] = None
    login_rate_limit: str = "10/minute"

    allowed_hosts: list[str] = ["*"]
    cors_origins: list[str] = ["http://localhost", "http://localhost:3000", "http://127.0.0.1"]

    @model_validator(mode="after")
    def check_secret_key(self) -> "Settings":
        """Apply the [M6]/[M7] rules to secret_key."""
        if not self.secret_key:
            if not self.debug:
                raise ValueError(
                    "SECRET_KEY is required unless DEBUG=true. "
                    "Put a random value of 32+ characters in the environment or .env."
                )
            self.secret_key = secrets.token_hex(32)
            logger.warning("DEBUG mode: generated a temporary SECRET_KEY; sessions end when the process restarts.")
        if len(self.secret_key) < _MIN_SECRET_LEN:
            raise ValueError(f"SECRET_KEY must be at least {_MIN_SECRET_LEN} characters.")
        return self

    @model_validator(mode="after")
    def resolve_defaults(self) -> "Settings":
        if self.secure_cookies is None:
            self.secure_cookies = not self.debug
        if not self.database_url:
            self.database_url = _LOCAL_DB_URL
        elif self.database_url.startswith("postgres://"):
            # Heroku/Neon style; SQLAlchemy only knows the postgresql:// scheme
            self.database_url = "postgresql://" + self.database_url[len("postgres://") :]
        return self


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings, building it on first call.

    Tests that need different values construct Settings(...) directly or
    call get_settings.cache_clear().
    """
    return Settings()
