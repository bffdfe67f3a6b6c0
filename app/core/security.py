"""Password hashing and JWT issue/decode for administrator authentication."""

from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

# Bcrypt cost (rounds); 12 is a good default for security vs speed.
BCRYPT_ROUNDS = 12

DEFAULT_TOKEN_TTL = timedelta(hours=24)
DEFAULT_ALGORITHM = "HS256"

# Claims added by the codec itself; callers never supply these.
RESERVED_CLAIMS = frozenset({"iat", "exp"})


class TokenError(Exception):
    """Base class for token codec failures."""


class ConfigError(TokenError):
    """Signing secret is missing."""


class ExpiredError(TokenError):
    """Token signature is valid but the token is past its expiry."""


class MalformedError(TokenError):
    """Token signature or structure is invalid."""


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    # bcrypt has a 72-byte limit; truncate to avoid errors (validation already limits length).
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def _require_secret(secret: str | None) -> str:
    if secret is None or not secret.strip():
        raise ConfigError("JWT secret is not configured")
    return secret


def issue_token(
    claims: dict[str, Any],
    secret: str | None,
    ttl: timedelta = DEFAULT_TOKEN_TTL,
    algorithm: str = DEFAULT_ALGORITHM,
) -> str:
    """Sign claims into a bearer token that expires ttl after issuance."""
    key = _require_secret(secret)
    now = datetime.now(UTC)
    payload = {k: v for k, v in claims.items() if k not in RESERVED_CLAIMS}
    payload["iat"] = now
    payload["exp"] = now + ttl
    return jwt.encode(payload, key, algorithm=algorithm)


def decode_token(
    token: str,
    secret: str | None,
    algorithm: str = DEFAULT_ALGORITHM,
) -> dict[str, Any]:
    """
    Verify signature and expiry; return the claims (including iat and exp).
    Raises ExpiredError, MalformedError or ConfigError.
    """
    key = _require_secret(secret)
    try:
        return jwt.decode(token, key, algorithms=[algorithm])
    except jwt.ExpiredSignatureError as e:
        raise ExpiredError("Token has expired") from e
    except jwt.InvalidTokenError as e:
        raise MalformedError(str(e)) from e
