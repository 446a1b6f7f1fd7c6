"""
Credential utilities.

Provides bcrypt password hashing, TOTP secrets and verification, default
credentials for new users, and signing of the session cookie.
"""

import logging
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
import jwt
import pyotp

from core.config import settings

logger = logging.getLogger("security.audit")

TOTP_ISSUER = "HRIS.com"

LOWER = "abcdefghijklmnopqrstuvwxyz"
UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
DIGITS = "0123456789"
SPECIAL = "!@#$%&*"


# Passwords


def hash_password(password: str) -> str:
    """Hash a password with bcrypt. The result embeds its own salt."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed hash
        return False


def generate_random_password(
    length: int = 12,
    min_lower: int = 2,
    min_upper: int = 2,
    min_digits: int = 2,
    min_special: int = 2,
) -> str:
    """
    Random password containing at least the requested number of characters
    from each class, shuffled with a CSPRNG.
    """
    rng = secrets.SystemRandom()
    characters = (
        [rng.choice(LOWER) for _ in range(min_lower)]
        + [rng.choice(UPPER) for _ in range(min_upper)]
        + [rng.choice(DIGITS) for _ in range(min_digits)]
        + [rng.choice(SPECIAL) for _ in range(min_special)]
    )
    every_class = LOWER + UPPER + DIGITS + SPECIAL
    characters += [rng.choice(every_class) for _ in range(max(0, length - len(characters)))]
    rng.shuffle(characters)
    return "".join(characters)


# TOTP


def generate_totp_secret() -> str:
    return pyotp.random_base32()


def totp_provisioning_uri(secret: str, email: str) -> str:
    return pyotp.TOTP(secret).provisioning_uri(name=email, issuer_name=TOTP_ISSUER)


def verify_totp(secret: str, code: str) -> bool:
    if not secret or not code:
        return False
    return pyotp.TOTP(secret).verify(code, valid_window=1)


@dataclass(frozen=True)
class DefaultCredentials:
    """Credentials issued to a new user. The plaintext is shown once."""

    password: str
    password_hash: str
    totp_secret_key: str


def generate_default_credentials() -> DefaultCredentials:
    password = generate_random_password()
    return DefaultCredentials(
        password=password,
        password_hash=hash_password(password),
        totp_secret_key=generate_totp_secret(),
    )


def verify_credentials(
    password: str,
    totp: str,
    password_hash: Optional[str],
    totp_secret_key: Optional[str],
) -> bool:
    """Both the password and the TOTP code must match."""
    if not password_hash or not totp_secret_key:
        return False
    return verify_password(password, password_hash) and verify_totp(totp_secret_key, totp)


# Session cookie


def create_session_token(
    session_id: str,
    secret_key: Optional[str] = None,
    max_age_seconds: Optional[int] = None,
) -> str:
    """Sign the session id into the cookie value."""
    now = datetime.now(timezone.utc)
    payload = {
        "sid": session_id,
        "iat": now,
        "exp": now + timedelta(seconds=max_age_seconds or settings.session_max_age_seconds),
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(
        payload, secret_key or settings.session_secret_key, algorithm=settings.session_algorithm
    )


def verify_session_token(token: str, secret_key: Optional[str] = None) -> Optional[str]:
    """Return the session id, or None when the cookie is invalid or expired."""
    payload = _decode(token, secret_key or settings.session_secret_key)
    if payload is None:
        return None
    session_id = payload.get("sid")
    return session_id if isinstance(session_id, str) else None


def _decode(token: str, secret_key: str) -> Optional[Dict[str, Any]]:
    try:
        return jwt.decode(token, secret_key, algorithms=[settings.session_algorithm])
    except jwt.ExpiredSignatureError:
        logger.info("Session cookie expired")
        return None
    except jwt.InvalidTokenError as e:
        logger.warning(f"Invalid session cookie: {e}")
        return None
