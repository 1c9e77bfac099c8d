"""Organizer authentication and redemption code generation."""
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
import argon2
import jwt
from fastapi import HTTPException, Request

from reelvote.core import config
from reelvote.core.constants import TOKEN_CODE_ALPHABET, TOKEN_CODE_LENGTH

ADMIN_COOKIE = "admin_token"

ph = argon2.PasswordHasher(
    time_cost=2,
    memory_cost=65536,
    parallelism=1,
    hash_len=32,
    salt_len=16
)


def generate_token_code(length: int = TOKEN_CODE_LENGTH) -> str:
    """Random redemption code drawn from an alphabet without look-alike characters."""
    return "".join(secrets.choice(TOKEN_CODE_ALPHABET) for _ in range(length))


def get_password_hash(password: str) -> str:
    return ph.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return ph.verify(password_hash, password)
    except argon2.exceptions.VerifyMismatchError:
        return False


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Sign ``data`` into a JWT that expires after ``expires_delta`` (settings default)."""
    lifetime = expires_delta or timedelta(minutes=config.settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims = {**data, "exp": datetime.now(timezone.utc) + lifetime}
    return jwt.encode(claims, config.settings.SECRET_KEY, algorithm=config.settings.ALGORITHM)


def verify_admin_token(request: Request) -> dict:
    """
    FastAPI dependency guarding organizer routes.

    Raises:
        HTTPException: 401 without a valid session cookie, 403 when the
            token does not carry the admin claim
    """
    token = request.cookies.get(ADMIN_COOKIE)
    if not token:
        raise HTTPException(status_code=401, detail="Not authenticated")

    try:
        claims = jwt.decode(token, config.settings.SECRET_KEY, algorithms=[config.settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise HTTPException(status_code=401, detail="Token expired")
    except jwt.PyJWTError:
        raise HTTPException(status_code=401, detail="Invalid token")

    if not claims.get("is_admin"):
        raise HTTPException(status_code=403, detail="Not authorized")
    return claims


def verify_admin_password(password: str) -> bool:
    """Check the organizer password; ``ADMIN_PASSWORD`` may be plaintext (dev) or an argon2 hash."""
    stored = config.settings.ADMIN_PASSWORD
    if stored.startswith("$argon2"):
        return verify_password(password, stored)
    return secrets.compare_digest(password, stored)
