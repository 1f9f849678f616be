"""Password hashing and JWT helpers"""

import hashlib
import hmac
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import uuid4

import jwt
from pydantic import BaseModel

from sayitright.core.config import get_settings
from sayitright.core.errors import UnauthorizedError

settings = get_settings()

PBKDF2_ITERATIONS = 100000

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


class AccessTokenPayload(BaseModel):
    """Decoded access token"""
    sub: str
    email: str
    typ: str


class RefreshTokenPayload(BaseModel):
    """Decoded refresh token"""
    sub: str
    email: str
    typ: str
    jti: str
    exp: int


def hash_password(password: str) -> str:
    """Hash a password as ``salt$hexdigest``"""
    salt = secrets.token_hex(16)
    pwd_hash = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return f"{salt}${pwd_hash.hex()}"


def verify_password(password: str, hashed: Optional[str]) -> bool:
    """Check a password against a stored hash"""
    if not hashed or "$" not in hashed:
        return False
    salt, pwd_hash = hashed.split("$", 1)
    new_hash = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS)
    return hmac.compare_digest(new_hash.hex(), pwd_hash)


def create_access_token(user_id: str, email: str) -> str:
    """Sign a short-lived access token"""
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(user_id),
        "email": email,
        "typ": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_access_ttl_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_refresh_token(user_id: str, email: str) -> tuple[str, str]:
    """
    Sign a refresh token.

    Returns:
        (token, jti) - the jti identifies the server-side session
    """
    now = datetime.now(timezone.utc)
    jti = str(uuid4())
    payload = {
        "sub": str(user_id),
        "email": email,
        "typ": REFRESH_TOKEN_TYPE,
        "jti": jti,
        "iat": now,
        "exp": now + timedelta(seconds=settings.jwt_refresh_ttl_seconds),
    }
    token = jwt.encode(payload, settings.jwt_refresh_secret_key, algorithm=settings.jwt_algorithm)
    return token, jti


def _decode(token: str, secret: str, expected_type: str) -> dict:
    try:
        payload = jwt.decode(token, secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except jwt.PyJWTError:
        raise UnauthorizedError("Could not validate credentials")

    if payload.get("typ") != expected_type or not payload.get("sub"):
        raise UnauthorizedError("Invalid token payload")
    return payload


def decode_access_token(token: str) -> AccessTokenPayload:
    """Verify an access token"""
    payload = _decode(token, settings.jwt_secret_key, ACCESS_TOKEN_TYPE)
    return AccessTokenPayload(
        sub=payload["sub"],
        email=payload.get("email", ""),
        typ=payload["typ"],
    )


def decode_refresh_token(token: str) -> RefreshTokenPayload:
    """Verify a refresh token"""
    payload = _decode(token, settings.jwt_refresh_secret_key, REFRESH_TOKEN_TYPE)
    if not payload.get("jti"):
        raise UnauthorizedError("Invalid token payload")
    return RefreshTokenPayload(
        sub=payload["sub"],
        email=payload.get("email", ""),
        typ=payload["typ"],
        jti=payload["jti"],
        exp=payload["exp"],
    )
