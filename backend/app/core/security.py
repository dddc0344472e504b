# app/core/security.py
"""
Security module for authentication.
Handles password hashing, verification codes, and JWT session token creation/validation.
"""
import datetime as dt
import secrets

import jwt  # PyJWT
from passlib.context import CryptContext

from app.config import settings

# Password hashing context
# Argon2 is a modern, salted, one-way password hashing algorithm
pwd_context = CryptContext(
    schemes=["argon2"],
    deprecated="auto",
)

# JWT configuration
JWT_SECRET = settings.jwt_secret
ACCESS_TOKEN_EXPIRE_MINUTES = settings.access_token_expire_minutes
JWT_ALG = "HS256"  # JWT signing algorithm (HMAC SHA-256)

# Verification code configuration
VERIFY_CODE_LENGTH = 6
VERIFY_CODE_TTL = dt.timedelta(minutes=settings.verify_code_ttl_minutes)


def hash_password(plain: str) -> str:
    """
    Hash a plain text password using Argon2.

    Args:
        plain: Plain text password to hash

    Returns:
        Hashed password string (safe to store in database)
    """
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    """
    Verify a plain text password against a hashed password.

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain, hashed)


def generate_verify_code() -> str:
    """Random fixed-length numeric code, zero-padded (e.g. "004219")."""
    return "".join(secrets.choice("0123456789") for _ in range(VERIFY_CODE_LENGTH))


def create_access_token(user_id: str, username: str) -> str:
    """
    Create a JWT session token bound to one user.

    Token payload includes:
        - sub: Subject (user ID)
        - username: owner username, for display without a DB lookup
        - iat: Issued at timestamp
        - exp: Expiration timestamp
    """
    now = dt.datetime.now(dt.timezone.utc)
    payload = {
        "sub": user_id,
        "username": username,
        "iat": now,
        "exp": now + dt.timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALG)


def decode_access_token(token: str) -> dict:
    """
    Decode and validate a JWT session token.

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid or malformed
    """
    return jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALG])
