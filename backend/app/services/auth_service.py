"""
Authentication Service
Handles password hashing, JWT creation, and validation.
"""

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from jwt import PyJWTError
from jwt.utils import base64url_decode, base64url_encode
from passlib.context import CryptContext

from app.config import settings
from app.exceptions import InvalidTokenError

# Password hashing configuration
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
)

REQUIRED_CLAIMS = ["id", "role", "exp"]


def is_canonical_token(token: str) -> bool:
    """True when all three segments re-encode to exactly the same text.

    base64 decoding ignores the unused low bits of a final character, so two
    different strings can decode to the same signature.
    """
    segments = token.split(".")
    if len(segments) != 3:
        return False
    for segment in segments:
        raw = segment.encode()
        try:
            if base64url_encode(base64url_decode(raw)) != raw:
                return False
        except ValueError:
            return False
    return True


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Check if plain password matches hashed version."""
    if not plain_password or not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Unrecognised hash format
        return False


def get_password_hash(password: str) -> str:
    """Generate bcrypt hash of password."""
    return pwd_context.hash(password)


def create_access_token(subject_id: int, role: str, expires_delta: Optional[timedelta] = None) -> str:
    """Create a new JWT access token carrying the subject id and role."""
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.access_token_expire_minutes)
    expire = datetime.now(timezone.utc) + expires_delta

    to_encode = {"id": subject_id, "role": role, "exp": expire}
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def verify_access_token(token: str) -> dict:
    """
    Decode and validate a JWT access token.

    Returns the ``{id, role, exp}`` claims. Raises InvalidTokenError when the
    signature does not match, the token is malformed, a claim is missing or
    the token has expired.
    """
    if not token:
        raise InvalidTokenError(reason="empty token")
    if not is_canonical_token(token):
        raise InvalidTokenError(reason="malformed token")
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"require": REQUIRED_CLAIMS},
        )
    except jwt.ExpiredSignatureError:
        raise InvalidTokenError("Token has expired", reason="expired")
    except PyJWTError as e:
        raise InvalidTokenError(reason=type(e).__name__)

    return {"id": payload["id"], "role": payload["role"], "exp": payload["exp"]}

