from passlib.context import CryptContext
from datetime import datetime, timedelta, timezone
from jose import jwt, JWTError
from pydantic import ValidationError
from typing import Optional
from switch_auth.core.config import settings
from switch_auth.core.exceptions import TokenInvalidException
from switch_auth.schemas.auth_schema import TokenClaims
import hashlib

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


def _digest(password: str) -> str:
    # bcrypt only looks at the first 72 bytes
    return hashlib.sha256(password.encode("utf-8")).hexdigest()


def hash_password(password: str) -> str:
    return pwd_context.hash(_digest(password))


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(_digest(plain_password), hashed_password)
    except (ValueError, TypeError):
        # unrecognized or corrupted hash
        return False


def create_access_token(claims: TokenClaims, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    if expires_delta is None:
        expires_delta = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    to_encode = {
        "id": claims.id,
        "email": claims.email,
        "role": claims.role,
        "iat": int(now.timestamp()),
        "exp": int((now + expires_delta).timestamp()),
    }
    return jwt.encode(to_encode, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str, secret: Optional[str] = None) -> TokenClaims:
    """Verify signature and expiry, then return the identity claims.

    Every failure (bad signature, malformed token, expired, missing claims)
    collapses into ``TokenInvalidException``.
    """
    try:
        payload = jwt.decode(
            token,
            secret or settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],
            options={"require_exp": True},
        )
        return TokenClaims(**payload)
    except (JWTError, ValidationError, AttributeError):
        raise TokenInvalidException()
