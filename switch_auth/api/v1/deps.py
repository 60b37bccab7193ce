from typing import Optional
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from asyncpg import Connection

from switch_auth.core.exceptions import AccessDeniedException, TokenInvalidException
from switch_auth.core.security import decode_access_token
from switch_auth.db.session import get_db_connection
from switch_auth.repositories.user_repo import IdentityRepository
from switch_auth.schemas.auth_schema import TokenClaims
from switch_auth.services.user_service import UserService

# missing or non-bearer headers come through as None and get our own 401
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_identity_repo(conn: Connection = Depends(get_db_connection)) -> IdentityRepository:
    return IdentityRepository.from_connection(conn)


def get_user_service(repo: IdentityRepository = Depends(get_identity_repo)) -> UserService:
    return UserService(repo)


def get_current_claims(token: Optional[str] = Depends(oauth2_scheme)) -> TokenClaims:
    """Verify the bearer token without touching the store."""
    if not token:
        raise TokenInvalidException()
    return decode_access_token(token)


def ensure_owner(claims: TokenClaims, user_id: str) -> None:
    if claims.id != user_id:
        raise AccessDeniedException()
