"""
Bearer token verification for API requests
"""
import uuid
from typing import Any, Dict
import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from config import settings
from core.database import get_db
from models.tracker import User
from utils.logging import get_logger

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def create_access_token(user_id: uuid.UUID, role: str) -> str:
    """Issue a token in the shape the auth service uses ({id, role})"""
    return jwt.encode(
        {"id": str(user_id), "role": role},
        settings.security.jwt_secret_key,
        algorithm=settings.security.jwt_algorithm,
    )


def decode_access_token(token: str) -> Dict[str, Any]:
    """Decode and verify a token, raising 401 when it is unusable"""
    try:
        return jwt.decode(
            token,
            settings.security.jwt_secret_key,
            algorithms=[settings.security.jwt_algorithm],
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning("Rejected bearer token", error=str(e))
        raise _unauthorized("Not authorized, token failed")


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the authenticated user for the request"""
    if credentials is None:
        raise _unauthorized("Not authorized, no token")

    payload = decode_access_token(credentials.credentials)
    subject = payload.get("id") or payload.get("sub")
    try:
        user_id = uuid.UUID(str(subject))
    except ValueError:
        raise _unauthorized("Not authorized, token failed")

    user = await db.get(User, user_id)
    if user is None:
        raise _unauthorized("Not authorized, user not found")
    return user
