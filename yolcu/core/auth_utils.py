"""Authentication utilities for Yolcu Chat.

Identity tokens are issued by the external auth provider; this module only
verifies them and maps the ``sub`` claim to an :class:`Actor`.
"""

from datetime import datetime, timedelta, timezone
from typing import Annotated, Optional
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from yolcu.core.authorization import Actor
from yolcu.core.config import settings
from yolcu.core.logging import get_logger
from yolcu.dependencies import get_profile_repo
from yolcu.repositories.profile_repo import ProfileRepo

logger = get_logger(__name__)

# Bearer scheme for token handling; missing headers are reported by us as 401
bearer_scheme = HTTPBearer(auto_error=False)

ACCESS_TOKEN_EXPIRE_MINUTES = 60


class InvalidTokenError(Exception):
    """The presented identity token cannot be trusted."""


def create_access_token(
    user_id: UUID, expires_delta: Optional[timedelta] = None
) -> str:
    """Create an identity token in the provider's format (used for local development)."""
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )
    to_encode = {
        "sub": str(user_id),
        "aud": settings.AUTH_JWT_AUDIENCE,
        "exp": int(expire.timestamp()),
        "role": "authenticated",
    }
    encoded_jwt = jwt.encode(
        to_encode, settings.AUTH_JWT_SECRET, algorithm=settings.AUTH_JWT_ALGORITHM
    )
    return str(encoded_jwt)


def decode_access_token(token: str) -> Actor:
    """Verify signature, expiry and audience, then return the token's actor."""
    try:
        payload = jwt.decode(
            token,
            settings.AUTH_JWT_SECRET,
            algorithms=[settings.AUTH_JWT_ALGORITHM],
            audience=settings.AUTH_JWT_AUDIENCE,
        )
    except JWTError as e:
        raise InvalidTokenError(str(e)) from e

    subject = payload.get("sub")
    if not subject:
        raise InvalidTokenError("Token has no subject")
    try:
        return Actor(user_id=UUID(str(subject)))
    except ValueError as e:
        raise InvalidTokenError(f"Token subject is not a user id: {subject}") from e


async def get_current_actor(
    credentials: Annotated[
        Optional[HTTPAuthorizationCredentials], Depends(bearer_scheme)
    ],
    profile_repo: Annotated[ProfileRepo, Depends(get_profile_repo)],
) -> Actor:
    """Dependency to get the acting identity from the bearer token."""
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise credentials_exception

    try:
        actor = decode_access_token(credentials.credentials)
    except InvalidTokenError as e:
        logger.info(f"Rejected identity token: {e}")
        raise credentials_exception from None

    # Provision the profile the first time this identity is seen
    profile_repo.ensure_profile(actor.user_id)
    return actor


CurrentActor = Annotated[Actor, Depends(get_current_actor)]
