from typing import Optional, Protocol

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError

from app.api.auth.utils import decode_access_token

# Tokens are issued by the external identity provider; this API only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/token", auto_error=False)


class IdentityProvider(Protocol):
    def current_actor_id(self) -> Optional[str]:
        ...


class ActorIdentity:
    """Identity already resolved for one request (or one test)."""

    def __init__(self, actor_id: Optional[str]):
        self.actor_id = actor_id

    def current_actor_id(self) -> Optional[str]:
        return self.actor_id


async def get_current_actor_id(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[str]:
    """
    Reads the actor id from the bearer token.
    No token means an anonymous caller; the authorization guard rejects it.
    """
    if token is None:
        return None

    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        actor_id = decode_access_token(token)
    except JWTError:
        raise credentials_exception
    if actor_id is None:
        raise credentials_exception
    return actor_id


async def get_identity(actor_id: Optional[str] = Depends(get_current_actor_id)) -> ActorIdentity:
    return ActorIdentity(actor_id)
