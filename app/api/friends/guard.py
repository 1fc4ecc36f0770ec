"""
Authorization checks for the friend graph.

Pure functions: they never touch storage and must run before any read or write,
so a refused call leaves the store untouched.
"""
from typing import Optional

from app.core.errors import AuthorizationError, ErrorReason


def require_actor(acting_user_id: Optional[str]) -> str:
    if not acting_user_id or not acting_user_id.strip():
        raise AuthorizationError(ErrorReason.NOT_AUTHENTICATED)
    return acting_user_id


def authorize(acting_user_id: Optional[str], target_user_id: str) -> str:
    """The actor may only touch its own shard."""
    actor = require_actor(acting_user_id)
    if actor != target_user_id:
        raise AuthorizationError(ErrorReason.NOT_OWNER)
    return actor


def authorize_party(acting_user_id: Optional[str], first_user_id: str, second_user_id: str) -> str:
    """The actor must be one of the two users of a pairwise relationship."""
    actor = require_actor(acting_user_id)
    if actor not in (first_user_id, second_user_id):
        raise AuthorizationError(ErrorReason.NOT_PARTY)
    return actor
