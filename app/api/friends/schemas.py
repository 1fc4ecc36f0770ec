from enum import Enum
from typing import List, Iterable

from pydantic import BaseModel, Field


class RelationshipStatus(str, Enum):
    """Pairwise state seen from one side of the pair."""
    SELF = "self"
    NONE = "none"
    PENDING_SENT = "pending_sent"
    PENDING_RECEIVED = "pending_received"
    FRIENDS = "friends"


class UserIdList(BaseModel):
    user_id: str = Field(..., min_length=1, description="Shard owner")
    user_ids: List[str] = Field(default_factory=list, description="Sorted member ids")

    @classmethod
    def of(cls, user_id: str, ids: Iterable[str]) -> "UserIdList":
        return cls(user_id=user_id, user_ids=sorted(ids))


class RelationshipResponse(BaseModel):
    user_id: str = Field(..., min_length=1)
    other_user_id: str = Field(..., min_length=1)
    status: RelationshipStatus


class FriendCheck(BaseModel):
    user_id: str
    other_user_id: str
    is_friend: bool


class PendingCheck(BaseModel):
    from_user_id: str
    to_user_id: str
    pending: bool


class ErrorResponse(BaseModel):
    error: str = Field(..., description="Error kind", examples=["conflict"])
    reason: str = Field(..., description="Machine readable reason", examples=["already_sent"])
    detail: str = Field(..., description="Human readable message")
