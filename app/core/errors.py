from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    TRANSIENT = "transient"


class ErrorReason(str, Enum):
    # validation
    SELF_REQUEST = "self_request"
    SENDER_NOT_FOUND = "sender_not_found"
    RECIPIENT_NOT_FOUND = "recipient_not_found"
    # authorization
    NOT_AUTHENTICATED = "not_authenticated"
    NOT_OWNER = "not_owner"
    NOT_PARTY = "not_party"
    # conflict
    ALREADY_FRIENDS = "already_friends"
    ALREADY_SENT = "already_sent"
    REVERSE_REQUEST_EXISTS = "reverse_request_exists"
    NOT_FRIENDS = "not_friends"
    # not found
    NO_PENDING_REQUEST = "no_pending_request"
    NO_SENT_REQUEST = "no_sent_request"
    # transient
    STORE_UNAVAILABLE = "store_unavailable"
    CONTENTION_EXHAUSTED = "contention_exhausted"


DEFAULT_MESSAGES = {
    ErrorReason.SELF_REQUEST: "Cannot send a friend request to yourself",
    ErrorReason.SENDER_NOT_FOUND: "Sender user not found",
    ErrorReason.RECIPIENT_NOT_FOUND: "Recipient user not found",
    ErrorReason.NOT_AUTHENTICATED: "User must be logged in for this action",
    ErrorReason.NOT_OWNER: "Users can only access their own friend data",
    ErrorReason.NOT_PARTY: "Users can only act on relationships they are part of",
    ErrorReason.ALREADY_FRIENDS: "Users are already friends",
    ErrorReason.ALREADY_SENT: "Friend request already sent",
    ErrorReason.REVERSE_REQUEST_EXISTS: (
        "A friend request from the recipient already exists. Accept or reject it first."
    ),
    ErrorReason.NOT_FRIENDS: "Users are not friends",
    ErrorReason.NO_PENDING_REQUEST: "No pending friend request",
    ErrorReason.NO_SENT_REQUEST: "No sent friend request",
    ErrorReason.STORE_UNAVAILABLE: "Storage backend unavailable",
    ErrorReason.CONTENTION_EXHAUSTED: "Transaction kept conflicting with concurrent writes",
}


class FriendshipError(Exception):
    """
    Base of the closed set of friend graph failures.

    Callers branch on ``kind`` and ``reason``; ``message`` is for humans only.
    """
    kind: ErrorKind

    def __init__(self, reason: ErrorReason, message: Optional[str] = None):
        self.reason = reason
        self.message = message or DEFAULT_MESSAGES[reason]
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.reason.value!r}, {self.message!r})"


class ValidationError(FriendshipError):
    kind = ErrorKind.VALIDATION


class AuthorizationError(FriendshipError):
    kind = ErrorKind.AUTHORIZATION


class ConflictError(FriendshipError):
    kind = ErrorKind.CONFLICT


class NotFoundError(FriendshipError):
    kind = ErrorKind.NOT_FOUND


class TransientError(FriendshipError):
    kind = ErrorKind.TRANSIENT
