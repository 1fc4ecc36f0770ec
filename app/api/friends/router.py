from fastapi import APIRouter, Depends, status

from app.api.auth.dependencies import ActorIdentity, get_identity
from app.api.friends.schemas import (
    FriendCheck,
    PendingCheck,
    RelationshipResponse,
    UserIdList,
)
from app.api.friends.service import FriendshipService
from app.api.notifications.service import NotificationService
from app.core.config import settings
from app.database.transaction import TransactionalStore, get_transactional_store

router = APIRouter(prefix="/api/v1/friends", tags=["friends"])


def get_friendship_service(
        transactions: TransactionalStore = Depends(get_transactional_store),
        identity: ActorIdentity = Depends(get_identity),
) -> FriendshipService:
    notifier = NotificationService(transactions, identity) if settings.NOTIFICATIONS_ENABLED else None
    return FriendshipService(transactions, identity, notifier=notifier)


@router.get("/", response_model=UserIdList)
def get_friends(
        identity: ActorIdentity = Depends(get_identity),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    return UserIdList.of(identity.actor_id, friendship_service.list_friends(identity.actor_id))


@router.get("/requests/incoming", response_model=UserIdList)
def get_incoming_requests(
        identity: ActorIdentity = Depends(get_identity),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    return UserIdList.of(identity.actor_id, friendship_service.list_incoming_requests(identity.actor_id))


@router.get("/requests/outgoing", response_model=UserIdList)
def get_outgoing_requests(
        identity: ActorIdentity = Depends(get_identity),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    return UserIdList.of(identity.actor_id, friendship_service.list_outgoing_requests(identity.actor_id))


@router.post("/requests/{recipient_id}", response_model=RelationshipResponse,
             status_code=status.HTTP_201_CREATED)
def send_request(
        recipient_id: str,
        identity: ActorIdentity = Depends(get_identity),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    result = friendship_service.send_friend_request(identity.actor_id, recipient_id)
    return RelationshipResponse(user_id=identity.actor_id, other_user_id=recipient_id, status=result)


@router.put("/requests/{sender_id}/accept", response_model=RelationshipResponse)
def accept_request(
        sender_id: str,
        identity: ActorIdentity = Depends(get_identity),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    result = friendship_service.accept_friend_request(identity.actor_id, sender_id)
    return RelationshipResponse(user_id=identity.actor_id, other_user_id=sender_id, status=result)


@router.put("/requests/{sender_id}/reject", response_model=RelationshipResponse)
def reject_request(
        sender_id: str,
        identity: ActorIdentity = Depends(get_identity),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    result = friendship_service.reject_friend_request(identity.actor_id, sender_id)
    return RelationshipResponse(user_id=identity.actor_id, other_user_id=sender_id, status=result)


@router.delete("/requests/{recipient_id}", response_model=RelationshipResponse)
def cancel_request(
        recipient_id: str,
        identity: ActorIdentity = Depends(get_identity),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    result = friendship_service.cancel_friend_request(identity.actor_id, recipient_id)
    return RelationshipResponse(user_id=identity.actor_id, other_user_id=recipient_id, status=result)


@router.get("/check/{user_id}", response_model=FriendCheck)
def check(
        user_id: str,
        identity: ActorIdentity = Depends(get_identity),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    is_friend = friendship_service.are_friends(identity.actor_id, user_id)
    return FriendCheck(user_id=identity.actor_id, other_user_id=user_id, is_friend=is_friend)


@router.get("/pending", response_model=PendingCheck)
def pending(
        from_user_id: str,
        to_user_id: str,
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    is_pending = friendship_service.has_pending_request(from_user_id, to_user_id)
    return PendingCheck(from_user_id=from_user_id, to_user_id=to_user_id, pending=is_pending)


@router.get("/status/{user_id}", response_model=RelationshipResponse)
def friend_status(
        user_id: str,
        identity: ActorIdentity = Depends(get_identity),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    result = friendship_service.relationship_status(user_id)
    return RelationshipResponse(user_id=identity.actor_id, other_user_id=user_id, status=result)


@router.get("/users/{user_id}", response_model=UserIdList)
def public_friends(
        user_id: str,
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    return UserIdList.of(user_id, friendship_service.list_friends_public(user_id))


@router.delete("/{friend_id}", response_model=RelationshipResponse)
def remove_friend_route(
        friend_id: str,
        identity: ActorIdentity = Depends(get_identity),
        friendship_service: FriendshipService = Depends(get_friendship_service)
):
    result = friendship_service.remove_friend(identity.actor_id, friend_id)
    return RelationshipResponse(user_id=identity.actor_id, other_user_id=friend_id, status=result)
