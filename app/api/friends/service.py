import logging
from typing import Optional, Protocol, Set

from sqlalchemy.orm import Session

from app.api.auth.dependencies import IdentityProvider
from app.api.friends import guard
from app.api.friends.schemas import RelationshipStatus
from app.api.friends.store import FriendGraphStore
from app.core.errors import (
    ConflictError,
    ErrorReason,
    NotFoundError,
    TransientError,
    ValidationError,
)
from app.database.transaction import TransactionalStore

logger = logging.getLogger(__name__)


class FriendshipNotifier(Protocol):
    def friend_request_sent(self, recipient_id: str, sender_id: str) -> None:
        ...

    def friend_request_accepted(self, sender_id: str, recipient_id: str) -> None:
        ...


class FriendshipService:
    """
    State transitions of the friend graph.

    A friend edge {A, B} is the pair of rows friends(A, B) and friends(B, A); a request
    A -> B is outgoing_requests(A, B) plus incoming_requests(B, A). Every mutation
    checks and writes both projections inside one transaction that also bumps the pair's
    version row, so two mutations of one pair never both commit against the same reads.
    At rest a pair is in exactly one of: none, pending one way, or friends.
    """

    def __init__(
            self,
            transactions: TransactionalStore,
            identity: IdentityProvider,
            graph: Optional[FriendGraphStore] = None,
            notifier: Optional[FriendshipNotifier] = None,
    ):
        self.transactions = transactions
        self.identity = identity
        self.graph = graph if graph is not None else FriendGraphStore(transactions)
        self.notifier = notifier

    # mutations

    def send_friend_request(self, sender_id: str, recipient_id: str) -> RelationshipStatus:
        guard.authorize(self.identity.current_actor_id(), sender_id)
        if sender_id == recipient_id:
            raise ValidationError(ErrorReason.SELF_REQUEST)

        def send(tx: Session) -> None:
            self.graph.touch_pair(tx, sender_id, recipient_id)
            if not self.graph.user_exists(sender_id, tx):
                raise ValidationError(ErrorReason.SENDER_NOT_FOUND, f"Sender user not found: {sender_id}")
            if not self.graph.user_exists(recipient_id, tx):
                raise ValidationError(
                    ErrorReason.RECIPIENT_NOT_FOUND, f"Recipient user not found: {recipient_id}"
                )
            if self.graph.has_friend(sender_id, recipient_id, tx):
                raise ConflictError(ErrorReason.ALREADY_FRIENDS)
            if self.graph.has_outgoing(sender_id, recipient_id, tx):
                raise ConflictError(ErrorReason.ALREADY_SENT)
            if self.graph.has_incoming(sender_id, recipient_id, tx):
                raise ConflictError(ErrorReason.REVERSE_REQUEST_EXISTS)
            self.graph.put_outgoing(tx, sender_id, recipient_id)
            self.graph.put_incoming(tx, recipient_id, sender_id)

        self.transactions.run_transaction(send)
        logger.info(f"Friend request sent: {sender_id} -> {recipient_id}")

        if self.notifier is not None:
            self._notify(self.notifier.friend_request_sent, recipient_id, sender_id)
        return RelationshipStatus.PENDING_SENT

    def accept_friend_request(self, recipient_id: str, sender_id: str) -> RelationshipStatus:
        guard.authorize(self.identity.current_actor_id(), recipient_id)

        def accept(tx: Session) -> None:
            self.graph.touch_pair(tx, recipient_id, sender_id)
            if not self.graph.has_incoming(recipient_id, sender_id, tx):
                raise NotFoundError(
                    ErrorReason.NO_PENDING_REQUEST, f"No pending friend request from user: {sender_id}"
                )
            self.graph.delete_incoming(tx, recipient_id, sender_id)
            self.graph.delete_outgoing(tx, sender_id, recipient_id)
            self.graph.put_friend(tx, recipient_id, sender_id)
            self.graph.put_friend(tx, sender_id, recipient_id)

        self.transactions.run_transaction(accept)
        logger.info(f"Friend request accepted: {sender_id} -> {recipient_id}")

        if self.notifier is not None:
            self._notify(self.notifier.friend_request_accepted, sender_id, recipient_id)
        return RelationshipStatus.FRIENDS

    def reject_friend_request(self, recipient_id: str, sender_id: str) -> RelationshipStatus:
        guard.authorize(self.identity.current_actor_id(), recipient_id)

        def reject(tx: Session) -> None:
            self.graph.touch_pair(tx, recipient_id, sender_id)
            if not self.graph.has_incoming(recipient_id, sender_id, tx):
                raise NotFoundError(
                    ErrorReason.NO_PENDING_REQUEST, f"No pending friend request from user: {sender_id}"
                )
            self.graph.delete_incoming(tx, recipient_id, sender_id)
            self.graph.delete_outgoing(tx, sender_id, recipient_id)

        self.transactions.run_transaction(reject)
        logger.info(f"Friend request rejected: {sender_id} -> {recipient_id}")
        return RelationshipStatus.NONE

    def cancel_friend_request(self, sender_id: str, recipient_id: str) -> RelationshipStatus:
        guard.authorize(self.identity.current_actor_id(), sender_id)

        def cancel(tx: Session) -> None:
            self.graph.touch_pair(tx, sender_id, recipient_id)
            if not self.graph.has_outgoing(sender_id, recipient_id, tx):
                raise NotFoundError(
                    ErrorReason.NO_SENT_REQUEST, f"No sent friend request to user: {recipient_id}"
                )
            self.graph.delete_outgoing(tx, sender_id, recipient_id)
            self.graph.delete_incoming(tx, recipient_id, sender_id)

        self.transactions.run_transaction(cancel)
        logger.info(f"Friend request cancelled: {sender_id} -> {recipient_id}")
        return RelationshipStatus.NONE

    def remove_friend(self, user_id: str, friend_id: str) -> RelationshipStatus:
        guard.authorize_party(self.identity.current_actor_id(), user_id, friend_id)

        def remove(tx: Session) -> None:
            self.graph.touch_pair(tx, user_id, friend_id)
            if not self.graph.has_friend(user_id, friend_id, tx):
                raise ConflictError(ErrorReason.NOT_FRIENDS)
            self.graph.delete_friend(tx, user_id, friend_id)
            self.graph.delete_friend(tx, friend_id, user_id)

        self.transactions.run_transaction(remove)
        logger.info(f"Friendship removed: {user_id} <-> {friend_id}")
        return RelationshipStatus.NONE

    # queries; plain reads, may lag behind a concurrent commit

    def are_friends(self, user_id: str, other_user_id: str) -> bool:
        guard.authorize_party(self.identity.current_actor_id(), user_id, other_user_id)
        return self.graph.has_friend(user_id, other_user_id)

    def has_pending_request(self, from_user_id: str, to_user_id: str) -> bool:
        """
        Whether a request from_user -> to_user is pending.

        Read from the actor's own shard: the recipient looks in its incoming requests,
        the sender in its outgoing ones.
        """
        actor = guard.authorize_party(self.identity.current_actor_id(), from_user_id, to_user_id)
        if actor == to_user_id:
            return self.graph.has_incoming(to_user_id, from_user_id)
        return self.graph.has_outgoing(from_user_id, to_user_id)

    def list_friends(self, user_id: str) -> Set[str]:
        guard.authorize(self.identity.current_actor_id(), user_id)
        return self.graph.list_friends(user_id)

    def list_incoming_requests(self, user_id: str) -> Set[str]:
        guard.authorize(self.identity.current_actor_id(), user_id)
        return self.graph.list_incoming(user_id)

    def list_outgoing_requests(self, user_id: str) -> Set[str]:
        guard.authorize(self.identity.current_actor_id(), user_id)
        return self.graph.list_outgoing(user_id)

    def list_friends_public(self, user_id: str) -> Set[str]:
        """Friend list of any user, for visitor profiles. Only needs a signed-in actor."""
        guard.require_actor(self.identity.current_actor_id())
        return self.graph.list_friends(user_id)

    def relationship_status(self, other_user_id: str) -> RelationshipStatus:
        actor = guard.require_actor(self.identity.current_actor_id())
        if other_user_id == actor:
            return RelationshipStatus.SELF
        if self.graph.has_friend(actor, other_user_id):
            return RelationshipStatus.FRIENDS
        if self.graph.has_outgoing(actor, other_user_id):
            return RelationshipStatus.PENDING_SENT
        if self.graph.has_incoming(actor, other_user_id):
            return RelationshipStatus.PENDING_RECEIVED
        return RelationshipStatus.NONE

    def _notify(self, send, user_id: str, sender_id: str) -> None:
        # The friendship change is already committed; a lost notification must not undo it.
        try:
            send(user_id, sender_id)
        except TransientError as exc:
            logger.warning(f"Failed to create notification for {user_id}: {exc}", exc_info=True)
