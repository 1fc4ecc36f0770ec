from typing import Optional, Set

from sqlalchemy.orm import Session
from sqlalchemy.sql import func

from app.api.friends.models import Friend, FriendPair, IncomingRequest, OutgoingRequest
from app.api.profile.models import User
from app.database.transaction import TransactionalStore


class FriendGraphStore:
    """
    Typed access to the three per-user collections: friends, incoming_requests,
    outgoing_requests.

    Reads accept an optional transaction handle so checks can share the snapshot of
    the write that follows them. Writes always take the handle. Nothing here keeps the
    two projections of an edge or request in step; that is FriendshipService's job.
    """

    def __init__(self, transactions: TransactionalStore):
        self.transactions = transactions

    # reads

    def list_friends(self, user_id: str, tx: Optional[Session] = None) -> Set[str]:
        return self._list(Friend.friend_id, Friend.user_id, user_id, tx)

    def list_incoming(self, user_id: str, tx: Optional[Session] = None) -> Set[str]:
        return self._list(IncomingRequest.sender_id, IncomingRequest.user_id, user_id, tx)

    def list_outgoing(self, user_id: str, tx: Optional[Session] = None) -> Set[str]:
        return self._list(OutgoingRequest.recipient_id, OutgoingRequest.user_id, user_id, tx)

    def has_friend(self, user_id: str, other_id: str, tx: Optional[Session] = None) -> bool:
        return self._exists(Friend, (user_id, other_id), tx)

    def has_incoming(self, user_id: str, other_id: str, tx: Optional[Session] = None) -> bool:
        return self._exists(IncomingRequest, (user_id, other_id), tx)

    def has_outgoing(self, user_id: str, other_id: str, tx: Optional[Session] = None) -> bool:
        return self._exists(OutgoingRequest, (user_id, other_id), tx)

    def user_exists(self, user_id: str, tx: Optional[Session] = None) -> bool:
        return self._exists(User, user_id, tx)

    # writes

    def touch_pair(self, tx: Session, user_a: str, user_b: str) -> None:
        """
        Writes the pair's version row. Flushed at commit, where a concurrent writer of
        the same pair turns into a unique violation or a StaleDataError.
        """
        low, high = sorted((user_a, user_b))
        pair = tx.get(FriendPair, (low, high))
        if pair is None:
            tx.add(FriendPair(user_low=low, user_high=high))
        else:
            pair.updated_at = func.now()

    def put_friend(self, tx: Session, user_id: str, friend_id: str) -> None:
        tx.merge(Friend(user_id=user_id, friend_id=friend_id))

    def delete_friend(self, tx: Session, user_id: str, friend_id: str) -> None:
        tx.query(Friend).filter(
            Friend.user_id == user_id, Friend.friend_id == friend_id
        ).delete(synchronize_session=False)

    def put_incoming(self, tx: Session, user_id: str, sender_id: str) -> None:
        tx.merge(IncomingRequest(user_id=user_id, sender_id=sender_id))

    def delete_incoming(self, tx: Session, user_id: str, sender_id: str) -> None:
        tx.query(IncomingRequest).filter(
            IncomingRequest.user_id == user_id, IncomingRequest.sender_id == sender_id
        ).delete(synchronize_session=False)

    def put_outgoing(self, tx: Session, user_id: str, recipient_id: str) -> None:
        tx.merge(OutgoingRequest(user_id=user_id, recipient_id=recipient_id))

    def delete_outgoing(self, tx: Session, user_id: str, recipient_id: str) -> None:
        tx.query(OutgoingRequest).filter(
            OutgoingRequest.user_id == user_id, OutgoingRequest.recipient_id == recipient_id
        ).delete(synchronize_session=False)

    def _list(self, column, owner_column, user_id: str, tx: Optional[Session]) -> Set[str]:
        if tx is not None:
            return {row[0] for row in tx.query(column).filter(owner_column == user_id).all()}
        with self.transactions.session() as db:
            return {row[0] for row in db.query(column).filter(owner_column == user_id).all()}

    def _exists(self, model, key, tx: Optional[Session]) -> bool:
        if tx is not None:
            return tx.get(model, key) is not None
        with self.transactions.session() as db:
            return db.get(model, key) is not None
