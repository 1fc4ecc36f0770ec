from sqlalchemy import func, desc
from sqlalchemy.orm import Session

from app.api.auth.dependencies import IdentityProvider
from app.api.friends import guard
from app.api.friends.store import FriendGraphStore
from app.api.notifications.models import Notification
from app.api.notifications.schemas import NotificationType
from app.api.profile.models import User
from app.database.transaction import TransactionalStore


class NotificationService:
    def __init__(self, transactions: TransactionalStore, identity: IdentityProvider):
        self.transactions = transactions
        self.identity = identity

    # FriendshipNotifier

    def friend_request_sent(self, recipient_id: str, sender_id: str) -> None:
        self._create(
            recipient_id, sender_id, NotificationType.FRIEND_REQUEST,
            title="New friend request",
            message="{name} sent you a friend request",
        )

    def friend_request_accepted(self, sender_id: str, recipient_id: str) -> None:
        self._create(
            sender_id, recipient_id, NotificationType.FRIEND_ACCEPTED,
            title="Friend request accepted",
            message="{name} accepted your friend request",
        )

    # reads for the current actor

    def get_notifications(self, limit: int):
        user_id = guard.require_actor(self.identity.current_actor_id())
        with self.transactions.session() as db:
            return (
                db.query(Notification)
                .filter(Notification.user_id == user_id)
                .order_by(desc(Notification.created_at), desc(Notification.id))
                .limit(limit)
                .all()
            )

    def get_unread_count(self) -> int:
        user_id = guard.require_actor(self.identity.current_actor_id())
        with self.transactions.session() as db:
            count = (
                db.query(func.count(Notification.id))
                .filter(Notification.user_id == user_id, Notification.is_read == False)
                .scalar()
            )
        return count or 0

    def get_pending_request_count(self) -> int:
        user_id = guard.require_actor(self.identity.current_actor_id())
        return len(FriendGraphStore(self.transactions).list_incoming(user_id))

    def mark_read(self, notification_id: int) -> bool:
        user_id = guard.require_actor(self.identity.current_actor_id())

        def mark(tx: Session) -> bool:
            notification = (
                tx.query(Notification)
                .filter(Notification.id == notification_id, Notification.user_id == user_id)
                .first()
            )
            if not notification:
                return False
            notification.is_read = True
            return True

        return self.transactions.run_transaction(mark)

    def mark_all_read(self) -> None:
        user_id = guard.require_actor(self.identity.current_actor_id())

        def mark_all(tx: Session) -> None:
            tx.query(Notification).filter(
                Notification.user_id == user_id, Notification.is_read == False
            ).update({"is_read": True}, synchronize_session=False)

        self.transactions.run_transaction(mark_all)

    def _create(self, user_id: str, sender_id: str, type_: NotificationType, title: str, message: str) -> None:
        def create(tx: Session) -> None:
            sender = tx.get(User, sender_id)
            sender_name = sender.display_name if sender else "Someone"
            tx.add(Notification(
                user_id=user_id, type=type_.value,
                title=title,
                message=message.format(name=sender_name),
                sender_id=sender_id, sender_name=sender_name,
            ))

        self.transactions.run_transaction(create)
