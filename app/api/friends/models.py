from sqlalchemy import Column, String, DateTime, ForeignKey, CheckConstraint, Integer
from sqlalchemy.sql import func

from app.database.database import Base

# Each table is one per-user collection; a row is one projection owned by user_id.


class Friend(Base):
    __tablename__ = "friends"

    user_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    friend_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("user_id != friend_id", name="chk_no_self_friend"),
    )


class IncomingRequest(Base):
    __tablename__ = "incoming_requests"

    user_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    sender_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("user_id != sender_id", name="chk_no_self_incoming"),
    )


class OutgoingRequest(Base):
    __tablename__ = "outgoing_requests"

    user_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    recipient_id = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("user_id != recipient_id", name="chk_no_self_outgoing"),
    )


class FriendPair(Base):
    """
    One row per unordered pair of users, bumped by every mutation on that pair.

    Two transactions on the same pair both write this row, so the later one fails its
    version check (or its insert) and is retried against the committed state.
    """
    __tablename__ = "friend_pairs"

    user_low = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    user_high = Column(String(128), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    version = Column(Integer, nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        CheckConstraint("user_low < user_high", name="chk_pair_ordered"),
    )
    __mapper_args__ = {"version_id_col": version}
