"""
Follow edge model
Directed follower -> following relationship with a request lifecycle
"""

from sqlalchemy import Column, Boolean, DateTime, Enum, Index, UniqueConstraint, CheckConstraint, Uuid
from sqlalchemy.sql import func
from uuid import uuid4
import enum

from vtube.db.database import Base
from vtube.utils.date_utils import utcnow


class FollowStatusEnum(str, enum.Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    BLOCKED = "blocked"


class FollowEdge(Base):
    __tablename__ = "follow_edges"

    id = Column(Uuid, primary_key=True, default=uuid4)

    # User who follows
    follower_id = Column(Uuid, nullable=False)

    # User being followed
    following_id = Column(Uuid, nullable=False)

    status = Column(
        Enum(FollowStatusEnum, name="follow_status", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=FollowStatusEnum.PENDING
    )
    notifications_enabled = Column(Boolean, nullable=False, default=True)

    followed_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('follower_id', 'following_id', name='uq_follow_edges_pair'),
        Index('ix_follow_edges_following_status', 'following_id', 'status'),
        CheckConstraint('follower_id <> following_id', name='no_self_follow'),
    )

    def __repr__(self):
        return f"<FollowEdge(follower_id={self.follower_id}, following_id={self.following_id}, status={self.status})>"
