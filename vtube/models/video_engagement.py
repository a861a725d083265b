"""
Video engagement models: likes, dislikes, and comments
Tracks user interactions with videos
"""

from sqlalchemy import Column, Text, Integer, Boolean, DateTime, ForeignKey, Index, UniqueConstraint, CheckConstraint, Uuid
from sqlalchemy.sql import func
from uuid import uuid4

from vtube.db.database import Base
from vtube.utils.date_utils import utcnow

LIKE = 1
DISLIKE = -1


class VideoReaction(Base):
    """
    One row per (user, video) holding the user's like or dislike.

    The like set of a video is every user with vote = 1 and the dislike set
    every user with vote = -1. A single row per pair means a user can never
    sit in both sets.
    """
    __tablename__ = "video_reactions"

    id = Column(Uuid, primary_key=True, default=uuid4)

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    video_id = Column(Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)

    # 1 = like, -1 = dislike
    vote = Column(Integer, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('user_id', 'video_id', name='uq_video_reactions_user_video'),
        Index('ix_video_reactions_video_vote', 'video_id', 'vote'),
        CheckConstraint('vote IN (1, -1)', name='vote_is_like_or_dislike'),
    )

    def __repr__(self):
        return f"<VideoReaction(user_id={self.user_id}, video_id={self.video_id}, vote={self.vote})>"


class VideoComment(Base):
    """User comments on videos"""
    __tablename__ = "video_comments"

    id = Column(Uuid, primary_key=True, default=uuid4)

    user_id = Column(Uuid, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    video_id = Column(Uuid, ForeignKey("videos.id", ondelete="CASCADE"), nullable=False)

    content = Column(Text, nullable=False)
    is_edited = Column(Boolean, default=False, nullable=False)

    # Timestamps
    created_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, server_default=func.now(), onupdate=utcnow, nullable=False)

    __table_args__ = (
        Index('ix_video_comments_video', 'video_id', 'created_at'),
        Index('ix_video_comments_user', 'user_id', 'created_at'),
    )

    def __repr__(self):
        return f"<VideoComment(id={self.id}, user_id={self.user_id}, video_id={self.video_id})>"
