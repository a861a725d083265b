"""
Database models for the vTube platform
"""

from .user import User
from .video import Video
from .video_engagement import VideoReaction, VideoComment, LIKE, DISLIKE
from .watch_history import WatchHistoryEntry
from .follow import FollowEdge, FollowStatusEnum

__all__ = [
    "User",
    "Video",
    "VideoReaction",
    "VideoComment",
    "LIKE",
    "DISLIKE",
    "WatchHistoryEntry",
    "FollowEdge",
    "FollowStatusEnum",
]
