"""
Services package - Business logic layer
"""

from vtube.services.watch_history_service import WatchHistoryService
from vtube.services.reaction_service import ReactionService
from vtube.services.follow_service import FollowService
from vtube.services.video_query_service import VideoQueryService
from vtube.services.video_service import VideoService
from vtube.services.comment_service import CommentService
from vtube.services.media_store import MediaStore, MediaReference

__all__ = [
    'WatchHistoryService',
    'ReactionService',
    'FollowService',
    'VideoQueryService',
    'VideoService',
    'CommentService',
    'MediaStore',
    'MediaReference'
]
