"""
Response-shaped projections for videos, comments, history and profiles

These functions only read attributes off the objects they are given, so
they work the same on ORM rows and on plain in-memory objects.
"""

from math import ceil
from typing import Any, Dict, Iterable, List, Optional


def owner_summary(user: Any) -> Optional[Dict[str, Any]]:
    """Minimal public profile of a user"""
    if user is None:
        return None
    return {
        "id": user.id,
        "username": user.username,
        "fullName": getattr(user, "full_name", None),
        "avatar": getattr(user, "avatar_url", None),
    }


def media_reference(url: Optional[str], kind: Optional[str]) -> Optional[Dict[str, Any]]:
    if not url:
        return None
    return {"url": url, "type": kind}


def comment_preview(comment: Any, author: Any) -> Dict[str, Any]:
    """A comment with its author's minimal profile"""
    return {
        "id": comment.id,
        "videoId": comment.video_id,
        "content": comment.content,
        "isEdited": bool(getattr(comment, "is_edited", False)),
        "createdAt": comment.created_at,
        "updatedAt": getattr(comment, "updated_at", None),
        "user": owner_summary(author),
    }


def video_minimal(video: Any, owner: Any) -> Dict[str, Any]:
    """The slim video shape used inside watch-history listings"""
    return {
        "id": video.id,
        "title": video.title,
        "description": video.description,
        "thumbnailUrl": video.thumbnail_url,
        "owner": owner_summary(owner),
    }


def video_card(
    video: Any,
    owner: Any,
    likes: int = 0,
    dislikes: int = 0,
    comment_count: int = 0,
    comments: Optional[Iterable[Dict[str, Any]]] = None,
    viewer_id: Any = None,
) -> Dict[str, Any]:
    """A video as it appears in listings"""
    card = {
        "id": video.id,
        "title": video.title,
        "description": video.description,
        "thumbnail": media_reference(video.thumbnail_url, video.thumbnail_kind),
        "videoFile": media_reference(video.file_url, video.file_kind),
        "duration": video.duration,
        "views": video.views or 0,
        "likes": likes,
        "dislikes": dislikes,
        "commentCount": comment_count,
        "createdAt": video.created_at,
        "owner": owner_summary(owner),
        "comments": list(comments or []),
    }
    if viewer_id is not None:
        card["isOwner"] = video.owner_id == viewer_id
    return card


def viewer_state(
    viewer_id: Any,
    owner_id: Any,
    vote: Optional[int] = None,
    is_following_owner: bool = False,
    has_watched: bool = False,
) -> Dict[str, bool]:
    """What the caller has done with a video; all false for anonymous callers"""
    if viewer_id is None:
        return {
            "isLiked": False,
            "isDisliked": False,
            "isFollowingOwner": False,
            "hasWatched": False,
            "isOwner": False,
        }
    return {
        "isLiked": vote == 1,
        "isDisliked": vote == -1,
        "isFollowingOwner": bool(is_following_owner),
        "hasWatched": bool(has_watched),
        "isOwner": viewer_id == owner_id,
    }


def video_detail(
    video: Any,
    owner: Any,
    likes: int,
    dislikes: int,
    comment_count: int,
    comments: Iterable[Dict[str, Any]],
    state: Dict[str, bool],
    owner_followers: int = 0,
) -> Dict[str, Any]:
    """Full video view: card fields plus caller state and owner follower count"""
    detail = video_card(video, owner, likes, dislikes, comment_count, comments)
    detail["updatedAt"] = getattr(video, "updated_at", None)
    detail["viewer"] = state
    if detail["owner"] is not None:
        detail["owner"]["followers"] = owner_followers
    return detail


def history_item(entry: Any, video: Any, owner: Any) -> Dict[str, Any]:
    """A watch-history entry resolved to its video"""
    return {
        "id": entry.id,
        "videoId": entry.video_id,
        "watchedAt": entry.created_at,
        "video": video_minimal(video, owner),
    }


def follow_edge(edge: Any) -> Dict[str, Any]:
    status = edge.status
    return {
        "id": edge.id,
        "followerId": edge.follower_id,
        "followingId": edge.following_id,
        "status": getattr(status, "value", status),
        "notificationsEnabled": edge.notifications_enabled,
        "followedAt": edge.followed_at,
        "updatedAt": getattr(edge, "updated_at", None),
    }


def page_meta(total: int, page: int, limit: int) -> Dict[str, int]:
    """Pagination block for listings that report totals"""
    return {
        "totalVideos": total,
        "totalPages": ceil(total / limit) if limit else 0,
        "page": page,
        "limit": limit,
    }


def group_comments(rows: Iterable[Any], per_video: int) -> Dict[Any, List[Dict[str, Any]]]:
    """
    Bucket (comment, author) rows by video, newest first, capped per video

    Rows must already be sorted newest first.
    """
    grouped: Dict[Any, List[Dict[str, Any]]] = {}
    for comment, author in rows:
        bucket = grouped.setdefault(comment.video_id, [])
        if len(bucket) < per_video:
            bucket.append(comment_preview(comment, author))
    return grouped
