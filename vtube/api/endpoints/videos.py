"""
API endpoints for videos
Listings, details, uploads, views, reactions, comments and watch history
"""

from fastapi import APIRouter, Body, Depends, Query, Form, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from vtube.core.config import settings
from vtube.core.deps import get_current_user, get_optional_user, get_media_store
from vtube.core.responses import api_response
from vtube.db.database import get_db
from vtube.models.user import User
from vtube.schemas.engagement import HistoryDeleteRequest
from vtube.schemas.video import VideoUpdate, CommentCreate
from vtube.services.comment_service import CommentService
from vtube.services.media_store import MediaStore
from vtube.services.projections import comment_preview, video_card
from vtube.services.reaction_service import ReactionService
from vtube.services.video_query_service import VideoQueryService
from vtube.services.video_service import VideoService
from vtube.services.watch_history_service import WatchHistoryService
from vtube.utils.validators import parse_uuid, optional_uuid, normalize_pagination

router = APIRouter()


def _pagination(page: Optional[int], limit: Optional[int]):
    return normalize_pagination(page, limit, settings.DEFAULT_PAGE_SIZE, settings.MAX_PAGE_SIZE)


@router.get("")
async def list_videos(
    page: Optional[int] = Query(1, description="Page number, starting at 1"),
    limit: Optional[int] = Query(None, description="Videos per page"),
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """All videos, newest first, with counts and a comment preview"""
    page, limit = _pagination(page, limit)
    listing = await VideoQueryService.list_videos(
        db, page, limit, viewer_id=current_user.id if current_user else None
    )
    return api_response(listing, "Videos fetched successfully")


@router.get("/search")
async def search_videos(
    title: Optional[str] = Query(None, description="Case-insensitive title fragment"),
    page: Optional[int] = Query(1),
    limit: Optional[int] = Query(None),
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    page, limit = _pagination(page, limit)
    listing = await VideoQueryService.search_videos(
        db, title, page, limit, viewer_id=current_user.id if current_user else None
    )
    return api_response(listing, "Videos fetched successfully")


@router.get("/history")
async def get_watch_history(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """The caller's history inside the watch window, newest first"""
    history = await WatchHistoryService.get_recent_history(db, current_user.id)
    return api_response(history, "Watch history fetched successfully")


@router.delete("/history")
async def delete_watch_history(
    mode: str = Query("all", description="all, one, window or 24hours"),
    video_id: Optional[str] = Query(None, alias="videoId"),
    payload: Optional[HistoryDeleteRequest] = Body(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Delete the caller's watch history

    ``mode``/``deleteType`` and ``videoId`` may come from a JSON body or the
    query string; body values win.
    """
    if payload is not None:
        mode = payload.requested_mode or mode
        video_id = payload.video_id or video_id

    removed = await WatchHistoryService.delete_history(
        db,
        current_user.id,
        mode,
        optional_uuid(video_id, "videoId")
    )
    return api_response({"deletedCount": removed}, "Watch history deleted successfully")


@router.get("/user/{user_id}")
async def list_user_videos(
    user_id: str,
    page: Optional[int] = Query(1),
    limit: Optional[int] = Query(None),
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """A user's videos with totals and an ownership flag"""
    owner_id = parse_uuid(user_id, "userId")
    page, limit = _pagination(page, limit)
    listing = await VideoQueryService.list_user_videos(
        db, owner_id, page, limit, viewer_id=current_user.id if current_user else None
    )
    return api_response(listing, "User videos fetched successfully")


@router.post("/upload")
async def upload_video(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    video: Optional[UploadFile] = File(None),
    thumbnail: Optional[UploadFile] = File(None),
    current_user: User = Depends(get_current_user),
    media_store: MediaStore = Depends(get_media_store),
    db: AsyncSession = Depends(get_db)
):
    """Upload a video with its thumbnail (multipart form)"""
    created = await VideoService.upload_video(
        db, media_store, current_user.id, title, description, video, thumbnail
    )
    return api_response(
        video_card(created, current_user, viewer_id=current_user.id),
        "Video uploaded successfully",
        status.HTTP_201_CREATED
    )


@router.get("/{video_id}")
async def get_video(
    video_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    """Full video view including the caller's reactions, follow and watch state"""
    detail = await VideoQueryService.get_video_detail(
        db,
        parse_uuid(video_id, "videoId"),
        viewer_id=current_user.id if current_user else None
    )
    return api_response(detail, "Video fetched successfully")


@router.patch("/{video_id}")
async def update_video(
    video_id: str,
    payload: VideoUpdate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    updated = await VideoService.update_video(
        db,
        parse_uuid(video_id, "videoId"),
        current_user.id,
        title=payload.title,
        description=payload.description
    )
    return api_response(
        video_card(updated, current_user, viewer_id=current_user.id),
        "Video updated successfully"
    )


@router.delete("/{video_id}")
async def delete_video(
    video_id: str,
    current_user: User = Depends(get_current_user),
    media_store: MediaStore = Depends(get_media_store),
    db: AsyncSession = Depends(get_db)
):
    """Delete a video; its stored media is removed afterwards"""
    deleted = await VideoService.delete_video(
        db, media_store, parse_uuid(video_id, "videoId"), current_user.id
    )
    return api_response({"id": deleted.id}, "Video deleted successfully")


@router.post("/{video_id}/view")
async def record_view(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Record a view by the caller

    201 when the view is new within the watch window, 200 when it was
    already counted.
    """
    result = await WatchHistoryService.record_view(
        db, current_user.id, parse_uuid(video_id, "videoId")
    )
    status_code = status.HTTP_201_CREATED if result.is_new else status.HTTP_200_OK
    return api_response(
        {
            "videoId": result.video_id,
            "entryId": result.entry_id,
            "isNew": result.is_new,
            "counted": result.counted,
        },
        result.message,
        status_code
    )


def _reaction_payload(summary):
    return {
        "videoId": summary.video_id,
        "likes": summary.likes,
        "dislikes": summary.dislikes,
        "isLiked": summary.is_liked,
        "isDisliked": summary.is_disliked,
    }


@router.api_route("/{video_id}/like", methods=["GET", "POST"])
async def toggle_like(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    summary = await ReactionService.toggle_like(db, parse_uuid(video_id, "videoId"), current_user.id)
    message = "Video liked" if summary.is_liked else "Like removed"
    return api_response(_reaction_payload(summary), message)


@router.api_route("/{video_id}/dislike", methods=["GET", "POST"])
async def toggle_dislike(
    video_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    summary = await ReactionService.toggle_dislike(db, parse_uuid(video_id, "videoId"), current_user.id)
    message = "Video disliked" if summary.is_disliked else "Dislike removed"
    return api_response(_reaction_payload(summary), message)


@router.get("/{video_id}/reactions")
async def get_reactions(
    video_id: str,
    current_user: Optional[User] = Depends(get_optional_user),
    db: AsyncSession = Depends(get_db)
):
    summary = await ReactionService.get_reaction_summary(
        db,
        parse_uuid(video_id, "videoId"),
        current_user.id if current_user else None,
        require_video=True
    )
    return api_response(_reaction_payload(summary), "Reactions fetched successfully")


@router.get("/{video_id}/comments")
async def list_comments(
    video_id: str,
    page: Optional[int] = Query(1),
    limit: Optional[int] = Query(None),
    order: str = Query("newest", description="newest or oldest"),
    db: AsyncSession = Depends(get_db)
):
    page, limit = _pagination(page, limit)
    listing = await CommentService.list_comments(
        db, parse_uuid(video_id, "videoId"), page, limit, order
    )
    return api_response(listing, "Comments fetched successfully")


@router.post("/{video_id}/comments")
async def add_comment(
    video_id: str,
    payload: CommentCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    comment = await CommentService.add_comment(
        db, parse_uuid(video_id, "videoId"), payload, current_user.id
    )
    return api_response(
        comment_preview(comment, current_user),
        "Comment added successfully",
        status.HTTP_201_CREATED
    )
