"""
API endpoints for follow requests
"""

from fastapi import APIRouter, Body, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from vtube.core.deps import get_current_user
from vtube.core.responses import api_response
from vtube.db.database import get_db
from vtube.models.follow import FollowStatusEnum
from vtube.models.user import User
from vtube.schemas.engagement import FollowResponseRequest
from vtube.services.follow_service import FollowService
from vtube.services.projections import follow_edge, owner_summary
from vtube.utils.validators import parse_uuid

router = APIRouter()


@router.get("/requests")
async def list_pending_requests(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Pending follow requests addressed to the caller"""
    pending = await FollowService.list_pending_requests(db, current_user.id)
    data = [
        {**follow_edge(edge), "follower": owner_summary(follower)}
        for edge, follower in pending
    ]
    return api_response(data, "Follow requests fetched successfully")


@router.api_route("/response/{request_id}", methods=["GET", "PATCH"])
async def respond_to_request(
    request_id: str,
    action: Optional[str] = Query(None, description="accept or reject"),
    payload: Optional[FollowResponseRequest] = Body(None),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """
    Accept or reject a follow request

    Only the user being followed can respond. An ``action`` in the JSON
    body takes precedence over the query string.
    """
    if payload is not None and payload.action:
        action = payload.action

    edge = await FollowService.respond(
        db,
        parse_uuid(request_id, "requestId"),
        action,
        actor_id=current_user.id
    )
    return api_response(follow_edge(edge), f"Follow request {edge.status.value}")


@router.get("/{user_id}/stats")
async def follow_stats(
    user_id: str,
    db: AsyncSession = Depends(get_db)
):
    target = parse_uuid(user_id, "userId")
    data = {
        "userId": target,
        "followers": await FollowService.follower_count(db, target),
        "following": await FollowService.following_count(db, target),
    }
    return api_response(data, "Follow stats fetched successfully")


@router.post("/{following_id}")
async def follow_user(
    following_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Send a follow request (or follow directly when requests are auto-accepted)"""
    edge = await FollowService.create_follow(
        db, current_user.id, parse_uuid(following_id, "followingId")
    )
    message = "Follow request sent" if edge.status == FollowStatusEnum.PENDING else "User followed successfully"
    return api_response(follow_edge(edge), message, status.HTTP_201_CREATED)


@router.delete("/{request_id}")
async def delete_follow(
    request_id: str,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db)
):
    """Unfollow, cancel a request, or remove a follower"""
    edge = await FollowService.delete_follow(
        db, parse_uuid(request_id, "requestId"), actor_id=current_user.id
    )
    return api_response(follow_edge(edge), "Follow removed successfully")
