"""
Follow service layer - Follow request lifecycle
Edges move pending -> accepted (accept) or pending -> blocked (reject)
"""

from typing import Optional, List, Tuple
from uuid import UUID

import structlog
from sqlalchemy import select, func, exists
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from vtube.core.config import settings
from vtube.core.exceptions import (
    ValidationError,
    NotFoundError,
    SelfFollowError,
    DuplicateFollowError,
    PermissionDeniedError,
)
from vtube.models.follow import FollowEdge, FollowStatusEnum
from vtube.models.user import User

logger = structlog.get_logger()

RESPONSE_ACTIONS = {
    "accept": FollowStatusEnum.ACCEPTED,
    "accepted": FollowStatusEnum.ACCEPTED,
    "reject": FollowStatusEnum.BLOCKED,
    "rejected": FollowStatusEnum.BLOCKED,
}


class FollowService:
    """Service for follow edge operations"""

    @staticmethod
    def initial_status() -> FollowStatusEnum:
        return FollowStatusEnum(settings.FOLLOW_DEFAULT_STATUS)

    @staticmethod
    async def create_follow(
        db: AsyncSession,
        follower_id: UUID,
        following_id: UUID
    ) -> FollowEdge:
        """
        Create a follow edge from follower to following

        Raises:
            SelfFollowError: follower and following are the same user
            NotFoundError: the followed user does not exist
            DuplicateFollowError: an edge already exists for the pair
        """
        if follower_id == following_id:
            raise SelfFollowError()

        target = await db.get(User, following_id)
        if target is None:
            raise NotFoundError("user", following_id)

        existing = await FollowService.get_edge_between(db, follower_id, following_id)
        if existing is not None:
            raise DuplicateFollowError(following_id, existing.status.value)

        edge = FollowEdge(
            follower_id=follower_id,
            following_id=following_id,
            status=FollowService.initial_status()
        )
        db.add(edge)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise DuplicateFollowError(following_id)

        logger.info(
            "Follow edge created",
            edge_id=str(edge.id),
            follower_id=str(follower_id),
            following_id=str(following_id),
            status=edge.status.value
        )
        return edge

    @staticmethod
    async def respond(
        db: AsyncSession,
        edge_id: UUID,
        action: str,
        actor_id: Optional[UUID] = None
    ) -> FollowEdge:
        """
        Accept or reject a follow request

        ``accept``/``accepted`` moves the edge to accepted, ``reject``/``rejected``
        to blocked. Responding again re-applies the transition. When ``actor_id``
        is given it must be the followed user.
        """
        new_status = RESPONSE_ACTIONS.get((action or "").strip().lower())
        if new_status is None:
            raise ValidationError(
                "Invalid action. Use 'accept' or 'reject'",
                field="action",
                value=action
            )

        edge = await db.get(FollowEdge, edge_id)
        if edge is None:
            raise NotFoundError("follow request", edge_id)

        if actor_id is not None and actor_id != edge.following_id:
            raise PermissionDeniedError("respond to", "follow request")

        previous = edge.status
        edge.status = new_status
        await db.commit()

        logger.info(
            "Follow request responded",
            edge_id=str(edge_id),
            previous=previous.value,
            status=new_status.value
        )
        return edge

    @staticmethod
    async def delete_follow(
        db: AsyncSession,
        edge_id: UUID,
        actor_id: Optional[UUID] = None
    ) -> FollowEdge:
        """Remove an edge in any state; either party may do it"""
        edge = await db.get(FollowEdge, edge_id)
        if edge is None:
            raise NotFoundError("follow request", edge_id)

        if actor_id is not None and actor_id not in (edge.follower_id, edge.following_id):
            raise PermissionDeniedError("delete", "follow request")

        await db.delete(edge)
        await db.commit()

        logger.info("Follow edge deleted", edge_id=str(edge_id), status=edge.status.value)
        return edge

    @staticmethod
    async def get_edge(db: AsyncSession, edge_id: UUID) -> FollowEdge:
        edge = await db.get(FollowEdge, edge_id)
        if edge is None:
            raise NotFoundError("follow request", edge_id)
        return edge

    @staticmethod
    async def get_edge_between(
        db: AsyncSession,
        follower_id: UUID,
        following_id: UUID
    ) -> Optional[FollowEdge]:
        result = await db.execute(
            select(FollowEdge).where(
                FollowEdge.follower_id == follower_id,
                FollowEdge.following_id == following_id
            )
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def follower_count(db: AsyncSession, user_id: UUID) -> int:
        """Accepted edges pointing at the user"""
        count = await db.scalar(
            select(func.count(FollowEdge.id)).where(
                FollowEdge.following_id == user_id,
                FollowEdge.status == FollowStatusEnum.ACCEPTED
            )
        )
        return count or 0

    @staticmethod
    async def following_count(db: AsyncSession, user_id: UUID) -> int:
        """Accepted edges leaving the user"""
        count = await db.scalar(
            select(func.count(FollowEdge.id)).where(
                FollowEdge.follower_id == user_id,
                FollowEdge.status == FollowStatusEnum.ACCEPTED
            )
        )
        return count or 0

    @staticmethod
    async def is_following(db: AsyncSession, follower_id: UUID, following_id: UUID) -> bool:
        result = await db.execute(
            select(
                exists().where(
                    FollowEdge.follower_id == follower_id,
                    FollowEdge.following_id == following_id,
                    FollowEdge.status == FollowStatusEnum.ACCEPTED
                )
            )
        )
        return bool(result.scalar())

    @staticmethod
    async def list_pending_requests(
        db: AsyncSession,
        user_id: UUID
    ) -> List[Tuple[FollowEdge, Optional[User]]]:
        """Pending requests addressed to the user, newest first, with the requester"""
        result = await db.execute(
            select(FollowEdge, User)
            .outerjoin(User, User.id == FollowEdge.follower_id)
            .where(
                FollowEdge.following_id == user_id,
                FollowEdge.status == FollowStatusEnum.PENDING
            )
            .order_by(FollowEdge.followed_at.desc())
        )
        return [(edge, user) for edge, user in result.all()]
