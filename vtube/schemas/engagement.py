"""
Pydantic schemas for engagement results
Views, reactions and follow edges
"""

from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from uuid import UUID


class ViewResult(BaseModel):
    """Outcome of recording a view"""
    video_id: UUID
    entry_id: Optional[UUID] = None
    is_new: bool = Field(..., description="True when a fresh history entry was created in this call")
    counted: bool = Field(..., description="True when the video's view counter was incremented")

    @property
    def message(self) -> str:
        if not self.is_new:
            return "View already counted within the watch window"
        if not self.counted:
            return "History recorded, view counter not incremented"
        return "View recorded"


class ReactionSummary(BaseModel):
    """Like/dislike set sizes for a video and the caller's membership"""
    video_id: UUID
    likes: int = 0
    dislikes: int = 0
    is_liked: bool = False
    is_disliked: bool = False


class HistoryDeleteRequest(BaseModel):
    """Optional JSON body for deleting watch history; overrides query parameters"""
    model_config = ConfigDict(populate_by_name=True)

    mode: Optional[str] = None
    delete_type: Optional[str] = Field(None, alias="deleteType")
    video_id: Optional[str] = Field(None, alias="videoId")

    @property
    def requested_mode(self) -> Optional[str]:
        return self.mode or self.delete_type


class FollowResponseRequest(BaseModel):
    """Optional JSON body carrying the response to a follow request"""
    action: Optional[str] = None
