"""
Pydantic schemas for videos and comments
"""

from pydantic import BaseModel, Field, field_validator
from typing import Optional


class VideoUpdate(BaseModel):
    """Schema for updating a video's text fields"""
    title: Optional[str] = Field(None, min_length=1, max_length=200, description="Video title")
    description: Optional[str] = Field(None, min_length=1, max_length=5000, description="Video description")

    @field_validator('title', 'description')
    @classmethod
    def strip_text(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError('must not be blank')
        return v


class CommentCreate(BaseModel):
    """Schema for adding a comment to a video"""
    content: str = Field(..., min_length=1, max_length=1000, description="Comment text")

    @field_validator('content')
    @classmethod
    def strip_content(cls, v):
        v = v.strip()
        if not v:
            raise ValueError('Comment content is required')
        return v


class CommentUpdate(CommentCreate):
    """Schema for editing a comment"""
    pass
