# app/schemas/comment.py
from datetime import datetime
from typing import List, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from app.schemas.engagement import UserEngagement


class CommentMessage(BaseModel):
    # Validated by the service so that blank or oversized messages get a 400
    message: Optional[str] = None


class CommentAuthorInfo(BaseModel):
    """Minimal user info for comment author"""

    model_config = ConfigDict(from_attributes=True)

    id: str
    username: Optional[str] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    video_id: str
    user_id: str
    parent_comment_id: Optional[str] = None
    message: str
    like_count: int
    dislike_count: int
    visible: bool
    is_edited: bool
    created_at: datetime
    updated_at: datetime

    # Related data
    user: Optional[CommentAuthorInfo] = Field(
        default=None, validation_alias=AliasChoices("user", "author")
    )


class Pagination(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    page: int
    page_size: int = Field(alias="pageSize")
    total: int
    total_pages: int = Field(alias="totalPages")


class CommentListResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    comments: List[CommentResponse]
    pagination: Pagination
    user_engagement: UserEngagement = Field(alias="userEngagement")


class CommentCreatedResponse(BaseModel):
    success: bool = True
    comment: CommentResponse


class ReplyCreatedResponse(BaseModel):
    success: bool = True
    reply: CommentResponse
