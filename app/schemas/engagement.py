# app/schemas/engagement.py
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# ==================== Reaction Schemas ====================


class LikeResponse(BaseModel):
    success: bool = True
    action: str
    liked: bool
    like_count: int
    dislike_count: int


class DislikeResponse(BaseModel):
    success: bool = True
    action: str
    disliked: bool
    like_count: int
    dislike_count: int


class StarRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    watched_seconds: float = Field(default=0, ge=0, alias="watchedSeconds")


class StarResponse(BaseModel):
    success: bool = True
    action: str
    starred: bool
    star_count: int


# ==================== View / Metadata Schemas ====================


class ViewResponse(BaseModel):
    success: bool = True
    view_count: int


class MetadataUpdate(BaseModel):
    duration: float = Field(..., ge=0)


class SuccessResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None


# ==================== Error Schemas ====================


class RateLimitedResponse(BaseModel):
    """Body of a 429 from a cooldown"""

    model_config = ConfigDict(populate_by_name=True)

    error: str = "Rate limit exceeded"
    message: str
    remaining_ms: int = Field(alias="remainingMs")


class InsufficientWatchTimeResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    error: str = "Insufficient watch time"
    message: str
    required_seconds: int = Field(alias="requiredSeconds")
    watched_seconds: float = Field(alias="watchedSeconds")


class UserEngagement(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    liked_comments: List[str] = Field(default_factory=list, alias="likedComments")
    disliked_comments: List[str] = Field(
        default_factory=list, alias="dislikedComments"
    )
