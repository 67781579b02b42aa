# app/routers/videos.py
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.database import get_db
from app.core.dependencies import get_client_ip, get_current_user, get_optional_user
from app.core.limiter import limiter
from app.models.user import User
from app.schemas.comment import (
    CommentCreatedResponse,
    CommentListResponse,
    CommentMessage,
    ReplyCreatedResponse,
)
from app.schemas.engagement import (
    DislikeResponse,
    InsufficientWatchTimeResponse,
    LikeResponse,
    MetadataUpdate,
    RateLimitedResponse,
    StarRequest,
    StarResponse,
    SuccessResponse,
    ViewResponse,
)
from app.services.comment import CommentService
from app.services.engagement import EngagementService
from app.services.video import VideoService

router = APIRouter(
    prefix="/api/videos",
    tags=["Videos"],
    responses={
        404: {"description": "Not found"},
        429: {"model": RateLimitedResponse, "description": "Cooldown running"},
    },
)


# ==================== Video Reactions ====================


@router.post("/{video_id}/like", response_model=LikeResponse)
def like_video(
    video_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Toggle a like on a video.
    Liking clears an existing dislike.
    """
    service = EngagementService(db)
    return service.toggle_video_reaction(video_id, current_user.id, "like")


@router.post("/{video_id}/dislike", response_model=DislikeResponse)
def dislike_video(
    video_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Toggle a dislike on a video.
    Disliking clears an existing like.
    """
    service = EngagementService(db)
    return service.toggle_video_reaction(video_id, current_user.id, "dislike")


@router.post(
    "/{video_id}/star",
    response_model=StarResponse,
    responses={403: {"model": InsufficientWatchTimeResponse}},
)
def star_video(
    video_id: str,
    star_in: Optional[StarRequest] = None,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Toggle a star on a video.
    Adding a star requires the client-reported watch time to reach the
    configured share of the video's duration.
    """
    watched = star_in.watched_seconds if star_in else 0
    service = EngagementService(db)
    return service.toggle_video_reaction(
        video_id, current_user.id, "star", watched_seconds=watched
    )


# ==================== Comment Reactions ====================


@router.post("/{video_id}/comments/{comment_id}/like", response_model=LikeResponse)
def like_comment(
    video_id: str,
    comment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Toggle a like on a comment"""
    service = EngagementService(db)
    return service.toggle_comment_reaction(video_id, comment_id, current_user.id, "like")


@router.post(
    "/{video_id}/comments/{comment_id}/dislike", response_model=DislikeResponse
)
def dislike_comment(
    video_id: str,
    comment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Toggle a dislike on a comment"""
    service = EngagementService(db)
    return service.toggle_comment_reaction(
        video_id, comment_id, current_user.id, "dislike"
    )


# ==================== Comments ====================


@router.get("/{video_id}/comments", response_model=CommentListResponse)
def list_comments(
    video_id: str,
    sort: str = Query("newest", pattern="^(newest|oldest|popular)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(
        settings.default_page_size, ge=1, le=settings.max_page_size, alias="pageSize"
    ),
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: Optional[User] = Depends(get_optional_user),
):
    """
    Get one page of comments for a video.
    Replies are returned flat next to their parents; `userEngagement` lists
    the comments the caller has liked or disliked.
    """
    service = CommentService(db)
    user_id = current_user.id if current_user else None
    comments, pagination, engagement = service.get_comments(
        video_id, sort, page, page_size, search, user_id
    )
    return {
        "comments": comments,
        "pagination": pagination,
        "userEngagement": engagement,
    }


@router.post("/{video_id}/comment", response_model=CommentCreatedResponse)
@limiter.limit("30/minute")
def create_comment(
    request: Request,
    video_id: str,
    comment_in: CommentMessage,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Post a top-level comment"""
    service = CommentService(db)
    comment = service.create_comment(video_id, comment_in.message, current_user.id)
    return {"comment": comment}


@router.post(
    "/{video_id}/comments/{comment_id}/reply", response_model=ReplyCreatedResponse
)
@limiter.limit("30/minute")
def reply_to_comment(
    request: Request,
    video_id: str,
    comment_id: str,
    comment_in: CommentMessage,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Reply to a comment"""
    service = CommentService(db)
    reply = service.create_reply(
        video_id, comment_id, comment_in.message, current_user.id
    )
    return {"reply": reply}


@router.patch(
    "/{video_id}/comments/{comment_id}/edit", response_model=CommentCreatedResponse
)
def edit_comment(
    video_id: str,
    comment_id: str,
    comment_in: CommentMessage,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Edit a comment.
    Only the comment author can edit.
    """
    service = CommentService(db)
    comment = service.update_comment(
        video_id, comment_id, comment_in.message, current_user.id
    )
    return {"comment": comment}


@router.delete(
    "/{video_id}/comments/{comment_id}/delete", response_model=SuccessResponse
)
def delete_comment(
    video_id: str,
    comment_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Delete a comment (soft delete).
    Only the comment author can delete.
    """
    service = CommentService(db)
    service.delete_comment(video_id, comment_id, current_user.id)
    return {"message": "Comment deleted successfully"}


# ==================== Views / Metadata ====================


@router.post("/{video_id}/view", response_model=ViewResponse)
def record_view(
    request: Request,
    video_id: str,
    db: Session = Depends(get_db),
):
    """Count a view for the calling IP (once per cooldown window)"""
    service = VideoService(db)
    view_count = service.record_view(video_id, get_client_ip(request))
    return {"view_count": view_count}


@router.patch("/{video_id}/metadata", response_model=SuccessResponse)
def update_metadata(
    video_id: str,
    metadata_in: MetadataUpdate,
    db: Session = Depends(get_db),
):
    """Record the duration reported by the player (only while unknown)"""
    service = VideoService(db)
    service.update_duration(video_id, metadata_in.duration)
    return {}
