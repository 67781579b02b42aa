# app/services/comment.py
import logging
import math
from typing import List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy import and_
from sqlalchemy.orm import Session, selectinload

from app.core.config import settings
from app.core.decorator import db_exception
from app.models.comment import Comment
from app.models.comment_reaction import CommentReaction
from app.models.video import Video
from app.services.rate_limit import RateLimitService

logger = logging.getLogger(__name__)

# Left-to-right / right-to-left marks render as nothing
INVISIBLE_MARKS = ("\u200e", "\u200f")

SORT_ORDERS = {
    "newest": Comment.created_at.desc(),
    "oldest": Comment.created_at.asc(),
    "popular": Comment.like_count.desc(),
}


def clean_message(message: Optional[str], label: str = "Comment") -> str:
    """Validate a comment body and return it trimmed"""
    if not isinstance(message, str):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{label} message is required",
        )

    visible = message.strip()
    for mark in INVISIBLE_MARKS:
        visible = visible.replace(mark, "")
    if not visible.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{label} message is required",
        )

    if len(message) > settings.comment_max_length:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{label} must be {settings.comment_max_length} characters or less",
        )

    return message.strip()


class CommentService:
    def __init__(self, db: Session):
        self.db = db
        self.rate_limits = RateLimitService(db)

    def get_comments(
        self,
        video_id: str,
        sort: str = "newest",
        page: int = 1,
        size: int = 20,
        search: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Tuple[List[Comment], dict, dict]:
        """Get one page of visible comments (flat; replies included)"""
        query = (
            self.db.query(Comment)
            .filter(
                and_(
                    Comment.video_id == video_id,
                    Comment.visible == True,
                )
            )
            .options(selectinload(Comment.author))
        )

        # Search inside the message text
        if search:
            query = query.filter(Comment.message.ilike(f"%{search}%"))

        # Get total count
        total = query.count()

        # Apply sorting and pagination
        order = SORT_ORDERS.get(sort, SORT_ORDERS["newest"])
        offset = (page - 1) * size
        comments = (
            query.order_by(order, Comment.id).offset(offset).limit(size).all()
        )

        # Pagination metadata
        pagination = {
            "page": page,
            "pageSize": size,
            "total": total,
            "totalPages": math.ceil(total / size) if size > 0 else 0,
        }

        engagement = {"likedComments": [], "dislikedComments": []}
        if user_id:
            reactions = (
                self.db.query(CommentReaction.comment_id, CommentReaction.reaction_type)
                .join(Comment, Comment.id == CommentReaction.comment_id)
                .filter(
                    and_(
                        CommentReaction.user_id == user_id,
                        Comment.video_id == video_id,
                    )
                )
                .all()
            )
            for comment_id, reaction_type in reactions:
                key = "likedComments" if reaction_type == "like" else "dislikedComments"
                engagement[key].append(comment_id)

        return comments, pagination, engagement

    def _require_video(self, video_id: str) -> Video:
        video = self.db.query(Video).filter(Video.id == video_id).first()
        if not video:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Video not found",
            )
        return video

    def _insert(
        self,
        video: Video,
        user_id: str,
        message: str,
        parent_comment_id: Optional[str],
        verb: str,
    ) -> Comment:
        # One cooldown covers both comments and replies on a video
        record = self.rate_limits.check_action(
            user_id,
            "video",
            video.id,
            "comment",
            settings.comment_cooldown_ms,
            verb,
        )

        comment = Comment(
            video_id=video.id,
            user_id=user_id,
            parent_comment_id=parent_comment_id,
            message=message,
        )
        self.db.add(comment)

        # Update video comments count
        video.comment_count += 1

        self.rate_limits.touch_action(record, user_id, "video", video.id, "comment")

        self.db.commit()
        self.db.refresh(comment)

        return comment

    @db_exception
    def create_comment(self, video_id: str, message: Optional[str], user_id: str) -> Comment:
        """Create a new top-level comment on a video"""
        text = clean_message(message, "Comment")
        video = self._require_video(video_id)

        comment = self._insert(video, user_id, text, None, "commenting")
        logger.info(f"User {user_id} commented on video {video_id}")
        return comment

    @db_exception
    def create_reply(
        self, video_id: str, comment_id: str, message: Optional[str], user_id: str
    ) -> Comment:
        """Reply to an existing comment"""
        text = clean_message(message, "Reply")

        parent = self.db.query(Comment).filter(Comment.id == comment_id).first()
        if not parent or parent.video_id != video_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Parent comment not found",
            )

        if not parent.visible:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot reply to hidden comment",
            )

        video = self._require_video(parent.video_id)

        reply = self._insert(video, user_id, text, parent.id, "replying")
        logger.info(f"User {user_id} replied to comment {comment_id}")
        return reply

    def _owned_comment(
        self, video_id: str, comment_id: str, user_id: str, verb: str
    ) -> Comment:
        comment = self.db.query(Comment).filter(Comment.id == comment_id).first()
        if not comment or comment.video_id != video_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Comment not found",
            )

        if comment.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"You can only {verb} your own comments",
            )

        return comment

    @db_exception
    def update_comment(
        self, video_id: str, comment_id: str, message: Optional[str], user_id: str
    ) -> Comment:
        """Edit a comment (author only)"""
        text = clean_message(message, "Comment")
        comment = self._owned_comment(video_id, comment_id, user_id, "edit")

        if not comment.visible:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot edit a deleted comment",
            )

        comment.message = text
        comment.is_edited = True

        self.db.commit()
        self.db.refresh(comment)

        return comment

    @db_exception
    def delete_comment(self, video_id: str, comment_id: str, user_id: str) -> bool:
        """Delete a comment (soft delete)"""
        comment = self._owned_comment(video_id, comment_id, user_id, "delete")

        if not comment.visible:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Comment already deleted",
            )

        comment.visible = False

        # Update video comments count
        if comment.video:
            comment.video.comment_count = max(0, comment.video.comment_count - 1)

        self.db.commit()
        logger.info(f"User {user_id} deleted comment {comment_id}")

        return True
