# app/services/engagement.py
import logging
import math
from typing import Dict, Optional

from fastapi import HTTPException, status
from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.decorator import WatchTimeException, db_exception
from app.models.comment import Comment
from app.models.comment_reaction import CommentReaction
from app.models.video import Video
from app.models.video_reaction import VideoReaction
from app.services.rate_limit import RateLimitService

logger = logging.getLogger(__name__)

# Counter column touched by each reaction type
COUNT_COLUMNS = {
    "like": "like_count",
    "dislike": "dislike_count",
    "star": "star_count",
}

# Like and dislike clear each other; star stands alone
EXCLUSIVE = {"like": "dislike", "dislike": "like"}

# (performed, undone) action names reported back to the client
ACTION_NAMES = {
    "like": ("liked", "unliked"),
    "dislike": ("disliked", "removed_dislike"),
    "star": ("starred", "unstarred"),
}

VIDEO_VERBS = {
    "like": "liking/unliking",
    "dislike": "disliking/removing dislike",
    "star": "starring/unstarring",
}

COMMENT_VERBS = {
    "like": "liking/unliking",
    "dislike": "disliking/undisliking",
}


def video_cooldown_ms(action: str) -> int:
    return {
        "like": settings.like_cooldown_ms,
        "dislike": settings.dislike_cooldown_ms,
        "star": settings.star_cooldown_ms,
    }[action]


def comment_cooldown_ms(action: str) -> int:
    return {
        "like": settings.comment_like_cooldown_ms,
        "dislike": settings.comment_dislike_cooldown_ms,
    }[action]


class EngagementService:
    """
    Atomic reaction toggles for videos and comments.

    Each toggle locks the target row, enforces the per-(user, target, action)
    cooldown, flips the reaction, clears the exclusive counterpart, adjusts
    the counters and stamps the cooldown ledger in a single commit.
    """

    def __init__(self, db: Session):
        self.db = db
        self.rate_limits = RateLimitService(db)

    def _apply_toggle(self, target, existing: Dict[str, object], action: str, new_row) -> bool:
        """Flip `action` on `target`; returns the new boolean state"""
        column = COUNT_COLUMNS[action]
        current = existing.get(action)

        if current is not None:
            self.db.delete(current)
            setattr(target, column, max(0, getattr(target, column) - 1))
            return False

        self.db.add(new_row(action))
        setattr(target, column, getattr(target, column) + 1)

        opposite = EXCLUSIVE.get(action)
        if opposite and existing.get(opposite) is not None:
            self.db.delete(existing[opposite])
            opposite_column = COUNT_COLUMNS[opposite]
            setattr(
                target, opposite_column, max(0, getattr(target, opposite_column) - 1)
            )

        return True

    def _check_watch_time(self, video: Video, watched_seconds: Optional[float]) -> None:
        required = (video.duration or 0) * settings.star_watch_ratio
        watched = watched_seconds or 0
        if watched < required:
            logger.info(
                f"Star rejected for video {video.id}: watched {watched}s of required {required:.1f}s"
            )
            raise WatchTimeException(
                required_seconds=math.ceil(required),
                watched_seconds=watched,
                percent=round(settings.star_watch_ratio * 100),
            )

    @db_exception
    def toggle_video_reaction(
        self,
        video_id: str,
        user_id: str,
        action: str,
        watched_seconds: Optional[float] = None,
    ) -> dict:
        """Toggle like, dislike or star on a video for the user"""
        video = (
            self.db.query(Video).filter(Video.id == video_id).with_for_update().first()
        )
        if not video:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Video not found",
            )

        existing = {
            reaction.reaction_type: reaction
            for reaction in self.db.query(VideoReaction).filter(
                and_(
                    VideoReaction.video_id == video_id,
                    VideoReaction.user_id == user_id,
                )
            )
        }

        # Removing a star is always allowed; adding one needs watch time
        if action == "star" and "star" not in existing:
            self._check_watch_time(video, watched_seconds)

        record = self.rate_limits.check_action(
            user_id,
            "video",
            video_id,
            action,
            video_cooldown_ms(action),
            VIDEO_VERBS[action],
        )

        active = self._apply_toggle(
            video,
            existing,
            action,
            lambda reaction_type: VideoReaction(
                video_id=video_id, user_id=user_id, reaction_type=reaction_type
            ),
        )
        self.rate_limits.touch_action(record, user_id, "video", video_id, action)

        self.db.commit()
        self.db.refresh(video)

        performed, undone = ACTION_NAMES[action]
        logger.info(f"User {user_id} {performed if active else undone} video {video_id}")

        if action == "star":
            return {
                "success": True,
                "action": performed if active else undone,
                "starred": active,
                "star_count": video.star_count,
            }

        return {
            "success": True,
            "action": performed if active else undone,
            "liked" if action == "like" else "disliked": active,
            "like_count": video.like_count,
            "dislike_count": video.dislike_count,
        }

    @db_exception
    def toggle_comment_reaction(
        self, video_id: str, comment_id: str, user_id: str, action: str
    ) -> dict:
        """Toggle like or dislike on a comment for the user"""
        comment = (
            self.db.query(Comment)
            .filter(Comment.id == comment_id)
            .with_for_update()
            .first()
        )
        if not comment or comment.video_id != video_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Comment not found",
            )

        if not comment.visible:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Comment not available",
            )

        record = self.rate_limits.check_action(
            user_id,
            "comment",
            comment_id,
            action,
            comment_cooldown_ms(action),
            COMMENT_VERBS[action],
        )

        existing = {
            reaction.reaction_type: reaction
            for reaction in self.db.query(CommentReaction).filter(
                and_(
                    CommentReaction.comment_id == comment_id,
                    CommentReaction.user_id == user_id,
                )
            )
        }

        active = self._apply_toggle(
            comment,
            existing,
            action,
            lambda reaction_type: CommentReaction(
                comment_id=comment_id, user_id=user_id, reaction_type=reaction_type
            ),
        )
        self.rate_limits.touch_action(record, user_id, "comment", comment_id, action)

        self.db.commit()
        self.db.refresh(comment)

        performed, undone = ACTION_NAMES[action]
        return {
            "success": True,
            "action": performed if active else undone,
            "liked" if action == "like" else "disliked": active,
            "like_count": comment.like_count,
            "dislike_count": comment.dislike_count,
        }
