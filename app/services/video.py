# app/services/video.py
import logging
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.decorator import db_exception
from app.models.video import Video
from app.services.rate_limit import RateLimitService

logger = logging.getLogger(__name__)


class VideoService:
    def __init__(self, db: Session):
        self.db = db
        self.rate_limits = RateLimitService(db)

    @db_exception
    def record_view(self, video_id: str, ip_address: Optional[str]) -> int:
        """Count a view, at most once per IP per cooldown window"""
        if not ip_address:
            logger.error("Unable to determine client IP")
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Unable to process request",
            )

        video = self.db.query(Video).filter(Video.id == video_id).first()
        if not video:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Video not found",
            )

        record = self.rate_limits.check_view(
            ip_address, video_id, settings.view_cooldown_ms
        )

        self.db.query(Video).filter(Video.id == video_id).update(
            {Video.view_count: Video.view_count + 1}, synchronize_session=False
        )
        self.rate_limits.touch_view(record, ip_address, video_id)

        self.db.commit()
        self.db.refresh(video)

        return video.view_count

    @db_exception
    def update_duration(self, video_id: str, duration: float) -> bool:
        """Store the player-reported duration once; later reports are ignored"""
        updated = (
            self.db.query(Video)
            .filter(and_(Video.id == video_id, Video.duration == 0))
            .update({Video.duration: duration}, synchronize_session=False)
        )
        self.db.commit()

        if updated:
            logger.info(f"Duration for video {video_id} set to {duration}s")

        return bool(updated)
