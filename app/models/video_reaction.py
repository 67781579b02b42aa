# app/models/video_reaction.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from app.core.database import Base


class VideoReaction(Base):
    __tablename__ = "video_reactions"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    video_id = Column(String(36), ForeignKey("videos.id"), nullable=False, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)

    # Reaction Type: 'like', 'dislike' (mutually exclusive) or 'star'
    reaction_type = Column(String(20), nullable=False)

    # Timestamp
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "video_id", "user_id", "reaction_type", name="unique_video_reaction"
        ),
    )

    def __repr__(self):
        return f"<VideoReaction(video_id={self.video_id}, user_id={self.user_id}, type='{self.reaction_type}')>"
