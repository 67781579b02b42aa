# app/models/comment.py
import uuid

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from app.core.database import Base


class Comment(Base):
    __tablename__ = "comments"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    # Foreign Keys
    video_id = Column(String(36), ForeignKey("videos.id"), nullable=False, index=True)
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    parent_comment_id = Column(
        String(36), ForeignKey("comments.id"), nullable=True, index=True
    )  # For nested replies

    # Content
    message = Column(Text, nullable=False)

    # Comment Settings
    is_edited = Column(Boolean, default=False, nullable=False)
    visible = Column(Boolean, default=True, nullable=False)  # soft delete

    # Statistics
    like_count = Column(Integer, default=0, nullable=False)
    dislike_count = Column(Integer, default=0, nullable=False)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    def __repr__(self):
        return (
            f"<Comment(id={self.id}, video_id={self.video_id}, user_id={self.user_id})>"
        )
