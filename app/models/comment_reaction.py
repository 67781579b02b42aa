# app/models/comment_reaction.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from app.core.database import Base


class CommentReaction(Base):
    __tablename__ = "comment_reactions"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    comment_id = Column(
        String(36), ForeignKey("comments.id"), nullable=False, index=True
    )
    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)

    # Reaction Type: 'like' or 'dislike', never both
    reaction_type = Column(String(20), nullable=False)

    # Timestamp
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            "comment_id", "user_id", "reaction_type", name="unique_comment_reaction"
        ),
    )

    def __repr__(self):
        return f"<CommentReaction(comment_id={self.comment_id}, user_id={self.user_id}, type='{self.reaction_type}')>"
