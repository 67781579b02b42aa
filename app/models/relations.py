# app/models/relations.py

from sqlalchemy.orm import relationship

# Import all relevant models
from .comment import Comment
from .comment_reaction import CommentReaction
from .user import User
from .video import Video
from .video_reaction import VideoReaction


def setup_relationships():
    """
    Configure all SQLAlchemy relationships between models.
    """

    # 1. User to Videos (One-to-Many)
    User.videos = relationship("Video", back_populates="owner")
    Video.owner = relationship("User", back_populates="videos")

    # 2. Video to Reactions (One-to-Many)
    Video.reactions = relationship(
        "VideoReaction",
        back_populates="video",
        cascade="all, delete-orphan",
    )
    VideoReaction.video = relationship("Video", back_populates="reactions")

    # 3. User to Video Reactions (One-to-Many)
    User.video_reactions = relationship(
        "VideoReaction",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    VideoReaction.user = relationship("User", back_populates="video_reactions")

    # 4. Video to Comments (One-to-Many)
    Video.comments = relationship(
        "Comment",
        back_populates="video",
        cascade="all, delete-orphan",
        order_by="Comment.created_at",
    )
    Comment.video = relationship("Video", back_populates="comments")

    # 5. User to Comments (One-to-Many)
    User.comments = relationship(
        "Comment",
        back_populates="author",
        cascade="all, delete-orphan",
    )
    Comment.author = relationship("User", back_populates="comments")

    # 6. Comment self-referential (for replies)
    Comment.parent = relationship(
        "Comment",
        remote_side=[Comment.id],
        backref="replies",
    )

    # 7. Comment to Reactions (One-to-Many)
    Comment.reactions = relationship(
        "CommentReaction",
        back_populates="comment",
        cascade="all, delete-orphan",
    )
    CommentReaction.comment = relationship("Comment", back_populates="reactions")

    # 8. User to Comment Reactions (One-to-Many)
    User.comment_reactions = relationship(
        "CommentReaction",
        back_populates="user",
        cascade="all, delete-orphan",
    )
    CommentReaction.user = relationship("User", back_populates="comment_reactions")
