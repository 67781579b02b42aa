"""
Models package initialization
Import all models and setup relationships
"""

from .comment import Comment
from .comment_reaction import CommentReaction
from .rate_limit import EngagementRateLimit, ViewRateLimit

# Import and setup relationships
from .relations import setup_relationships
from .user import User
from .video import Video
from .video_reaction import VideoReaction

# Setup all relationships after models are imported
setup_relationships()

# Make models available at package level
__all__ = [
    "Comment",
    "CommentReaction",
    "EngagementRateLimit",
    "User",
    "Video",
    "VideoReaction",
    "ViewRateLimit",
]
