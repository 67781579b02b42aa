# app/models/rate_limit.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint

from app.core.database import Base


class EngagementRateLimit(Base):
    """Last time a user performed an action on a target (cooldown ledger)"""

    __tablename__ = "engagement_rate_limits"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(String(64), ForeignKey("users.id"), nullable=False, index=True)
    target_type = Column(String(20), nullable=False)  # 'video' or 'comment'
    target_id = Column(String(36), nullable=False)
    action_type = Column(String(20), nullable=False)  # 'like', 'dislike', ...

    last_action_at = Column(DateTime(timezone=True), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint(
            "user_id",
            "target_type",
            "target_id",
            "action_type",
            name="unique_engagement_rate_limit",
        ),
    )

    def __repr__(self):
        return f"<EngagementRateLimit(user_id={self.user_id}, {self.target_type}={self.target_id}, action='{self.action_type}')>"


class ViewRateLimit(Base):
    """Last counted view per client IP and video"""

    __tablename__ = "view_rate_limits"

    id = Column(Integer, primary_key=True, index=True)

    ip_address = Column(String(64), nullable=False)
    video_id = Column(String(36), ForeignKey("videos.id"), nullable=False, index=True)

    last_view_at = Column(DateTime(timezone=True), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("ip_address", "video_id", name="unique_view_rate_limit"),
    )

    def __repr__(self):
        return f"<ViewRateLimit(ip_address={self.ip_address}, video_id={self.video_id})>"
