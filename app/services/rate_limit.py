# app/services/rate_limit.py
import logging
from datetime import timedelta
from typing import Optional

from sqlalchemy import and_
from sqlalchemy.orm import Session

from app.core.decorator import CooldownException
from app.models.rate_limit import EngagementRateLimit, ViewRateLimit
from app.utils.clock import elapsed_ms, get_utc_now

logger = logging.getLogger(__name__)


class RateLimitService:
    """Cooldown ledger for per-user engagement actions and per-IP views.

    `check_*` raises `CooldownException` while the cooldown is running and
    otherwise returns the existing ledger row (or None); `touch_*` stamps the
    row with the current time inside the caller's transaction.
    """

    def __init__(self, db: Session):
        self.db = db

    def check_action(
        self,
        user_id: str,
        target_type: str,
        target_id: str,
        action_type: str,
        cooldown_ms: int,
        verb: str,
    ) -> Optional[EngagementRateLimit]:
        record = (
            self.db.query(EngagementRateLimit)
            .filter(
                and_(
                    EngagementRateLimit.user_id == user_id,
                    EngagementRateLimit.target_type == target_type,
                    EngagementRateLimit.target_id == target_id,
                    EngagementRateLimit.action_type == action_type,
                )
            )
            .first()
        )

        if record:
            since = elapsed_ms(record.last_action_at, get_utc_now())
            if since < cooldown_ms:
                remaining_ms = int(cooldown_ms - since)
                logger.info(
                    f"Cooldown hit: user={user_id} {target_type}={target_id} "
                    f"action={action_type} remaining={remaining_ms}ms"
                )
                raise CooldownException(remaining_ms, verb)

        return record

    def touch_action(
        self,
        record: Optional[EngagementRateLimit],
        user_id: str,
        target_type: str,
        target_id: str,
        action_type: str,
    ) -> EngagementRateLimit:
        now = get_utc_now()
        if record:
            record.last_action_at = now
            return record

        record = EngagementRateLimit(
            user_id=user_id,
            target_type=target_type,
            target_id=target_id,
            action_type=action_type,
            last_action_at=now,
        )
        self.db.add(record)
        return record

    def check_view(
        self, ip_address: str, video_id: str, cooldown_ms: int
    ) -> Optional[ViewRateLimit]:
        record = (
            self.db.query(ViewRateLimit)
            .filter(
                and_(
                    ViewRateLimit.ip_address == ip_address,
                    ViewRateLimit.video_id == video_id,
                )
            )
            .first()
        )

        if record:
            since = elapsed_ms(record.last_view_at, get_utc_now())
            if since < cooldown_ms:
                raise CooldownException(
                    int(cooldown_ms - since), "viewing", unit="minute"
                )

        return record

    def touch_view(
        self, record: Optional[ViewRateLimit], ip_address: str, video_id: str
    ) -> ViewRateLimit:
        now = get_utc_now()
        if record:
            record.last_view_at = now
            return record

        record = ViewRateLimit(ip_address=ip_address, video_id=video_id, last_view_at=now)
        self.db.add(record)
        return record

    def cleanup_expired(self, retention: timedelta) -> int:
        """Delete ledger rows older than the retention window"""
        cutoff = get_utc_now() - retention

        deleted = (
            self.db.query(EngagementRateLimit)
            .filter(EngagementRateLimit.last_action_at < cutoff)
            .delete(synchronize_session=False)
        )
        deleted += (
            self.db.query(ViewRateLimit)
            .filter(ViewRateLimit.last_view_at < cutoff)
            .delete(synchronize_session=False)
        )
        self.db.commit()

        return deleted
