"""
Test pruning of the cooldown ledger, the health endpoint and request ids
"""

from datetime import timedelta

from click.testing import CliRunner

from app.core.config import Settings
from app.core.schedular import cleanup_expired_rate_limits
from app.models import EngagementRateLimit, User, ViewRateLimit
from app.services.rate_limit import RateLimitService
from app.utils.clock import get_utc_now
from main import cli


def _seed(db, video, age):
    stamp = get_utc_now() - age
    db.add(User(id="user-erin"))
    db.add(
        EngagementRateLimit(
            user_id="user-erin",
            target_type="video",
            target_id=video.id,
            action_type="like",
            last_action_at=stamp,
        )
    )
    db.add(ViewRateLimit(ip_address="10.0.0.9", video_id=video.id, last_view_at=stamp))
    db.commit()


def test_cleanup_removes_old_records(db, video):
    _seed(db, video, timedelta(hours=30))

    deleted = RateLimitService(db).cleanup_expired(timedelta(hours=24))

    assert deleted == 2
    assert db.query(EngagementRateLimit).count() == 0
    assert db.query(ViewRateLimit).count() == 0


def test_cleanup_keeps_recent_records(db, video):
    _seed(db, video, timedelta(minutes=5))

    deleted = RateLimitService(db).cleanup_expired(timedelta(hours=24))

    assert deleted == 0
    assert db.query(EngagementRateLimit).count() == 1


def test_scheduled_job_uses_retention_setting(db, video):
    _seed(db, video, timedelta(days=3))

    cleanup_expired_rate_limits()

    db.expire_all()
    assert db.query(ViewRateLimit).count() == 0


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["database"] == "healthy"


def test_request_id_is_echoed(client):
    response = client.get("/", headers={"X-Request-ID": "trace-42"})
    assert response.headers["X-Request-ID"] == "trace-42"


def test_request_id_is_generated(client):
    first = client.get("/").headers["X-Request-ID"]
    second = client.get("/").headers["X-Request-ID"]

    assert len(first) == 32
    assert first != second


def test_info_command_reports_settings():
    result = CliRunner().invoke(cli, ["info"])

    assert result.exit_code == 0
    assert "Star Watch Ratio: 20%" in result.output
    assert "frontend_url" not in Settings.model_fields
