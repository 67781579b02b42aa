from datetime import datetime, timezone


def make_aware(dt: datetime) -> datetime:
    """Ensure datetime is timezone-aware (UTC)"""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def get_utc_now() -> datetime:
    """Get current UTC time as timezone-aware datetime"""
    return datetime.now(timezone.utc)


def elapsed_ms(since: datetime, now: datetime) -> float:
    """Milliseconds between two timestamps, tolerating naive values"""
    return (make_aware(now) - make_aware(since)).total_seconds() * 1000
