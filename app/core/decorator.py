import math
from functools import wraps

from sqlalchemy.exc import IntegrityError, SQLAlchemyError


class DBException(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class CooldownException(Exception):
    """Raised when a user repeats an action before its cooldown has elapsed."""

    def __init__(self, remaining_ms: int, verb: str, unit: str = "second"):
        self.remaining_ms = remaining_ms
        if unit == "minute":
            amount = math.ceil(remaining_ms / 60000)
        else:
            amount = math.ceil(remaining_ms / 1000)
        plural = "" if amount == 1 else "s"
        self.message = f"Please wait {amount} {unit}{plural} before {verb} again"
        super().__init__(self.message)


class WatchTimeException(Exception):
    """Raised when a star is requested before enough of the video was watched."""

    def __init__(self, required_seconds: int, watched_seconds: float, percent: int = 20):
        self.required_seconds = required_seconds
        self.watched_seconds = watched_seconds
        self.message = (
            f"You must watch at least {percent}% of the video "
            f"({required_seconds} seconds) to star it"
        )
        super().__init__(self.message)


def db_exception(func):
    @wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except IntegrityError:
            # usually a duplicate reaction row from a concurrent request
            raise DBException("Duplicate entry: already exists", 409)
        except SQLAlchemyError:
            raise DBException("Database error occurred", 500)

    return wrapper
