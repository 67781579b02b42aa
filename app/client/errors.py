# app/client/errors.py
from typing import Optional


class EngagementRequestError(Exception):
    """A failed call to the engagement API, carrying the server's message."""

    def __init__(self, message: str, status_code: Optional[int] = None, body=None):
        self.message = message
        self.status_code = status_code
        self.body = body or {}
        super().__init__(message)


class UnauthorizedError(EngagementRequestError):
    pass


class ForbiddenError(EngagementRequestError):
    pass


class InsufficientWatchTimeError(ForbiddenError):
    def __init__(self, message: str, status_code: Optional[int] = 403, body=None):
        super().__init__(message, status_code, body)
        self.required_seconds = self.body.get("requiredSeconds")
        self.watched_seconds = self.body.get("watchedSeconds")


class NotFoundError(EngagementRequestError):
    pass


class RateLimitedError(EngagementRequestError):
    def __init__(self, message: str, status_code: Optional[int] = 429, body=None):
        super().__init__(message, status_code, body)
        self.remaining_ms = self.body.get("remainingMs")


class ValidationFailedError(EngagementRequestError):
    pass


class ServerError(EngagementRequestError):
    pass


def error_for_response(status_code: int, body: dict, default: str) -> EngagementRequestError:
    """Map an HTTP error response onto the client exception hierarchy"""
    if not isinstance(body, dict):
        body = {}
    message = body.get("message") or body.get("detail") or body.get("error") or default
    if not isinstance(message, str):
        message = default

    if status_code == 401:
        return UnauthorizedError(message, status_code, body)
    if status_code == 403:
        if body.get("error") == "Insufficient watch time":
            return InsufficientWatchTimeError(message, status_code, body)
        return ForbiddenError(message, status_code, body)
    if status_code == 404:
        return NotFoundError(message, status_code, body)
    if status_code == 429:
        return RateLimitedError(message, status_code, body)
    if status_code in (400, 422):
        return ValidationFailedError(message, status_code, body)
    return ServerError(message, status_code, body)


def is_rate_limited(error: BaseException) -> bool:
    if isinstance(error, RateLimitedError):
        return True
    return getattr(error, "status_code", None) == 429
