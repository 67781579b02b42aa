"""
Test the async HTTP client: error mapping, comment trees and a full round trip
"""

import asyncio
import json

import httpx
import pytest

from app.client.api import EngagementClient
from app.client.controller import EngagementController
from app.client.errors import (
    ForbiddenError,
    InsufficientWatchTimeError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    UnauthorizedError,
    ValidationFailedError,
    is_rate_limited,
)
from app.client.interaction_queue import InteractionQueue
from app.client.reducer import Phase
from app.core.security import jwt_manager
from main import app


def _client(handler, token="token"):
    transport = httpx.MockTransport(handler)
    return EngagementClient(
        token=token,
        client=httpx.AsyncClient(transport=transport, base_url="http://test"),
    )


def _responding(status_code, body):
    def handler(request):
        return httpx.Response(status_code, json=body)

    return handler


# ==================== Error mapping ====================


@pytest.mark.parametrize(
    "status_code, body, error_type, message",
    [
        (401, {"detail": "Unauthorized"}, UnauthorizedError, "Unauthorized"),
        (404, {"detail": "Video not found"}, NotFoundError, "Video not found"),
        (
            429,
            {
                "error": "Rate limit exceeded",
                "message": "Please wait 1 second before liking/unliking again",
                "remainingMs": 640,
            },
            RateLimitedError,
            "Please wait 1 second before liking/unliking again",
        ),
        (
            403,
            {"detail": "You can only edit your own comments"},
            ForbiddenError,
            "You can only edit your own comments",
        ),
        (400, {"detail": "Comment message is required"}, ValidationFailedError,
         "Comment message is required"),
        (500, {"error": "Database error occurred"}, ServerError, "Database error occurred"),
    ],
)
def test_errors_follow_status_code(status_code, body, error_type, message):
    client = _client(_responding(status_code, body))

    with pytest.raises(error_type) as excinfo:
        asyncio.run(client.like_video("v1"))

    assert excinfo.value.message == message
    assert excinfo.value.status_code == status_code


def test_rate_limited_error_carries_remaining_time():
    client = _client(
        _responding(429, {"error": "Rate limit exceeded", "message": "Wait", "remainingMs": 640})
    )

    with pytest.raises(RateLimitedError) as excinfo:
        asyncio.run(client.like_video("v1"))

    assert excinfo.value.remaining_ms == 640
    assert is_rate_limited(excinfo.value)


def test_insufficient_watch_time_error():
    client = _client(
        _responding(
            403,
            {
                "error": "Insufficient watch time",
                "message": "You must watch at least 20% of the video (20 seconds) to star it",
                "requiredSeconds": 20,
                "watchedSeconds": 4,
            },
        )
    )

    with pytest.raises(InsufficientWatchTimeError) as excinfo:
        asyncio.run(client.star_video("v1", 4))

    assert excinfo.value.required_seconds == 20
    assert excinfo.value.watched_seconds == 4


def test_non_json_error_uses_default_message():
    def handler(request):
        return httpx.Response(502, text="Bad gateway")

    with pytest.raises(ServerError) as excinfo:
        asyncio.run(_client(handler).dislike_video("v1"))

    assert excinfo.value.message == "Failed to dislike video"


def test_transport_failure_is_server_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ServerError):
        asyncio.run(_client(handler).like_video("v1"))


# ==================== Requests ====================


def test_star_sends_watched_seconds_and_token():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200, json={"success": True, "action": "starred", "starred": True, "star_count": 1}
        )

    result = asyncio.run(_client(handler, token="abc").star_video("v1", 31))

    assert result["starred"] is True
    assert seen == {
        "path": "/api/videos/v1/star",
        "auth": "Bearer abc",
        "body": {"watchedSeconds": 31},
    }


def test_perform_routes_comment_actions():
    paths = []

    def handler(request):
        paths.append(request.url.path)
        return httpx.Response(200, json={"success": True})

    client = _client(handler)
    asyncio.run(client.perform("comment-dislike", "c9", video_id="v1"))

    assert paths == ["/api/videos/v1/comments/c9/dislike"]


def test_fetch_comments_builds_tree():
    page = {
        "success": True,
        "comments": [
            {"id": "1", "parent_comment_id": None, "message": "Top"},
            {"id": "2", "parent_comment_id": "1", "message": "Reply"},
            {"id": "3", "parent_comment_id": "99", "message": "Orphan"},
        ],
        "pagination": {"page": 1, "pageSize": 20, "total": 3, "totalPages": 1},
        "userEngagement": {"likedComments": [], "dislikedComments": []},
    }
    seen = {}

    def handler(request):
        seen["params"] = dict(request.url.params)
        return httpx.Response(200, json=page)

    body = asyncio.run(_client(handler).fetch_comments("v1", sort="popular", page=2))

    assert seen["params"] == {"sort": "popular", "page": "2", "pageSize": "20"}
    assert [node["id"] for node in body["tree"]] == ["1", "3"]
    assert body["tree"][0]["children"][0]["id"] == "2"


# ==================== Round trip against the app ====================


def test_controller_against_running_app(video):
    token = jwt_manager.create_access_token("user-dana", username="dana")

    async def scenario():
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
            api = EngagementClient(token=token, client=http)
            queue = InteractionQueue(retry_delay=0.01, star_retry_delay=0.01)
            controller = EngagementController(api, queue)

            like_phase = await controller.toggle("like", video.id)
            star_phase = await controller.toggle("star", video.id, watched_seconds=5)
            return like_phase, star_phase, controller.store.state(video.id)

    like_phase, star_phase, state = asyncio.run(scenario())

    assert like_phase == Phase.RECONCILED
    assert state.liked is True
    assert state.like_count == 1
    assert star_phase == Phase.ROLLED_BACK
    assert state.starred is False
    assert state.star_count == 0
