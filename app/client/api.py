# app/client/api.py
import logging
from typing import Optional

import httpx

from app.client.comment_tree import build_comment_tree
from app.client.errors import EngagementRequestError, ServerError, error_for_response
from app.core.config import settings

logger = logging.getLogger(__name__)

COMMENT_ACTIONS = ("comment-like", "comment-dislike")


class EngagementClient:
    """
    Async client for the video engagement endpoints.

    Every non-2xx response is raised as a subclass of
    `EngagementRequestError` chosen from the status code, with the server's
    `message` (or `detail`/`error`) as the exception message.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        token: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        timeout: Optional[float] = None,
    ):
        self.token = token
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(
            base_url=base_url or settings.app_url, timeout=timeout
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.aclose()

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()

    def _headers(self) -> dict:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
        default: str = "Failed to complete action",
    ) -> dict:
        try:
            response = await self.client.request(
                method, path, json=json, params=params, headers=self._headers()
            )
        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise ServerError(default) from e

        try:
            body = response.json()
        except ValueError:
            body = {}

        if response.is_error:
            raise error_for_response(response.status_code, body, default)

        return body

    # ==================== Reactions ====================

    async def like_video(self, video_id: str) -> dict:
        return await self._request(
            "POST", f"/api/videos/{video_id}/like", default="Failed to like video"
        )

    async def dislike_video(self, video_id: str) -> dict:
        return await self._request(
            "POST",
            f"/api/videos/{video_id}/dislike",
            default="Failed to dislike video",
        )

    async def star_video(self, video_id: str, watched_seconds: float = 0) -> dict:
        return await self._request(
            "POST",
            f"/api/videos/{video_id}/star",
            json={"watchedSeconds": watched_seconds},
            default="Failed to star video",
        )

    async def like_comment(self, video_id: str, comment_id: str) -> dict:
        return await self._request(
            "POST",
            f"/api/videos/{video_id}/comments/{comment_id}/like",
            default="Failed to like comment",
        )

    async def dislike_comment(self, video_id: str, comment_id: str) -> dict:
        return await self._request(
            "POST",
            f"/api/videos/{video_id}/comments/{comment_id}/dislike",
            default="Failed to dislike comment",
        )

    async def perform(
        self,
        action: str,
        target_id: str,
        video_id: Optional[str] = None,
        watched_seconds: Optional[float] = None,
    ) -> dict:
        """Send one engagement action; comment actions need the owning video id"""
        if action == "like":
            return await self.like_video(target_id)
        if action == "dislike":
            return await self.dislike_video(target_id)
        if action == "star":
            return await self.star_video(target_id, watched_seconds or 0)
        if action in COMMENT_ACTIONS:
            if not video_id:
                raise EngagementRequestError("Comment actions need a video id")
            if action == "comment-like":
                return await self.like_comment(video_id, target_id)
            return await self.dislike_comment(video_id, target_id)
        raise ValueError(f"Unknown engagement action: {action}")

    # ==================== Comments ====================

    async def fetch_comments(
        self,
        video_id: str,
        sort: str = "newest",
        page: int = 1,
        page_size: int = 20,
        search: Optional[str] = None,
    ) -> dict:
        """Fetch one page of comments and attach the nested `tree`"""
        params = {"sort": sort, "page": page, "pageSize": page_size}
        if search:
            params["search"] = search

        body = await self._request(
            "GET",
            f"/api/videos/{video_id}/comments",
            params=params,
            default="Failed to load comments",
        )
        body["tree"] = build_comment_tree(body.get("comments", []))
        return body

    async def post_comment(self, video_id: str, message: str) -> dict:
        body = await self._request(
            "POST",
            f"/api/videos/{video_id}/comment",
            json={"message": message},
            default="Failed to post comment",
        )
        return body["comment"]

    async def post_reply(self, video_id: str, comment_id: str, message: str) -> dict:
        body = await self._request(
            "POST",
            f"/api/videos/{video_id}/comments/{comment_id}/reply",
            json={"message": message},
            default="Failed to post reply",
        )
        return body["reply"]

    # ==================== Views / Metadata ====================

    async def record_view(self, video_id: str) -> int:
        body = await self._request(
            "POST", f"/api/videos/{video_id}/view", default="Failed to record view"
        )
        return body["view_count"]

    async def report_duration(self, video_id: str, duration: float) -> None:
        await self._request(
            "PATCH",
            f"/api/videos/{video_id}/metadata",
            json={"duration": duration},
            default="Failed to update metadata",
        )
