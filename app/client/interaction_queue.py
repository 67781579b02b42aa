# app/client/interaction_queue.py
import asyncio
import inspect
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional, Set

from app.client.errors import is_rate_limited
from app.core.config import settings

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "Failed to complete action"


@dataclass(eq=False)
class PendingRetry:
    key: str
    action_type: str
    target_id: str
    retry_fn: Callable[[], Awaitable[Any]]
    on_error: Callable[[str], Any]
    on_success: Optional[Callable[[Any], Any]] = None
    delay: float = 0.0
    scheduled_at: float = field(default_factory=time.time)
    attempts: int = 0
    handle: Optional[asyncio.TimerHandle] = None


def error_message(error: BaseException) -> str:
    message = getattr(error, "message", None) or str(error)
    return message or DEFAULT_ERROR_MESSAGE


class InteractionQueue:
    """
    De-duplicates engagement requests and retries rate-limited ones.

    Requests are keyed by ``"{action_type}:{target_id}"``. At most one request
    per key is tracked as in flight and at most one retry per key is pending;
    queueing a new retry for a key replaces the old timer. A retry that is
    still rate limited is rescheduled with the same delay until it succeeds,
    fails for another reason, or hits ``max_attempts`` when one is set.

    Failures are reported through the ``on_error`` callback only; nothing is
    raised to the caller.
    """

    def __init__(
        self,
        retry_delay: Optional[float] = None,
        star_retry_delay: Optional[float] = None,
        max_attempts: Optional[int] = None,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ):
        if retry_delay is None:
            retry_delay = settings.retry_delay_ms / 1000
        if star_retry_delay is None:
            star_retry_delay = settings.star_retry_delay_ms / 1000
        if max_attempts is None:
            max_attempts = settings.retry_max_attempts

        self.retry_delay = retry_delay
        self.star_retry_delay = star_retry_delay
        self.max_attempts = max_attempts
        self._loop = loop

        self._in_flight: Dict[str, asyncio.Future] = {}
        self._pending: Dict[str, PendingRetry] = {}
        self._running: Set[asyncio.Task] = set()

    @staticmethod
    def make_key(action_type: str, target_id: str) -> str:
        return f"{action_type}:{target_id}"

    def delay_for(self, action_type: str) -> float:
        return self.star_retry_delay if action_type == "star" else self.retry_delay

    def _get_loop(self) -> asyncio.AbstractEventLoop:
        return self._loop or asyncio.get_running_loop()

    # ==================== In-flight tracking ====================

    def is_request_in_flight(self, action_type: str, target_id: str) -> bool:
        return self.make_key(action_type, target_id) in self._in_flight

    def register_in_flight(
        self, action_type: str, target_id: str, awaitable: Awaitable[Any]
    ) -> asyncio.Future:
        """Track `awaitable` until it settles; returns the tracked future"""
        key = self.make_key(action_type, target_id)
        future = asyncio.ensure_future(awaitable)
        self._in_flight[key] = future

        def _settled(done: asyncio.Future):
            # A newer request may have taken the key in the meantime
            if self._in_flight.get(key) is done:
                del self._in_flight[key]

        future.add_done_callback(_settled)
        return future

    # ==================== Retries ====================

    def has_pending_retry(self, action_type: str, target_id: str) -> bool:
        return self.make_key(action_type, target_id) in self._pending

    def queue_for_retry(
        self,
        action_type: str,
        target_id: str,
        retry_fn: Callable[[], Awaitable[Any]],
        on_error: Callable[[str], Any],
        on_success: Optional[Callable[[Any], Any]] = None,
    ) -> PendingRetry:
        key = self.make_key(action_type, target_id)

        previous = self._pending.pop(key, None)
        if previous and previous.handle:
            previous.handle.cancel()

        entry = PendingRetry(
            key=key,
            action_type=action_type,
            target_id=target_id,
            retry_fn=retry_fn,
            on_error=on_error,
            on_success=on_success,
            delay=self.delay_for(action_type),
        )
        self._pending[key] = entry
        self._schedule(entry)

        logger.debug(f"Queued retry for {key} in {entry.delay:.1f}s")
        return entry

    def _schedule(self, entry: PendingRetry):
        entry.scheduled_at = time.time()
        entry.handle = self._get_loop().call_later(entry.delay, self._fire, entry)

    def _fire(self, entry: PendingRetry):
        if self._pending.get(entry.key) is not entry:
            return

        # Never put a second request for the key on the wire
        if entry.key in self._in_flight:
            logger.debug(f"{entry.key} still in flight, delaying retry")
            self._schedule(entry)
            return

        entry.handle = None
        task = self._get_loop().create_task(self._retry(entry))
        self._running.add(task)
        task.add_done_callback(self._running.discard)

    async def _retry(self, entry: PendingRetry):
        entry.attempts += 1
        try:
            future = self.register_in_flight(
                entry.action_type, entry.target_id, entry.retry_fn()
            )
            result = await future
        except Exception as e:
            if self._pending.get(entry.key) is not entry:
                return

            if not is_rate_limited(e):
                del self._pending[entry.key]
                logger.warning(f"Retry for {entry.key} failed: {error_message(e)}")
                await self._notify(entry.on_error, error_message(e))
                return

            if self.max_attempts is not None and entry.attempts >= self.max_attempts:
                del self._pending[entry.key]
                logger.warning(
                    f"Giving up on {entry.key} after {entry.attempts} rate-limited attempts"
                )
                await self._notify(entry.on_error, error_message(e))
                return

            logger.info(f"{entry.key} still rate limited, retrying in {entry.delay:.1f}s")
            self._schedule(entry)
            return

        # Cancelled or superseded while the request was running
        if self._pending.get(entry.key) is not entry:
            return

        del self._pending[entry.key]
        logger.debug(f"Retry for {entry.key} succeeded after {entry.attempts} attempt(s)")
        await self._notify(entry.on_success, result)

    async def _notify(self, callback: Optional[Callable[[Any], Any]], value: Any):
        if callback is None:
            return
        try:
            outcome = callback(value)
            if inspect.isawaitable(outcome):
                await outcome
        except Exception:
            logger.error("Interaction queue callback failed", exc_info=True)

    def cancel(self, action_type: str, target_id: str) -> bool:
        """Drop a pending retry without invoking its callbacks"""
        entry = self._pending.pop(self.make_key(action_type, target_id), None)
        if entry is None:
            return False
        if entry.handle:
            entry.handle.cancel()
        return True

    def clear_all(self):
        """Cancel every pending retry; requests already running are left alone"""
        for entry in self._pending.values():
            if entry.handle:
                entry.handle.cancel()
        self._pending.clear()
        self._in_flight.clear()

    async def join(self):
        """Wait until no retry is pending or running"""
        while self._pending or self._running:
            if self._running:
                await asyncio.gather(*list(self._running), return_exceptions=True)
            else:
                await asyncio.sleep(min(self.retry_delay, self.star_retry_delay))
