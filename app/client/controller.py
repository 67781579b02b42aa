# app/client/controller.py
import logging
from typing import Callable, Optional, Set, Tuple

from app.client.errors import UnauthorizedError, is_rate_limited
from app.client.interaction_queue import InteractionQueue, error_message
from app.client.notifier import LoggingNotifier, Notifier
from app.client.reducer import EngagementStore, Phase, reconcile, rollback, speculate

logger = logging.getLogger(__name__)


class EngagementController:
    """
    Optimistic toggles for video and comment reactions.

    The local state flips as soon as the user acts. A successful response
    overwrites it with the server's values; a rate-limited one is handed to
    the interaction queue and stays speculative until the retry settles; any
    other failure rolls the touched fields back to the last confirmed state
    and raises a toast through the notifier.
    """

    def __init__(
        self,
        api,
        queue: InteractionQueue,
        store: Optional[EngagementStore] = None,
        notifier: Optional[Notifier] = None,
        is_authenticated: Callable[[], bool] = lambda: True,
        on_animate: Optional[Callable[[str, str], None]] = None,
    ):
        self.api = api
        self.queue = queue
        self.store = store or EngagementStore()
        self.notifier = notifier or LoggingNotifier()
        self.is_authenticated = is_authenticated
        self.on_animate = on_animate
        self.loading: Set[Tuple[str, str]] = set()

    def is_loading(self, action: str, target_id: str) -> bool:
        return (action, target_id) in self.loading

    def phase(self, action: str, target_id: str) -> Phase:
        return self.store.machine(action, target_id).phase

    async def toggle(
        self,
        action: str,
        target_id: str,
        video_id: Optional[str] = None,
        watched_seconds: Optional[float] = None,
    ) -> Phase:
        if not self.is_authenticated():
            self.notifier.prompt_sign_in()
            return self.phase(action, target_id)

        # A queued retry will send this toggle itself once its timer fires
        if self.queue.is_request_in_flight(
            action, target_id
        ) or self.queue.has_pending_retry(action, target_id):
            logger.debug(f"{action}:{target_id} already in flight, ignoring")
            return self.phase(action, target_id)

        key = (action, target_id)
        self.loading.add(key)
        try:
            state, machine = speculate(
                self.store.state(target_id), self.store.machine(action, target_id), action
            )
            self.store.set_state(target_id, state)
            self.store.set_machine(action, target_id, machine)

            if self.on_animate:
                self.on_animate(action, target_id)

            failures = []

            async def call():
                try:
                    return await self.api.perform(
                        action, target_id, video_id=video_id, watched_seconds=watched_seconds
                    )
                except Exception as e:
                    failures.append(e)
                    raise

            try:
                payload = await self.queue.register_in_flight(action, target_id, call())
            except Exception as e:
                if is_rate_limited(e):
                    logger.info(f"{action}:{target_id} rate limited, queued for retry")
                    self.queue.queue_for_retry(
                        action,
                        target_id,
                        call,
                        on_error=lambda message: self._roll_back(
                            action, target_id, message, error=failures[-1] if failures else None
                        ),
                        on_success=lambda result: self._reconcile(action, target_id, result),
                    )
                    return Phase.SPECULATIVE

                self._roll_back(action, target_id, error_message(e), error=e)
                return Phase.ROLLED_BACK

            # An older queued retry would toggle the server a second time
            self.queue.cancel(action, target_id)
            self._reconcile(action, target_id, payload)
            return Phase.RECONCILED
        finally:
            self.loading.discard(key)

    def _reconcile(self, action: str, target_id: str, payload: dict):
        state, machine = reconcile(
            self.store.state(target_id),
            self.store.machine(action, target_id),
            action,
            payload or {},
        )
        self.store.set_state(target_id, state)
        self.store.set_machine(action, target_id, machine)

    def _roll_back(
        self,
        action: str,
        target_id: str,
        message: str,
        error: Optional[BaseException] = None,
    ):
        state, machine = rollback(
            self.store.state(target_id), self.store.machine(action, target_id), action
        )
        self.store.set_state(target_id, state)
        self.store.set_machine(action, target_id, machine)
        logger.info(f"Rolled back {action}:{target_id}: {message}")

        if isinstance(error, UnauthorizedError):
            self.notifier.prompt_sign_in()
        else:
            self.notifier.error(message)
