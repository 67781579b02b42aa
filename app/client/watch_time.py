# app/client/watch_time.py
import logging
import math
from typing import Callable, List, Set

from app.core.config import settings

logger = logging.getLogger(__name__)


def can_star(
    watched_seconds: float,
    duration: float,
    starred: bool,
    ratio: float = None,
) -> bool:
    """A star can be removed at any time; adding one needs enough watch time"""
    if starred:
        return True
    if not duration or duration <= 0:
        return False
    if ratio is None:
        ratio = settings.star_watch_ratio
    return watched_seconds >= duration * ratio


class WatchProgress:
    """
    Distinct whole seconds of a video the viewer has played.

    Seeking back over already-seen seconds does not add to the total, so
    scrubbing cannot inflate watch time.
    """

    def __init__(self):
        self._seconds: Set[int] = set()
        self._listeners: List[Callable[[int], None]] = []

    @property
    def watched_seconds(self) -> int:
        return len(self._seconds)

    def subscribe(self, listener: Callable[[int], None]) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def record(self, position: float) -> int:
        # Players report NaN before metadata has loaded
        if position is None or not math.isfinite(position):
            return self.watched_seconds

        second = math.floor(position)
        if second < 0 or second in self._seconds:
            return self.watched_seconds

        self._seconds.add(second)
        total = self.watched_seconds
        for listener in list(self._listeners):
            listener(total)
        return total

    def reset(self):
        self._seconds.clear()
