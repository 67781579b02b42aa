"""
Client side of the engagement API: HTTP client, retry queue, optimistic
controller, comment tree and watch-time gate.
"""

from .api import EngagementClient
from .comment_tree import build_comment_tree
from .controller import EngagementController
from .interaction_queue import InteractionQueue
from .notifier import LoggingNotifier, Notifier
from .reducer import EngagementStore, Phase, ReactionState
from .watch_time import WatchProgress, can_star

__all__ = [
    "EngagementClient",
    "EngagementController",
    "EngagementStore",
    "InteractionQueue",
    "LoggingNotifier",
    "Notifier",
    "Phase",
    "ReactionState",
    "WatchProgress",
    "build_comment_tree",
    "can_star",
]
