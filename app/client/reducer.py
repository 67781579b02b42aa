# app/client/reducer.py
"""
Optimistic reaction state.

A viewer's reaction state for one target is an immutable ``ReactionState``.
Each ``(action, target)`` pair runs its own ``ActionMachine`` through the
phases below; the transitions are pure functions so they can be tested
without any networking:

    idle ──speculate──> speculative ──reconcile──> reconciled
                             │
                             └──rollback──> rolled_back

``speculate`` may run again from any phase. Leaving a settled phase takes a
snapshot of the state; speculating again while already speculative keeps the
first snapshot, so a rollback always lands on the last confirmed state.
"""
import enum
from dataclasses import dataclass, replace
from typing import Dict, Optional, Tuple


class Phase(str, enum.Enum):
    IDLE = "idle"
    SPECULATIVE = "speculative"
    RECONCILED = "reconciled"
    ROLLED_BACK = "rolled_back"


# Comment actions touch the same fields as their video counterparts
BASE_ACTIONS = {
    "like": "like",
    "dislike": "dislike",
    "star": "star",
    "comment-like": "like",
    "comment-dislike": "dislike",
}

FLAGS = {"like": "liked", "dislike": "disliked", "star": "starred"}
COUNTS = {"like": "like_count", "dislike": "dislike_count", "star": "star_count"}
EXCLUSIVE = {"like": "dislike", "dislike": "like"}

TOUCHED_FIELDS = {
    "like": ("liked", "disliked", "like_count", "dislike_count"),
    "dislike": ("liked", "disliked", "like_count", "dislike_count"),
    "star": ("starred", "star_count"),
}


@dataclass(frozen=True)
class ReactionState:
    liked: bool = False
    disliked: bool = False
    starred: bool = False
    like_count: int = 0
    dislike_count: int = 0
    star_count: int = 0

    @classmethod
    def from_payload(cls, payload: dict) -> "ReactionState":
        known = {name: payload[name] for name in cls.__dataclass_fields__ if name in payload}
        return cls(**known)


@dataclass(frozen=True)
class ActionMachine:
    phase: Phase = Phase.IDLE
    snapshot: Optional[ReactionState] = None


def base_action(action: str) -> str:
    try:
        return BASE_ACTIONS[action]
    except KeyError:
        raise ValueError(f"Unknown engagement action: {action}")


def toggled(state: ReactionState, action: str) -> ReactionState:
    """The state after flipping `action`, with the exclusive counterpart cleared"""
    action = base_action(action)
    flag, count = FLAGS[action], COUNTS[action]
    active = not getattr(state, flag)
    changes = {
        flag: active,
        count: max(0, getattr(state, count) + (1 if active else -1)),
    }

    opposite = EXCLUSIVE.get(action)
    if active and opposite and getattr(state, FLAGS[opposite]):
        changes[FLAGS[opposite]] = False
        changes[COUNTS[opposite]] = max(0, getattr(state, COUNTS[opposite]) - 1)

    return replace(state, **changes)


def speculate(
    state: ReactionState, machine: ActionMachine, action: str
) -> Tuple[ReactionState, ActionMachine]:
    snapshot = machine.snapshot
    if machine.phase != Phase.SPECULATIVE or snapshot is None:
        snapshot = state
    return toggled(state, action), ActionMachine(Phase.SPECULATIVE, snapshot)


def reconcile(
    state: ReactionState, machine: ActionMachine, action: str, payload: dict
) -> Tuple[ReactionState, ActionMachine]:
    """Overwrite the touched fields the server sent back"""
    fields = TOUCHED_FIELDS[base_action(action)]
    changes = {name: payload[name] for name in fields if name in payload}

    # Servers that answer with a bare `liked`/`disliked` leave the
    # counterpart implied
    if changes.get("liked") and "disliked" not in payload:
        changes["disliked"] = False
    if changes.get("disliked") and "liked" not in payload:
        changes["liked"] = False

    return replace(state, **changes), ActionMachine(Phase.RECONCILED, None)


def rollback(
    state: ReactionState, machine: ActionMachine, action: str
) -> Tuple[ReactionState, ActionMachine]:
    """Restore the touched fields from the snapshot taken at speculation"""
    if machine.snapshot is None:
        return state, ActionMachine(Phase.ROLLED_BACK, None)

    fields = TOUCHED_FIELDS[base_action(action)]
    restored = {name: getattr(machine.snapshot, name) for name in fields}
    return replace(state, **restored), ActionMachine(Phase.ROLLED_BACK, None)


class EngagementStore:
    """Current reaction state per target and action machine per (action, target)"""

    def __init__(self):
        self._states: Dict[str, ReactionState] = {}
        self._machines: Dict[Tuple[str, str], ActionMachine] = {}

    def state(self, target_id: str) -> ReactionState:
        return self._states.get(target_id, ReactionState())

    def set_state(self, target_id: str, state: ReactionState):
        self._states[target_id] = state

    def load(self, target_id: str, payload: dict) -> ReactionState:
        state = ReactionState.from_payload(payload)
        self._states[target_id] = state
        return state

    def machine(self, action: str, target_id: str) -> ActionMachine:
        return self._machines.get((action, target_id), ActionMachine())

    def set_machine(self, action: str, target_id: str, machine: ActionMachine):
        self._machines[(action, target_id)] = machine
