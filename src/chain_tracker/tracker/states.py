"""Poll loop lifecycle."""

from __future__ import annotations

from enum import Enum, auto


class PollState(Enum):
    """
    Lifecycle of a session's poll loop.

    ::

        ACTIVE --> CLOSED

    A session opens ACTIVE and is closed exactly once. There is no way back:
    a closed session is discarded, and a new one is opened instead.
    """

    ACTIVE = auto()
    """Cycles run every poll period."""

    CLOSED = auto()
    """Terminal. No cycle starts and no snapshot is published."""

    def can_transition_to(self, target: PollState) -> bool:
        """Whether moving from this state to `target` is allowed."""
        return target in _NEXT_STATES[self]

    @property
    def is_active(self) -> bool:
        """Whether cycles should still run."""
        return self is PollState.ACTIVE


_NEXT_STATES: dict[PollState, frozenset[PollState]] = {
    PollState.ACTIVE: frozenset({PollState.CLOSED}),
    PollState.CLOSED: frozenset(),
}
"""Allowed successors of each state."""
