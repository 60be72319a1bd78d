"""
Scan gate: decides from a stream of per-frame readings when a card name is
stable and new enough to be worth an identification lookup.

The gate is a pure state machine. ``ScanGate.step`` takes the current
``GateState``, the name read from one frame (or ``None``) and the current
time, and returns the next state with the action the caller should take.
No clock is read here, so callers and tests inject ``now``.
"""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Tuple

from ..core.constants import DEDUP_WINDOW_S, MIN_ACCEPT_SCORE, STABILITY_WINDOW_S


class GatePhase(str, Enum):
    IDLE = "idle"
    SEEN = "seen"
    AWAITING_RESULT = "awaiting-result"


class ActionKind(str, Enum):
    NONE = "none"
    SHOW_FEEDBACK = "show-feedback"
    ISSUE_LOOKUP = "issue-lookup"


@dataclass(frozen=True)
class GateAction:
    kind: ActionKind
    # Feedback text, or the name to look up. None with SHOW_FEEDBACK clears it.
    name: Optional[str] = None


@dataclass(frozen=True)
class GateConfig:
    stability_window: float = STABILITY_WINDOW_S
    dedup_window: float = DEDUP_WINDOW_S
    min_accept_score: int = MIN_ACCEPT_SCORE


@dataclass(frozen=True)
class Tracked:
    text: str
    since: float


@dataclass(frozen=True)
class GateState:
    tracked: Optional[Tracked] = None
    in_flight: Optional[str] = None
    # (lowercased name, scanned_at) pairs, oldest first
    recent: Tuple[Tuple[str, float], ...] = ()

    @property
    def phase(self) -> GatePhase:
        if self.in_flight is not None:
            return GatePhase.AWAITING_RESULT
        if self.tracked is not None:
            return GatePhase.SEEN
        return GatePhase.IDLE

    def scanned_at(self, name: str) -> Optional[float]:
        key = name.lower()
        for recent_key, at in self.recent:
            if recent_key == key:
                return at
        return None

    def with_scan(self, name: str, at: float) -> "GateState":
        key = name.lower()
        recent = tuple(pair for pair in self.recent if pair[0] != key) + ((key, at),)
        return replace(self, recent=recent)

    def without_scan(self, name: str) -> "GateState":
        key = name.lower()
        return replace(self, recent=tuple(pair for pair in self.recent if pair[0] != key))


class ScanGate:
    """Stability and dedup policy over GateState values."""

    def __init__(self, config: Optional[GateConfig] = None):
        self.config = config or GateConfig()

    def _prune(self, state: GateState, now: float) -> GateState:
        window = self.config.dedup_window
        recent = tuple(pair for pair in state.recent if now - pair[1] < window)
        if len(recent) == len(state.recent):
            return state
        return replace(state, recent=recent)

    def step(
        self, state: GateState, name: Optional[str], now: float
    ) -> Tuple[GateState, GateAction]:
        """Advance the gate by one frame reading.

        Args:
            state: Current gate state
            name: Card name extracted from the frame, or None
            now: Current time in seconds

        Returns:
            Tuple of (next_state, action)
        """
        state = self._prune(state, now)

        if not name:
            return replace(state, tracked=None), GateAction(ActionKind.SHOW_FEEDBACK, None)

        feedback = GateAction(ActionKind.SHOW_FEEDBACK, name)

        if state.scanned_at(name) is not None:
            return state, feedback

        if state.tracked is None or state.tracked.text != name:
            return replace(state, tracked=Tracked(name, now)), feedback

        if now - state.tracked.since < self.config.stability_window:
            return state, feedback

        if state.in_flight is not None:
            # Stable but must wait; keep showing what is read
            return state, feedback

        # Tracking resets so the same card does not trigger twice
        next_state = replace(state.with_scan(name, now), tracked=None, in_flight=name)
        return next_state, GateAction(ActionKind.ISSUE_LOOKUP, name)

    def complete(self, state: GateState, name: str, accepted: bool) -> GateState:
        """Apply the outcome of the lookup issued for ``name``.

        A failed or low-confidence lookup evicts the dedup entry so the card
        can be retried on a later frame; an accepted one stays deduped for
        the full window.
        """
        next_state = replace(state, in_flight=None)
        if not accepted:
            next_state = next_state.without_scan(name)
        return next_state
