"""Tests for the scan gate state machine."""

import random
from dataclasses import FrozenInstanceError

import pytest

from cardscan.scan.gate import ActionKind, GateAction, GateConfig, GatePhase, GateState, ScanGate, Tracked

BOLT = "Lightning Bolt"
SHOCK = "Shock"


@pytest.fixture
def gate():
    return ScanGate(GateConfig(stability_window=0.4, dedup_window=3.0))


def run(gate, frames, state=None):
    """Feed (name, now) frames; return final state and the actions taken."""
    state = state or GateState()
    actions = []
    for name, now in frames:
        state, action = gate.step(state, name, now)
        actions.append(action)
    return state, actions


class TestTransitions:
    """Test individual gate transitions."""

    def test_first_sighting_is_feedback_only(self, gate):
        state, action = gate.step(GateState(), BOLT, 0.0)

        assert action.kind is ActionKind.SHOW_FEEDBACK
        assert action.name == BOLT
        assert state.phase is GatePhase.SEEN
        assert state.tracked == Tracked(BOLT, 0.0)

    def test_unstable_reading_keeps_since(self, gate):
        state, actions = run(gate, [(BOLT, 0.0), (BOLT, 0.2), (BOLT, 0.39)])

        assert [a.kind for a in actions] == [ActionKind.SHOW_FEEDBACK] * 3
        assert state.tracked == Tracked(BOLT, 0.0)

    def test_stable_reading_issues_lookup(self, gate):
        state, actions = run(gate, [(BOLT, 0.0), (BOLT, 0.4)])

        assert actions[-1].kind is ActionKind.ISSUE_LOOKUP
        assert actions[-1].name == BOLT
        assert state.phase is GatePhase.AWAITING_RESULT
        assert state.in_flight == BOLT
        assert state.tracked is None
        assert state.scanned_at(BOLT) == 0.4

    def test_changed_name_restarts_stability(self, gate):
        state, actions = run(gate, [(BOLT, 0.0), (SHOCK, 0.5), (SHOCK, 0.7)])

        assert all(a.kind is ActionKind.SHOW_FEEDBACK for a in actions)
        assert state.tracked == Tracked(SHOCK, 0.5)

    def test_no_name_resets_to_idle(self, gate):
        state, actions = run(gate, [(BOLT, 0.0), (None, 0.1)])

        assert actions[-1].kind is ActionKind.SHOW_FEEDBACK
        assert actions[-1].name is None
        assert state.phase is GatePhase.IDLE

    def test_empty_string_counts_as_no_name(self, gate):
        state, _ = run(gate, [(BOLT, 0.0), ("", 0.1), (BOLT, 0.5)])
        assert state.tracked == Tracked(BOLT, 0.5)

    def test_state_is_immutable(self, gate):
        start = GateState()
        state, _ = gate.step(start, BOLT, 0.0)

        assert start == GateState()
        with pytest.raises(FrozenInstanceError):
            state.in_flight = BOLT


class TestScenario:
    """Test the three-reading scenario."""

    def test_three_stable_readings_trigger_exactly_one_lookup(self, gate):
        state, actions = run(gate, [(BOLT, 0.0), (BOLT, 0.5), (BOLT, 1.0)])

        kinds = [a.kind for a in actions]
        assert kinds == [ActionKind.SHOW_FEEDBACK, ActionKind.ISSUE_LOOKUP, ActionKind.SHOW_FEEDBACK]
        assert actions[2].name == BOLT


class TestInFlightGuard:
    """Test that a second lookup is never issued while one is unresolved."""

    def test_other_card_waits_for_completion(self, gate):
        state, actions = run(gate, [(BOLT, 0.0), (BOLT, 0.5), (SHOCK, 1.0), (SHOCK, 1.5)])

        assert actions[2].kind is ActionKind.SHOW_FEEDBACK
        # stable, but only feedback while the first lookup is unresolved
        assert actions[3] == GateAction(ActionKind.SHOW_FEEDBACK, SHOCK)
        assert state.in_flight == BOLT

        state = gate.complete(state, BOLT, accepted=True)
        state, action = gate.step(state, SHOCK, 1.6)

        assert action.kind is ActionKind.ISSUE_LOOKUP
        assert action.name == SHOCK

    def test_random_property_single_lookup_in_flight(self, gate):
        rng = random.Random(1234)
        names = [BOLT, SHOCK, "Black Lotus", None]

        state = GateState()
        outstanding = 0
        now = 0.0
        for _ in range(5000):
            now += rng.choice([0.05, 0.1, 0.3, 0.5, 1.0])
            state, action = gate.step(state, rng.choice(names), now)
            if action.kind is ActionKind.ISSUE_LOOKUP:
                outstanding += 1
                assert outstanding == 1
            if state.in_flight is not None and rng.random() < 0.2:
                state = gate.complete(state, state.in_flight, accepted=rng.random() < 0.5)
                outstanding -= 1


class TestDedup:
    """Test dedup window bookkeeping."""

    def test_accepted_name_stays_deduped_for_window(self, gate):
        state, _ = run(gate, [(BOLT, 0.0), (BOLT, 0.5)])
        state = gate.complete(state, BOLT, accepted=True)

        state, actions = run(gate, [(BOLT, 2.0), (BOLT, 3.0)], state)
        assert [a.kind for a in actions] == [ActionKind.SHOW_FEEDBACK] * 2
        assert state.tracked is None

        # 0.5 + 3.0 window has passed: tracking starts again
        state, actions = run(gate, [(BOLT, 3.6), (BOLT, 4.0)], state)
        assert [a.kind for a in actions] == [ActionKind.SHOW_FEEDBACK, ActionKind.ISSUE_LOOKUP]

    def test_rejected_name_is_evicted(self, gate):
        state, _ = run(gate, [(BOLT, 0.0), (BOLT, 0.5)])
        state = gate.complete(state, BOLT, accepted=False)

        assert state.scanned_at(BOLT) is None
        assert state.phase is GatePhase.IDLE

        state, actions = run(gate, [(BOLT, 0.6), (BOLT, 1.0)], state)
        assert actions[-1].kind is ActionKind.ISSUE_LOOKUP

    def test_dedup_ignores_case(self, gate):
        state, _ = run(gate, [(BOLT, 0.0), (BOLT, 0.5)])
        state, action = gate.step(state, BOLT.upper(), 0.6)

        assert action.kind is ActionKind.SHOW_FEEDBACK
        assert action.name == BOLT.upper()
        assert state.tracked is None

    def test_expired_entries_pruned(self, gate):
        state, _ = run(gate, [(BOLT, 0.0), (BOLT, 0.5)])
        state = gate.complete(state, BOLT, accepted=True)

        state, _ = gate.step(state, None, 10.0)

        assert state.recent == ()
