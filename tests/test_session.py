"""Tests for the async scan session."""

import asyncio

import pytest

from cardscan.scan.gate import ActionKind, GateConfig
from cardscan.scan.pipeline import make_lookup
from cardscan.scan.session import ScanSession

from conftest import make_result

CONFIG = GateConfig(stability_window=0.4, dedup_window=3.0, min_accept_score=45)


class BlockingLookup:
    """Lookup that records calls and waits until released."""

    def __init__(self, result=None, error=None):
        self.calls = []
        self.release = asyncio.Event()
        self.result = result
        self.error = error

    async def __call__(self, name):
        self.calls.append(name)
        await self.release.wait()
        if self.error is not None:
            raise self.error
        return self.result if self.result is not None else make_result(name, 90)


class TestScanSession:
    """Test frame feeding, lookup scheduling and result handling."""

    @pytest.mark.asyncio
    async def test_stable_frames_issue_one_lookup(self):
        lookup = BlockingLookup()
        results = []
        session = ScanSession(lookup, CONFIG, on_result=lambda name, r: results.append((name, r)))

        actions = [session.feed("Lightning Bolt\nInstant", now) for now in (0.0, 0.5, 1.0)]

        assert [a.kind for a in actions] == [
            ActionKind.SHOW_FEEDBACK, ActionKind.ISSUE_LOOKUP, ActionKind.SHOW_FEEDBACK,
        ]
        assert session.busy
        await asyncio.sleep(0)
        assert lookup.calls == ["Lightning Bolt"]

        lookup.release.set()
        await session.wait_idle()

        assert session.lookups_issued == 1
        assert not session.busy
        assert results[0][0] == "Lightning Bolt"
        assert results[0][1].top.score == 90
        assert session.state.in_flight is None

    @pytest.mark.asyncio
    async def test_feedback_callback(self):
        feedback = []
        session = ScanSession(BlockingLookup(), CONFIG, on_feedback=feedback.append)

        session.feed("  lightning   bolt  ", 0.0)
        session.feed("{R}", 0.1)

        assert feedback == ["lightning bolt", None]

    @pytest.mark.asyncio
    async def test_second_card_waits_while_lookup_in_flight(self):
        lookup = BlockingLookup()
        feedback = []
        session = ScanSession(lookup, CONFIG, on_feedback=feedback.append)

        session.feed("Lightning Bolt", 0.0)
        session.feed("Lightning Bolt", 0.5)
        session.feed("Shock", 1.0)
        action = session.feed("Shock", 1.5)

        assert action.kind is ActionKind.SHOW_FEEDBACK
        assert feedback[-2:] == ["Shock", "Shock"]
        assert session.lookups_issued == 1

        lookup.release.set()
        await session.wait_idle()

        action = session.feed("Shock", 1.6)
        assert action.kind is ActionKind.ISSUE_LOOKUP
        await session.wait_idle()
        assert lookup.calls == ["Lightning Bolt", "Shock"]

    @pytest.mark.asyncio
    async def test_failed_lookup_allows_retry(self):
        lookup = BlockingLookup(error=RuntimeError("catalog down"))
        lookup.release.set()
        session = ScanSession(lookup, CONFIG)

        session.feed("Shock", 0.0)
        session.feed("Shock", 0.5)
        await session.wait_idle()

        assert isinstance(session.last_error, RuntimeError)
        assert session.state.scanned_at("Shock") is None

        session.feed("Shock", 0.6)
        assert session.feed("Shock", 1.0).kind is ActionKind.ISSUE_LOOKUP
        await session.wait_idle()

    @pytest.mark.asyncio
    async def test_low_confidence_result_is_evicted(self):
        lookup = BlockingLookup(result=make_result("Shock", 30))
        lookup.release.set()
        session = ScanSession(lookup, CONFIG)

        session.feed("Shock", 0.0)
        session.feed("Shock", 0.5)
        await session.wait_idle()

        assert session.state.scanned_at("Shock") is None

    @pytest.mark.asyncio
    async def test_accepted_result_stays_deduped(self):
        lookup = BlockingLookup(result=make_result("Shock", 45))
        lookup.release.set()
        session = ScanSession(lookup, CONFIG)

        session.feed("Shock", 0.0)
        session.feed("Shock", 0.5)
        await session.wait_idle()

        assert session.state.scanned_at("Shock") == 0.5
        assert session.feed("Shock", 1.0).kind is ActionKind.SHOW_FEEDBACK

    @pytest.mark.asyncio
    async def test_abandon_discards_result(self):
        lookup = BlockingLookup()
        results = []
        session = ScanSession(lookup, CONFIG, on_result=lambda name, r: results.append(r))

        session.feed("Shock", 0.0)
        session.feed("Shock", 0.5)
        session.abandon()
        lookup.release.set()
        await session.wait_idle()

        assert results == []
        assert session.feed("Shock", 5.0).kind is ActionKind.NONE

    @pytest.mark.asyncio
    async def test_with_catalog_lookup(self, catalog_index):
        results = []
        session = ScanSession(make_lookup(catalog_index), CONFIG,
                              on_result=lambda name, r: results.append(r))

        session.feed("Black Lotus", 0.0)
        session.feed("Black Lotus", 0.4)
        await session.wait_idle()

        assert results[0].top.entry_id == "lea-232"
        assert results[0].top.score == 60

    def test_feed_without_loop_raises_only_on_lookup(self):
        session = ScanSession(BlockingLookup(), CONFIG)

        assert session.feed("Shock", 0.0).kind is ActionKind.SHOW_FEEDBACK
        with pytest.raises(RuntimeError):
            session.feed("Shock", 0.5)
