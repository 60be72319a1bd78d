"""Async scanning session driving the scan gate with one frame at a time."""

import asyncio
import time
from typing import Callable, Optional

from ..core.types import IdentificationResult
from ..ocr.normalize import normalize_name
from ..ocr.regexes import extract_card_name
from ..utils.log import LoggerMixin
from .gate import ActionKind, GateAction, GateConfig, GateState, ScanGate
from .pipeline import Lookup

FeedbackCallback = Callable[[Optional[str]], None]
ResultCallback = Callable[[str, IdentificationResult], None]


class ScanSession(LoggerMixin):
    """One device, one camera: frames are processed in arrival order.

    ``feed`` never waits on a lookup. The lookup runs as a background task
    and the gate keeps producing feedback meanwhile; the gate state also
    guarantees that at most one lookup is in flight.
    """

    def __init__(
        self,
        lookup: Lookup,
        config: Optional[GateConfig] = None,
        on_feedback: Optional[FeedbackCallback] = None,
        on_result: Optional[ResultCallback] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.lookup = lookup
        self.gate = ScanGate(config)
        self.state = GateState()
        self.on_feedback = on_feedback
        self.on_result = on_result
        self.clock = clock
        self.abandoned = False
        self.lookups_issued = 0
        self.last_error: Optional[Exception] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def busy(self) -> bool:
        return self._task is not None and not self._task.done()

    def feed(self, raw_text: str, now: Optional[float] = None) -> GateAction:
        """Process one frame's OCR text.

        Must be called from within a running event loop, since an approved
        reading schedules the lookup as a task.
        """
        if self.abandoned:
            return GateAction(ActionKind.NONE)

        now = self.clock() if now is None else now
        extracted = extract_card_name(raw_text)
        name = normalize_name(extracted) if extracted else None

        self.state, action = self.gate.step(self.state, name, now)

        if action.kind is ActionKind.SHOW_FEEDBACK and self.on_feedback:
            self.on_feedback(action.name)
        elif action.kind is ActionKind.ISSUE_LOOKUP:
            if self.busy:
                # Gate state and task disagree; never start a second call.
                self.logger.warning("Lookup already running, not issuing another", name=action.name)
                self.state = self.gate.complete(self.state, action.name, accepted=False)
                return GateAction(ActionKind.NONE)
            self.lookups_issued += 1
            self.logger.info("Issuing identification lookup", name=action.name)
            self._task = asyncio.get_running_loop().create_task(self._run_lookup(action.name))

        return action

    async def _run_lookup(self, name: str) -> None:
        context = self.log_start("identify", name=name)
        result: Optional[IdentificationResult] = None
        try:
            result = await self.lookup(name)
        except Exception as e:
            # Recoverable: the card can be retried on a later frame
            self.last_error = e
            self.log_error(context, e)

        if self.abandoned:
            self.logger.info("Discarding lookup result for abandoned session", name=name)
            return

        top = result.top if result is not None else None
        accepted = top is not None and top.score >= self.gate.config.min_accept_score
        self.state = self.gate.complete(self.state, name, accepted)

        if result is not None:
            self.log_success(context, accepted=accepted, candidates=len(result.candidates))
            if self.on_result:
                self.on_result(name, result)

    async def wait_idle(self) -> None:
        """Wait for the in-flight lookup, if any, to finish."""
        if self._task is not None:
            await self._task

    def abandon(self) -> None:
        """Stop the session. A lookup still running is left to finish and ignored."""
        self.abandoned = True
        self.logger.info("Scan session abandoned", lookup_in_flight=self.busy)
