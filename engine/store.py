"""
Game state store.

Owns the current snapshot, applies dispatched actions one at a time and
publishes every new snapshot to subscribers. Actions dispatched while a
dispatch is in progress (for example by a subscriber) are queued and applied
in order once the current one finishes.

At the end of each half-turn the store asks the war correspondent for a
report in a detached task; the report is merged back with ApplyNarrative
whenever it arrives, even if play has moved on since.
"""

import asyncio
import logging
from collections import deque
from typing import Callable, Optional

from .actions import Action, ApplyNarrative, EndTurn
from .reducer import Rules, apply
from .state import GameState
from .turn import NarrativeRequest, narrative_request

logger = logging.getLogger(__name__)

Subscriber = Callable[[GameState], None]


class GameStore:
    """Single source of truth for a game session."""

    def __init__(self, rules: Rules, correspondent=None,
                 initial: Optional[GameState] = None):
        self.rules = rules
        self.correspondent = correspondent  # anything with write_report(request) -> str
        self._state = initial if initial is not None else rules.initial_state()
        self._subscribers: list[Subscriber] = []
        self._queue: deque[Action] = deque()
        self._dispatching = False
        self._reports: set[asyncio.Task] = set()

    @property
    def state(self) -> GameState:
        return self._state

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register a subscriber; returns a function that unsubscribes it."""
        self._subscribers.append(callback)

        def unsubscribe():
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def dispatch(self, action: Action):
        self._queue.append(action)
        if self._dispatching:
            return

        self._dispatching = True
        try:
            while self._queue:
                self._apply(self._queue.popleft())
        finally:
            self._dispatching = False

    def _apply(self, action: Action):
        previous = self._state
        state = apply(previous, action, self.rules)
        if state is previous:
            return

        self._state = state
        if isinstance(action, EndTurn):
            self._request_report(narrative_request(previous, self.rules.config))

        for callback in list(self._subscribers):
            callback(state)

    # War correspondent
    def _request_report(self, request: NarrativeRequest):
        if self.correspondent is None:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop, skipping war report")
            return

        task = loop.create_task(self._write_report(request))
        self._reports.add(task)
        task.add_done_callback(self._reports.discard)

    async def _write_report(self, request: NarrativeRequest):
        # The OpenAI client blocks, so run it off the event loop
        loop = asyncio.get_running_loop()
        report = await loop.run_in_executor(None, self.correspondent.write_report, request)
        logger.info(f"War report for turn {request.turn} received")
        self.dispatch(ApplyNarrative(report))

    @property
    def pending_reports(self) -> int:
        return len(self._reports)

    async def drain(self):
        """Wait until every requested war report has been merged."""
        while self._reports:
            await asyncio.gather(*list(self._reports))
