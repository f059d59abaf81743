"""
Scripted opponent.

Each turn the opponent moves its first unmoved unit as far as it can toward
the enemy headquarters, then ends the turn. It plays through the
same tile-click actions as a human player, after a short delay so a client
can show the change of turn first.
"""

import logging
from typing import Optional

from engine.actions import ClickTile, EndTurn
from engine.catalog import Catalog
from engine.movement import reachable_tiles
from engine.scheduler import ScheduledCall, Scheduler
from engine.state import GameState, Screen
from engine.store import GameStore
from engine.units import Faction, Unit, units_by_faction

logger = logging.getLogger(__name__)

DEFAULT_DELAY = 1.5


def choose_move(state: GameState, faction: Faction,
                catalog: Catalog) -> Optional[tuple[Unit, tuple[int, int]]]:
    """
    Pick (unit, destination) for this turn, or None.

    The unit is the first of the faction that has not moved; the destination
    is its reachable tile furthest toward the enemy headquarters (smallest
    column for the Central Powers, largest for the Entente), the first one
    found on ties.
    """
    unit = next((u for u in units_by_faction(state.units, faction) if not u.has_moved), None)
    if unit is None:
        return None
    moves = reachable_tiles(state, unit.id, catalog)
    if not moves:
        return None
    if faction == Faction.ENTENTE:
        return unit, max(moves, key=lambda cell: cell[0])
    return unit, min(moves, key=lambda cell: cell[0])


class OpponentController:
    """Plays one faction by watching the store and dispatching actions."""

    def __init__(self, store: GameStore, faction: Faction,
                 scheduler: Scheduler, delay: float = DEFAULT_DELAY):
        self.store = store
        self.faction = faction
        self.scheduler = scheduler
        self.delay = delay
        self._pending: Optional[ScheduledCall] = None
        self._acting = False
        self._unsubscribe = store.subscribe(self._on_state)
        self._on_state(store.state)

    def _should_act(self, state: GameState) -> bool:
        return (
            state.screen == Screen.PLAYING
            and not state.is_over
            and state.current_faction == self.faction
        )

    @property
    def is_pending(self) -> bool:
        return self._pending is not None and not self._pending.cancelled

    def _on_state(self, state: GameState):
        if self._acting or self.is_pending:
            return
        if self._should_act(state):
            self._pending = self.scheduler.call_later(self.delay, self._step)

    def _step(self):
        self._acting = True
        try:
            state = self.store.state
            if not self._should_act(state):
                return

            move = choose_move(state, self.faction, self.store.rules.catalog)
            if move:
                unit, (col, row) = move
                logger.info(f"{self.faction.display_name}: {unit.id} advances to {(col, row)}")
                self.store.dispatch(ClickTile(unit.col, unit.row))
                self.store.dispatch(ClickTile(col, row))

            self.store.dispatch(EndTurn())
        finally:
            self._acting = False
            self._pending = None

    def stop(self):
        """Cancel any scheduled step and stop watching the store."""
        if self._pending:
            self._pending.cancel()
            self._pending = None
        self._unsubscribe()
