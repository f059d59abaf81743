"""
Headless battle runner for the trench wargame.

Plays one battle with both factions driven by the scripted opponent and
writes a JSON log of every half-turn.
"""

import os
import json
import asyncio
import logging
from pathlib import Path
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv

# Load API key from .env
load_dotenv(Path(__file__).parent / ".env")

from engine import (
    Catalog, Rules, GameStore, GameState, Faction, Screen,
    StartBattle, AsyncioScheduler, load_scenario, control_share,
)
from agents import OpponentController, WarCorrespondent

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class BattleSimulation:
    """Runs a battle between two scripted opponents."""

    def __init__(
        self,
        data_path: str = "data",
        scenario: str = "default",
        log_dir: str = "logs",
        seed: Optional[int] = None,
        narrative: bool = True,
        delay: float = 0.0,
    ):
        self.data_path = Path(data_path)
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(exist_ok=True)
        self.delay = delay

        logger.info("Loading catalog...")
        self.catalog = Catalog(self.data_path)

        logger.info("Loading scenario...")
        self.config = load_scenario(self.data_path, scenario)
        self.rules = Rules(self.catalog, self.config, seed=seed)

        correspondent = None
        if narrative and not os.environ.get("OPENAI_API_KEY"):
            logger.warning("OPENAI_API_KEY not set, war reports disabled")
            narrative = False
        if narrative:
            logger.info("Initializing war correspondent...")
            correspondent = WarCorrespondent()
        self.store = GameStore(self.rules, correspondent)

        # Game log
        self.game_log: list[dict] = []
        self.start_time: Optional[datetime] = None
        self._last_turn: Optional[tuple] = None
        self._seen_logs = 0
        self.store.subscribe(self._record)

    def _record(self, state: GameState):
        """Log a half-turn whenever play changes hands or the battle ends."""
        if state.screen != Screen.PLAYING:
            return
        key = (state.turn, state.current_faction, state.victory)
        if key == self._last_turn:
            return
        self._last_turn = key

        if len(state.logs) < self._seen_logs:
            self._seen_logs = 0
        events = list(reversed(state.logs[:len(state.logs) - self._seen_logs]))
        self._seen_logs = len(state.logs)

        share = control_share(state.tiles)
        entry = {
            "turn": state.turn,
            "faction": state.current_faction.value,
            "budget": {f.value: amount for f, amount in state.budget.items()},
            "units": {f.value: sum(1 for u in state.units if u.faction == f) for f in Faction},
            "control": {f.value: pct for f, pct in share.items()},
            "events": events,
            "news_report": state.news_report,
            "victory": state.victory.value if state.victory else None,
        }
        self.game_log.append(entry)
        logger.info(
            f"Turn {state.turn} ({state.current_faction.display_name}): "
            f"control {share[Faction.ENTENTE]}% / {share[Faction.CENTRAL]}%"
        )

    async def run(self, territory_id: str = "flanders", max_turns: int = 20) -> Optional[Faction]:
        """Play until one faction is wiped out or max_turns have passed."""
        self.start_time = datetime.now()
        finished = asyncio.Event()

        def watch(state: GameState):
            if state.is_over or state.turn > max_turns:
                finished.set()

        scheduler = AsyncioScheduler()
        controllers = [
            OpponentController(self.store, faction, scheduler, self.delay)
            for faction in Faction
        ]
        unsubscribe = self.store.subscribe(watch)

        self.store.dispatch(StartBattle(territory_id))
        if self.store.state.screen != Screen.PLAYING:
            for controller in controllers:
                controller.stop()
            raise ValueError(f"Unknown or locked territory: {territory_id}")

        territory = self.store.state.active_territory
        logger.info(f"Battle for {territory.name} ({territory.difficulty})")

        await finished.wait()
        for controller in controllers:
            controller.stop()
        unsubscribe()
        await self.store.drain()

        victory = self.store.state.victory
        if victory:
            logger.info(f"VICTORY: {victory.display_name}")
        else:
            logger.info(f"No decision after {max_turns} turns")

        self.save_log(territory_id)
        return victory

    def save_log(self, territory_id: str):
        """Save game log to file."""
        timestamp = self.start_time.strftime("%Y%m%d_%H%M%S")
        log_file = self.log_dir / f"battle_{territory_id}_{timestamp}.json"

        state = self.store.state
        record = {
            "territory": territory_id,
            "scenario": self.config.name,
            "started": self.start_time.isoformat(),
            "final_turn": state.turn,
            "victory": state.victory.value if state.victory else None,
            "turns": self.game_log,
        }
        with open(log_file, "w") as f:
            json.dump(record, f, indent=2, default=str)

        logger.info(f"Game log saved to {log_file}")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Trench Wargame 1914 - headless battle")
    parser.add_argument("--territory", default="flanders", help="Campaign territory id")
    parser.add_argument("--turns", type=int, default=20, help="Max turns")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--scenario", default="default", help="Scenario name")
    parser.add_argument("--data", default="data", help="Data directory path")
    parser.add_argument("--logs", default="logs", help="Log directory path")
    parser.add_argument("--no-narrative", action="store_true", help="Skip war reports")

    args = parser.parse_args()

    simulation = BattleSimulation(
        data_path=args.data,
        scenario=args.scenario,
        log_dir=args.logs,
        seed=args.seed,
        narrative=not args.no_narrative,
    )
    asyncio.run(simulation.run(args.territory, args.turns))


if __name__ == "__main__":
    main()
