"""
Battle configuration loaded from data/scenarios/<name>.yaml.
"""

import logging
import yaml
from dataclasses import dataclass, field
from pathlib import Path

from .map import MAP_WIDTH, MAP_HEIGHT
from .units import Faction, UnitType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StartingUnit:
    id: str
    unit_type: UnitType
    faction: Faction
    col: int
    row: int


def _default_starting_units() -> tuple[StartingUnit, ...]:
    return (
        StartingUnit("e1", UnitType.INFANTRY, Faction.ENTENTE, 1, 1),
        StartingUnit("c1", UnitType.INFANTRY, Faction.CENTRAL, MAP_WIDTH - 2, MAP_HEIGHT - 2),
    )


@dataclass(frozen=True)
class BattleConfig:
    """Tunable constants of a battle."""
    name: str = "Western Front 1914"
    width: int = MAP_WIDTH
    height: int = MAP_HEIGHT
    base_income: int = 20
    city_income: int = 10
    strategic_income: int = 15
    menu_budget: dict = field(default_factory=lambda: {Faction.ENTENTE: 60, Faction.CENTRAL: 100})
    battle_budget: dict = field(default_factory=lambda: {Faction.ENTENTE: 80, Faction.CENTRAL: 100})
    starting_units: tuple[StartingUnit, ...] = field(default_factory=_default_starting_units)
    opponent_faction: Faction = Faction.CENTRAL
    opponent_delay: float = 1.5  # seconds before the AI acts
    recent_events: int = 2  # log lines sent to the correspondent
    total_conquest_victory: bool = False


def _budget(raw: dict, default: dict) -> dict:
    if not raw:
        return dict(default)
    return {**default, **{Faction(key): int(value) for key, value in raw.items()}}


def load_scenario(data_path: Path | str = "data", name: str = "default") -> BattleConfig:
    """Load a scenario file; missing file or keys keep the defaults."""
    path = Path(data_path) / "scenarios" / f"{name}.yaml"
    defaults = BattleConfig()
    if not path.exists():
        logger.warning(f"Scenario not found: {path}, using defaults")
        return defaults

    with open(path) as f:
        data = yaml.safe_load(f) or {}
    sc = data.get("scenario", {})

    map_cfg = sc.get("map", {})
    economy = sc.get("economy", {})
    opponent = sc.get("opponent", {})

    starting_units = defaults.starting_units
    if "starting_units" in sc:
        starting_units = tuple(
            StartingUnit(
                id=entry["id"],
                unit_type=UnitType(entry["type"]),
                faction=Faction(entry["faction"]),
                col=int(entry["col"]),
                row=int(entry["row"]),
            )
            for entry in sc["starting_units"]
        )

    config = BattleConfig(
        name=sc.get("name", defaults.name),
        width=int(map_cfg.get("width", defaults.width)),
        height=int(map_cfg.get("height", defaults.height)),
        base_income=int(economy.get("base_income", defaults.base_income)),
        city_income=int(economy.get("city_income", defaults.city_income)),
        strategic_income=int(economy.get("strategic_income", defaults.strategic_income)),
        menu_budget=_budget(economy.get("menu_budget"), defaults.menu_budget),
        battle_budget=_budget(economy.get("battle_budget"), defaults.battle_budget),
        starting_units=starting_units,
        opponent_faction=Faction(opponent.get("faction", defaults.opponent_faction.value)),
        opponent_delay=float(opponent.get("delay_seconds", defaults.opponent_delay)),
        recent_events=int(sc.get("narrative", {}).get("recent_events", defaults.recent_events)),
        total_conquest_victory=bool(sc.get("victory", {}).get("total_conquest", False)),
    )
    logger.info(f"Scenario loaded: {config.name}")
    return config
