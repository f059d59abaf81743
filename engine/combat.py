"""
Combat resolution.

Damage = max(1, attack - (defense + terrain defense bonus) + roll), where
the roll is a uniform integer in [0, 2]. The defender's terrain is the tile
it stands on. Attacking spends the attacker's whole turn.
"""

import logging
import random
from dataclasses import dataclass, field, replace
from typing import Optional

from .catalog import Catalog
from .state import GameState
from .units import Unit

logger = logging.getLogger(__name__)

XP_PER_ATTACK = 2
XP_PER_KILL = 10


@dataclass
class CombatReport:
    """Report of a single attack."""
    attacker_id: str
    defender_id: str
    turn: int
    damage: int
    roll: int
    defender_hp: int
    killed: bool
    xp_gained: int
    location: Optional[tuple[int, int]] = None
    notes: list[str] = field(default_factory=list)


class CombatResolver:
    """Resolves attacks between two units."""

    MAX_ROLL = 2

    def __init__(self, catalog: Catalog, rng_seed: Optional[int] = None):
        self.catalog = catalog
        self.rng = random.Random(rng_seed)

    def roll(self) -> int:
        return self.rng.randint(0, self.MAX_ROLL)

    def calculate_damage(self, attacker: Unit, defender: Unit,
                         terrain_bonus: int, roll: int) -> int:
        """Damage dealt, never less than 1."""
        return max(1, attacker.attack - (defender.defense + terrain_bonus) + roll)

    def resolve_attack(self, state: GameState, attacker_id: str,
                       defender_id: str) -> tuple[GameState, CombatReport]:
        """
        Resolve an attack and return the new state with its report.

        Range and eligibility are checked by the caller. The defender loses
        hp (floored at 0) and is removed from play at 0. The attacker gains
        experience, is re-leveled and marked as having moved and attacked.
        """
        attacker = state.get_unit(attacker_id)
        defender = state.get_unit(defender_id)
        if attacker is None or defender is None:
            raise KeyError(f"Unknown combatant: {attacker_id} / {defender_id}")

        tile = state.tile(defender.col, defender.row)
        terrain_bonus = self.catalog.defense_bonus(tile.terrain)
        roll = self.roll()
        damage = self.calculate_damage(attacker, defender, terrain_bonus, roll)

        new_hp = max(0, defender.hp - damage)
        killed = new_hp <= 0
        xp_gained = XP_PER_ATTACK + (XP_PER_KILL if killed else 0)
        experience = attacker.experience + xp_gained

        veteran = replace(
            attacker,
            experience=experience,
            level=self.catalog.level_for_experience(experience),
            has_moved=True,
            has_attacked=True,
        )

        units = []
        for unit in state.units:
            if unit.id == attacker.id:
                units.append(veteran)
            elif unit.id == defender.id:
                if not killed:
                    units.append(replace(unit, hp=new_hp))
            else:
                units.append(unit)

        report = CombatReport(
            attacker_id=attacker.id,
            defender_id=defender.id,
            turn=state.turn,
            damage=damage,
            roll=roll,
            defender_hp=new_hp,
            killed=killed,
            xp_gained=xp_gained,
            location=defender.position,
            notes=[
                f"Terrain: {tile.terrain.value} ({terrain_bonus:+d})",
                f"Roll: {roll}",
            ],
        )
        if veteran.level > attacker.level:
            report.notes.append(f"Promoted to level {veteran.level}")

        logger.debug(
            f"{attacker.id} -> {defender.id}: {damage} damage, "
            f"hp {defender.hp} -> {new_hp}{' (destroyed)' if killed else ''}"
        )
        return replace(state, units=tuple(units)), report
