"""
Actions accepted by the reducer.

Players and the opponent controller change the game only by dispatching
these to the store.
"""

from dataclasses import dataclass

from .state import Screen
from .units import UnitType


@dataclass(frozen=True)
class ClickTile:
    """A tile on the battlefield was clicked."""
    col: int
    row: int


@dataclass(frozen=True)
class Recruit:
    """Recruit a unit at the selected headquarters."""
    unit_type: UnitType


@dataclass(frozen=True)
class EndTurn:
    pass


@dataclass(frozen=True)
class ApplyNarrative:
    """Merge a finished war report into the state."""
    report: str


@dataclass(frozen=True)
class ShowScreen:
    """Menu navigation (menu, intro, campaign)."""
    screen: Screen


@dataclass(frozen=True)
class StartBattle:
    territory_id: str


@dataclass(frozen=True)
class ReturnToCampaign:
    """Leave the battlefield for the territory selection screen."""
    pass


Action = ClickTile | Recruit | EndTurn | ApplyNarrative | ShowScreen | StartBattle | ReturnToCampaign
