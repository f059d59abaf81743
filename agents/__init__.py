"""
Agents that act on a running game.

The war correspondent uses OpenAI (gpt-4o) for battle dispatches; the
opponent controller plays a faction with a fixed script.
"""

from .correspondent import NarrativeConfig, WarCorrespondent
from .opponent import OpponentController, choose_move

__all__ = ["NarrativeConfig", "WarCorrespondent", "OpponentController", "choose_move"]
