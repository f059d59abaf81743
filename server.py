"""
WebSocket game server for human vs AI trench battles.

The human plays the Triple Entente, the scripted opponent plays the Central
Powers. Every new snapshot of the game is pushed to the client as a view.
"""

import os
import json
import asyncio
import logging
from pathlib import Path

from dotenv import load_dotenv

# Load API key from .env (same pattern as game.py)
load_dotenv(Path(__file__).parent / ".env")

import websockets

from engine import (
    Catalog, Rules, GameStore, GameState, Screen, UnitType, AsyncioScheduler,
    ClickTile, Recruit, EndTurn, ShowScreen, StartBattle, ReturnToCampaign,
    load_scenario,
)
from engine.views import battle_view
from agents import OpponentController, WarCorrespondent

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

DATA_PATH = Path(os.environ.get("DATA_PATH", "data"))


class GameSession:
    """Wraps the engine components for a single human vs AI game."""

    def __init__(self, data_path: Path = DATA_PATH, narrative: bool | None = None):
        if narrative is None:
            narrative = bool(os.environ.get("OPENAI_API_KEY"))
        self.catalog = Catalog(data_path)
        self.config = load_scenario(data_path)
        self.rules = Rules(self.catalog, self.config)
        self.store = GameStore(self.rules, WarCorrespondent() if narrative else None)
        self.human_faction = self.config.opponent_faction.opponent
        self.opponent = OpponentController(
            self.store,
            self.config.opponent_faction,
            AsyncioScheduler(),
            self.config.opponent_delay,
        )

    def view(self, state: GameState) -> dict:
        return {
            "human_faction": self.human_faction.value,
            **battle_view(state, self.catalog),
        }

    def handle(self, msg_type: str, msg: dict) -> str | None:
        """Translate a client message into an action. Returns an error or None."""
        state = self.store.state

        if msg_type in ("tile_clicked", "recruit", "end_turn"):
            if state.current_faction != self.human_faction:
                logger.debug(f"Ignoring {msg_type} during the opponent's turn")
                return None

        if msg_type == "tile_clicked":
            try:
                action = ClickTile(int(msg["col"]), int(msg["row"]))
            except (KeyError, TypeError, ValueError):
                return "tile_clicked needs integer col and row"
        elif msg_type == "recruit":
            try:
                action = Recruit(UnitType(msg.get("unit_type")))
            except ValueError:
                return f"Unknown unit type: {msg.get('unit_type')}"
        elif msg_type == "end_turn":
            action = EndTurn()
        elif msg_type == "show_screen":
            try:
                action = ShowScreen(Screen(msg.get("screen")))
            except ValueError:
                return f"Unknown screen: {msg.get('screen')}"
        elif msg_type == "start_battle":
            action = StartBattle(msg.get("territory", ""))
        elif msg_type == "return_to_campaign":
            action = ReturnToCampaign()
        else:
            return f"Unknown message type: {msg_type}"

        self.store.dispatch(action)
        return None

    def close(self):
        self.opponent.stop()


async def handle_websocket(websocket):
    """Handle a single WebSocket connection (one game session)."""
    session = GameSession()
    updates: asyncio.Queue[GameState] = asyncio.Queue()
    unsubscribe = session.store.subscribe(updates.put_nowait)

    async def send_json(msg_type: str, data: dict):
        await websocket.send(json.dumps({"type": msg_type, **data}, default=str))

    async def push_updates():
        while True:
            state = await updates.get()
            await send_json("state", session.view(state))

    pusher = asyncio.create_task(push_updates())
    logger.info("Client connected")

    try:
        await send_json("state", session.view(session.store.state))

        async for raw in websocket:
            try:
                msg = json.loads(raw)
            except json.JSONDecodeError:
                await send_json("error", {"message": "Invalid JSON"})
                continue

            if not isinstance(msg, dict):
                await send_json("error", {"message": "Expected a JSON object"})
                continue

            msg_type = msg.get("type", "")
            error = session.handle(msg_type, msg)
            if error:
                await send_json("error", {"message": error})

    except websockets.exceptions.ConnectionClosed:
        logger.info("Client disconnected")
    finally:
        pusher.cancel()
        unsubscribe()
        session.close()


async def main():
    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8080"))

    logger.info(f"Starting server on ws://{host}:{port}")

    async with websockets.serve(
        handle_websocket,
        host,
        port,
        max_size=1024 * 1024,  # 1MB max message
    ):
        await asyncio.Future()  # run forever


if __name__ == "__main__":
    asyncio.run(main())
