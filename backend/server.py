import asyncio
import logging
import os
import sys

# Add current directory to path so we can import backend modules
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from typing import Any, Dict, Optional
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

import numpy as np

from config import CONFIG
from game import Game, new_game_state
from models import Employee
from persistence import SaveStore, init_db, log_day
from stats import compute_company_stats

# Setup logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = FastAPI()

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Player actions reachable over HTTP, by Game method name
ACTIONS = {
    "add_money", "spend_money", "add_reputation", "add_legacy_points",
    "hire_employee", "fire_employee", "train_employee",
    "start_project", "update_project", "ship_product", "complete_contract",
    "start_research", "update_research", "complete_research",
    "upgrade_office", "upgrade_office_size",
    "place_room", "remove_room", "upgrade_room",
    "install_upgrade", "upgrade_slot", "remove_slot_upgrade",
    "trigger_event", "handle_event_choice",
    "set_policy", "set_game_speed", "toggle_pause",
    "prestige_reset", "initialize_game", "save_game", "load_game",
}


class ActionRequest(BaseModel):
    args: Dict[str, Any] = Field(default_factory=dict)


class AdvanceRequest(BaseModel):
    days: int = Field(default=1, ge=1, le=365)


def event_to_dict(event) -> Optional[Dict[str, Any]]:
    if event is None:
        return None
    return {
        "id": event.id,
        "title": event.title,
        "description": event.description,
        "choices": [{"id": c.id, "label": c.label, "description": c.description} for c in event.choices],
    }


class GameSessionManager:
    def __init__(self):
        self.game: Optional[Game] = None
        self.is_running = False
        self.active_websocket = None
        self.loop_task: Optional[asyncio.Task] = None
        self.log_kpis = False
        self.db_path = CONFIG.persistence.db_path

    def initialize(self, config: Dict[str, Any] = None):
        if config is None:
            config = {}

        seed = config.get("seed", CONFIG.seed)
        self.db_path = config.get("db_path", CONFIG.persistence.db_path)
        self.log_kpis = bool(config.get("log_kpis", False))

        logger.info(f"Initializing game session (seed={seed})")
        self.game = Game(
            state=new_game_state(config.get("money")),
            rng=np.random.default_rng(seed).random,
            store=SaveStore(self.db_path),
        )
        if self.log_kpis:
            init_db(self.db_path)
        logger.info("Game session initialized")

    def ensure_game(self) -> Game:
        if self.game is None:
            self.initialize()
        return self.game

    def snapshot(self) -> Dict[str, Any]:
        game = self.ensure_game()
        return {
            "state": game.state.to_dict(version=CONFIG.persistence.save_version),
            "isPaused": game.is_paused,
            "gameSpeed": game.game_speed,
            "activeEvent": event_to_dict(game.active_event()),
            "stats": compute_company_stats(game.state),
        }

    def step(self):
        """Advance one day if the game is running; None while paused."""
        outcome = self.ensure_game().advance_day()
        if outcome is not None and self.log_kpis:
            log_day(outcome.state, self.db_path)
        return outcome

    def start(self):
        """Unpause and make sure exactly one clock loop is running."""
        game = self.ensure_game()
        if game.game_speed == 0:
            game.set_game_speed(1)
        game.is_paused = False
        self.is_running = True
        if self.loop_task is None or self.loop_task.done():
            self.loop_task = asyncio.create_task(self.run_loop())

    def stop(self):
        self.is_running = False
        if self.game:
            self.game.is_paused = True
        if self.loop_task is not None:
            self.loop_task.cancel()
            self.loop_task = None

    def run_action(self, name: str, args: Dict[str, Any]) -> Any:
        game = self.ensure_game()
        if name == "hire_employee" and isinstance(args.get("employee"), dict):
            args = dict(args, employee=Employee.from_dict(args["employee"]))
        return getattr(game, name)(**args)

    async def run_loop(self):
        if not self.game:
            logger.warning("Attempted to run loop without a game. Waiting for SETUP.")
            return

        logger.info("Starting game loop")
        try:
            while self.is_running and self.active_websocket:
                start_time = asyncio.get_event_loop().time()

                outcome = self.step()
                if outcome is not None:
                    payload = self.snapshot()
                    payload.update({
                        "type": "DAY",
                        "day": outcome.state.days_played,
                        "notifications": [n.to_dict() for n in self.game.drain_notifications()],
                        "effects": outcome.effects,
                    })
                    await self.active_websocket.send_json(payload)

                # At most one day per tick
                speed = self.game.game_speed or 1
                elapsed = asyncio.get_event_loop().time() - start_time
                await asyncio.sleep(max(0.05, CONFIG.time.seconds_per_day / speed - elapsed))

        except Exception as e:
            logger.error(f"Game loop error: {e}")
            self.is_running = False
            if self.active_websocket:
                await self.active_websocket.send_json({"error": str(e)})


manager = GameSessionManager()


@app.get("/state")
async def get_state():
    return manager.snapshot()


@app.post("/advance")
async def advance(request: AdvanceRequest):
    game = manager.ensure_game()
    if game.is_paused:
        raise HTTPException(status_code=409, detail="Game is paused")
    for _ in range(request.days):
        manager.step()
    payload = manager.snapshot()
    payload["notifications"] = [n.to_dict() for n in game.drain_notifications()]
    return payload


@app.post("/actions/{name}")
async def run_action(name: str, request: ActionRequest):
    if name not in ACTIONS:
        raise HTTPException(status_code=404, detail=f"Unknown action: {name}")
    try:
        result = manager.run_action(name, request.args)
    except (KeyError, TypeError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Bad arguments for {name}: {e}")

    payload = manager.snapshot()
    payload["result"] = result
    payload["notifications"] = [n.to_dict() for n in manager.game.drain_notifications()]
    return payload


@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    await websocket.accept()
    manager.active_websocket = websocket
    logger.info("WebSocket connected")

    try:
        while True:
            data = await websocket.receive_json()
            command = data.get("command")

            if command == "SETUP":
                config = data.get("config", {})
                manager.initialize(config)
                await websocket.send_json({"type": "SETUP_COMPLETE", **manager.snapshot()})
            elif command == "START":
                manager.start()
            elif command == "STOP":
                manager.stop()
            elif command == "SPEED":
                ok = manager.ensure_game().set_game_speed(data.get("speed", 1))
                await websocket.send_json({"type": "SPEED", "ok": ok, "gameSpeed": manager.game.game_speed})
            elif command == "POLICY":
                ok = manager.ensure_game().set_policy(data.get("policy", "balanced"))
                await websocket.send_json({"type": "POLICY", "ok": ok, "policy": manager.game.state.policy})
            elif command == "SAVE":
                manager.ensure_game().save_game()
                await websocket.send_json({"type": "SAVED", "day": manager.game.state.days_played})
            elif command == "LOAD":
                ok = manager.ensure_game().load_game()
                await websocket.send_json({"type": "LOADED", "ok": ok, **manager.snapshot()})
            elif command == "RESET":
                manager.stop()
                manager.ensure_game().initialize_game()
                await websocket.send_json({"type": "RESET", **manager.snapshot()})

    except WebSocketDisconnect:
        manager.stop()
        manager.active_websocket = None
        logger.info("Client disconnected")
