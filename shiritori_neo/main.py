# -*- coding: utf-8 -*-
from __future__ import annotations

import logging
import os
import random
import uuid
from collections import OrderedDict
from contextlib import asynccontextmanager
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from .config import Settings, load_settings
from .oracle import build_oracle
from .session import GameSession
from .storage import HighScoreStore

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class GameRegistry:
    """進行中のゲームを ID で管理する。

    settings.max_games を超えたら、終わったゲームを優先して使われていない順に捨てる。
    """

    def __init__(self, settings: Settings, oracle=None, store: Optional[HighScoreStore] = None):
        self.settings = settings
        self.oracle = oracle if oracle is not None else build_oracle(settings)
        self.store = store if store is not None else HighScoreStore(settings.high_score_path)
        self.sessions: "OrderedDict[str, GameSession]" = OrderedDict()
        self._rng = random.Random()

    def create(self) -> str:
        game_id = uuid.uuid4().hex
        session = GameSession(
            self.oracle,
            self.settings.rules,
            player_time_seconds=self.settings.player_time_seconds,
            opponent_time_seconds=self.settings.opponent_time_seconds,
            store=self.store,
            rng=self._rng,
        )
        session.start()
        self.sessions[game_id] = session
        logger.info("created game %s", game_id)
        self._evict()
        return game_id

    def get(self, game_id: str) -> GameSession:
        session = self.sessions[game_id]
        self.sessions.move_to_end(game_id)
        return session

    def _evict(self) -> None:
        while len(self.sessions) > max(self.settings.max_games, 1):
            finished = [gid for gid, s in self.sessions.items() if s.state.is_over]
            game_id = finished[0] if finished else next(iter(self.sessions))
            self.sessions.pop(game_id).close()
            logger.info("evicted game %s", game_id)

    def close(self) -> None:
        for session in self.sessions.values():
            session.close()


class MoveRequest(BaseModel):
    word: str


class MoveView(BaseModel):
    speaker: str  # "player" | "opponent"
    word: str


class GameView(BaseModel):
    game_id: str
    phase: str
    current_word: Optional[str] = None
    previous_word: Optional[str] = None
    linking_sound: Optional[str] = None
    history: List[MoveView] = []
    message: str = ""
    is_error: bool = False
    player_time_remaining: float = 0.0
    game_over: bool = False
    winner: Optional[str] = None  # "player" | "opponent"
    end_cause: Optional[str] = None
    player_character_count: int = 0
    high_score: int = 0
    new_record: bool = False


class HighScoreView(BaseModel):
    high_score: int


@asynccontextmanager
async def lifespan(app: FastAPI):
    # レジストリはリクエストを受ける前に1つだけ作る
    if getattr(app.state, "registry", None) is None:
        app.state.registry = GameRegistry(load_settings())
    yield
    registry = getattr(app.state, "registry", None)
    if registry is not None:
        registry.close()


app = FastAPI(title="AIしりとり Neo", lifespan=lifespan)

# CORS（開発用に広めに許可）
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 静的ファイル（フロント）があれば配信する
static_dir = os.path.join(os.path.dirname(os.path.dirname(__file__)), "static")
if os.path.isdir(static_dir):
    app.mount("/static", StaticFiles(directory=static_dir), name="static")

    @app.get("/")
    def root_index():
        return FileResponse(os.path.join(static_dir, "index.html"))


def get_registry(request: Request) -> GameRegistry:
    return request.app.state.registry


def _session_or_404(registry: GameRegistry, game_id: str) -> GameSession:
    try:
        return registry.get(game_id)
    except KeyError:
        raise HTTPException(status_code=404, detail="ゲームが見つかりません")


def _view(game_id: str, session: GameSession) -> GameView:
    state = session.state
    return GameView(
        game_id=game_id,
        phase=state.phase.value,
        current_word=state.current_word,
        previous_word=state.previous_word,
        linking_sound=state.linking_sound,
        history=[MoveView(speaker=m.speaker.value, word=m.word) for m in state.history],
        message=session.message,
        is_error=session.is_error,
        player_time_remaining=round(session.player_time_left(), 1),
        game_over=state.is_over,
        winner=state.winner.value if state.winner else None,
        end_cause=state.end_cause.value if state.end_cause else None,
        player_character_count=state.player_character_count,
        high_score=session.high_score,
        new_record=session.new_record,
    )


@app.post("/api/games", response_model=GameView)
async def create_game(registry: GameRegistry = Depends(get_registry)):
    game_id = registry.create()
    return _view(game_id, registry.get(game_id))


@app.get("/api/games/{game_id}", response_model=GameView)
async def show_game(game_id: str, registry: GameRegistry = Depends(get_registry)):
    return _view(game_id, _session_or_404(registry, game_id))


@app.post("/api/games/{game_id}/moves", response_model=GameView)
async def play_move(game_id: str, req: MoveRequest, registry: GameRegistry = Depends(get_registry)):
    session = _session_or_404(registry, game_id)
    await session.submit(req.word)
    return _view(game_id, session)


@app.post("/api/games/{game_id}/reset", response_model=GameView)
async def reset_game(game_id: str, registry: GameRegistry = Depends(get_registry)):
    session = _session_or_404(registry, game_id)
    session.start()
    return _view(game_id, session)


@app.get("/api/high-score", response_model=HighScoreView)
def high_score(registry: GameRegistry = Depends(get_registry)):
    return HighScoreView(high_score=registry.store.load())
