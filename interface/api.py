"""FastAPI REST interface for live games, daily games, puzzles and statistics."""

import logging
from functools import partial
from typing import Optional

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel

from chessplatform import __version__
from chessplatform.config import CONFIG, setup_logging
from chessplatform.core.board import Side
from chessplatform.core.puzzle import Outcome
from chessplatform.core.selector import Difficulty
from chessplatform.errors import (
    GameNotFound, GameOver, IllegalMove, NotPlayersTurn, PuzzleNotFound, SessionBusy,
)
from chessplatform.puzzles import PuzzleBook, PuzzleLevel, filter_puzzles
from chessplatform.session import DailyGames, LiveGames
from chessplatform.stats import StatsService, rating_tier
from chessplatform.storage import JsonStore

setup_logging()
logger = logging.getLogger(__name__)

app = FastAPI(title=CONFIG.ui.app_name, version=__version__)

# Shared state, one player per server.
store = JsonStore(CONFIG.store_path)
stats = StatsService(store)
live_games = LiveGames(stats)
daily_games = DailyGames(store, stats)
puzzle_book = PuzzleBook(stats)


class NewLiveGameRequest(BaseModel):
    difficulty: Difficulty = Difficulty.MEDIUM
    player_color: Side = Side.WHITE


class MoveRequest(BaseModel):
    move: str  # SAN ("Nf3") or UCI ("g1f3")


def _play(play, move: str):
    try:
        records = play(move)
    except GameNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (IllegalMove, GameOver, NotPlayersTurn) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SessionBusy as e:
        raise HTTPException(status_code=409, detail=str(e))
    return [{"san": r.san, "uci": r.uci, "by_player": r.by_player} for r in records]


def _outcome(outcome: Outcome) -> dict:
    return {
        "outcome": outcome.kind.value,
        "reason": outcome.reason.value if outcome.reason else None,
        "cursor": outcome.cursor,
        "player_move": outcome.player_move,
        "reply": outcome.reply,
    }


# ── Statistics ───────────────────────────────────────────────────────────


@app.get("/stats")
def get_stats():
    s = stats.load()
    return {**s.to_dict(), "tier": rating_tier(s.rating)}


@app.post("/stats/reset")
def reset_stats():
    s = stats.reset()
    daily_games.clear()
    return {**s.to_dict(), "tier": rating_tier(s.rating)}


# ── Live games ───────────────────────────────────────────────────────────


@app.post("/live")
def new_live_game(req: NewLiveGameRequest = NewLiveGameRequest()):
    game_id, game = live_games.create(req.difficulty, req.player_color)
    return {"id": game_id, **game.state()}


@app.get("/live/{game_id}")
def get_live_game(game_id: str):
    try:
        game = live_games.get(game_id)
    except GameNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"id": game_id, **game.state()}


@app.post("/live/{game_id}/move")
def live_move(game_id: str, req: MoveRequest):
    try:
        game = live_games.get(game_id)
    except GameNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    moves = _play(game.play, req.move)
    return {"id": game_id, "moves": moves, **game.state()}


@app.delete("/live/{game_id}")
def delete_live_game(game_id: str):
    try:
        live_games.delete(game_id)
    except GameNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"deleted": game_id}


# ── Puzzles ──────────────────────────────────────────────────────────────


@app.get("/puzzles")
def list_puzzles(difficulty: Optional[PuzzleLevel] = None):
    return [
        {"id": p.id, "theme": p.theme, "difficulty": p.level.value,
         "player_color": p.player_color.value, "fen": p.fen}
        for p in filter_puzzles(difficulty)
    ]


def _puzzle_session(puzzle_id: int):
    try:
        return puzzle_book.session(puzzle_id)
    except PuzzleNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.get("/puzzles/{puzzle_id}")
def get_puzzle(puzzle_id: int):
    return _puzzle_session(puzzle_id).to_dict()


@app.post("/puzzles/{puzzle_id}/move")
def puzzle_move(puzzle_id: int, req: MoveRequest):
    session = _puzzle_session(puzzle_id)
    try:
        outcome = session.submit_move(req.move)
    except SessionBusy as e:
        raise HTTPException(status_code=409, detail=str(e))
    return {**_outcome(outcome), **session.to_dict()}


@app.post("/puzzles/{puzzle_id}/reset")
def reset_puzzle(puzzle_id: int):
    session = _puzzle_session(puzzle_id)
    session.reset()
    return session.to_dict()


@app.get("/puzzles/{puzzle_id}/hint")
def puzzle_hint(puzzle_id: int):
    session = _puzzle_session(puzzle_id)
    return {"hint": session.hint(), "hints_used": session.hints_used}


# ── Daily games ──────────────────────────────────────────────────────────


@app.get("/daily")
def list_daily_games():
    return [g.state() for g in daily_games.games()]


@app.post("/daily")
def new_daily_game():
    return daily_games.create().state()


@app.get("/daily/{game_id}")
def get_daily_game(game_id: str):
    try:
        return daily_games.get(game_id).state()
    except GameNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))


@app.post("/daily/{game_id}/move")
def daily_move(game_id: str, req: MoveRequest):
    moves = _play(partial(daily_games.play, game_id), req.move)
    return {"moves": moves, **daily_games.get(game_id).state()}


@app.delete("/daily/{game_id}")
def delete_daily_game(game_id: str):
    try:
        daily_games.delete(game_id)
    except GameNotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"deleted": game_id}
