"""Game sessions: live games against the computer and daily games.

A session owns the current Position and its move history. Moves against
one session are serialized: a call that arrives while another is still
running raises SessionBusy instead of waiting.
"""
import enum
import logging
import random
import threading
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple

import chess

from chessplatform.config import CONFIG
from chessplatform.core import board as rules
from chessplatform.core.board import Position, Side
from chessplatform.core.selector import Difficulty, MoveSelector
from chessplatform.errors import (
    GameNotFound, GameOver, InvalidPosition, NotPlayersTurn, SessionBusy,
)
from chessplatform.stats import StatsService
from chessplatform.storage import JsonStore

logger = logging.getLogger(__name__)

DAILY_GAMES_KEY = "dailyGames"


class GameStatus(enum.Enum):
    IN_PROGRESS = "in_progress"
    CHECK = "check"
    CHECKMATE = "checkmate"
    STALEMATE = "stalemate"
    REPETITION = "repetition"
    INSUFFICIENT_MATERIAL = "insufficient_material"
    FIFTY_MOVES = "fifty_moves"

    @property
    def is_over(self) -> bool:
        return self not in (GameStatus.IN_PROGRESS, GameStatus.CHECK)


def game_status(position: Position) -> GameStatus:
    if rules.is_checkmate(position):
        return GameStatus.CHECKMATE
    if rules.is_stalemate(position):
        return GameStatus.STALEMATE
    if rules.is_repetition(position):
        return GameStatus.REPETITION
    if rules.is_insufficient_material(position):
        return GameStatus.INSUFFICIENT_MATERIAL
    if rules.is_fifty_moves(position):
        return GameStatus.FIFTY_MOVES
    if rules.is_check(position):
        return GameStatus.CHECK
    return GameStatus.IN_PROGRESS


def winner(position: Position) -> Optional[Side]:
    """The side that delivered mate, or None."""
    if rules.is_checkmate(position):
        return position.side_to_move.opponent
    return None


def describe_status(position: Position) -> str:
    status = game_status(position)
    if status is GameStatus.CHECKMATE:
        return f"Checkmate! {winner(position).value.capitalize()} wins!"
    if status is GameStatus.STALEMATE:
        return "Stalemate!"
    if status is GameStatus.REPETITION:
        return "Draw by threefold repetition!"
    if status is GameStatus.INSUFFICIENT_MATERIAL:
        return "Draw by insufficient material!"
    if status is GameStatus.FIFTY_MOVES:
        return "Game drawn!"
    if status is GameStatus.CHECK:
        return "Check!"
    return ""


def result_text(position: Position) -> Optional[str]:
    """'White wins', 'Black wins', 'Draw' or None while the game is running."""
    if not rules.is_terminal(position):
        return None
    side = winner(position)
    if side is None:
        return "Draw"
    return f"{side.value.capitalize()} wins"


@dataclass
class MoveRecord:
    san: str
    uci: str
    by_player: bool


class _Session:
    """Shared move bookkeeping for live and daily games."""

    rating_delta = CONFIG.stats.live_rating_delta

    def __init__(self, player_color: Side, position: Optional[Position] = None,
                 rng: Optional[random.Random] = None, stats: Optional[StatsService] = None):
        self.player_color = player_color
        self.position = position or Position()
        self.history: List[str] = []
        self.rng = rng or random.Random(CONFIG.selector.rng_seed)
        self.stats = stats
        self.selector = MoveSelector()
        self._lock = threading.Lock()

    @property
    def status(self) -> GameStatus:
        return game_status(self.position)

    @property
    def is_over(self) -> bool:
        return rules.is_terminal(self.position)

    @property
    def players_turn(self) -> bool:
        return self.position.side_to_move is self.player_color

    def _opponent_difficulty(self) -> Difficulty:
        raise NotImplementedError

    def _push(self, move, by_player: bool) -> MoveRecord:
        legal = rules.parse_move(self.position, move)
        record = MoveRecord(rules.short_notation(legal, self.position),
                            rules.long_notation(legal), by_player)
        self.position = rules.apply_move(self.position, legal)
        self.history.append(record.san)
        self._touch()
        if self.is_over:
            self._finish()
        return record

    def _touch(self):
        pass

    def _finish(self):
        side = winner(self.position)
        logger.info("Game over: %s", describe_status(self.position))
        if self.stats is not None:
            self.stats.record_game(won=side is self.player_color, draw=side is None,
                                   rating_delta=self.rating_delta)

    def _opponent_move(self) -> MoveRecord:
        move = self.selector.select_move(self.position, self._opponent_difficulty(), self.rng)
        return self._push(move, by_player=False)

    def play(self, move: str) -> List[MoveRecord]:
        """Play the player's move and let the opponent answer.

        Returns the applied moves (player first). Raises IllegalMove,
        GameOver, NotPlayersTurn or SessionBusy without changing state.
        """
        if not self._lock.acquire(blocking=False):
            raise SessionBusy("A move is already being processed for this game")
        try:
            if self.is_over:
                raise GameOver(f"Game is already over: {describe_status(self.position)}")
            if not self.players_turn:
                raise NotPlayersTurn("It is not the player's turn")
            records = [self._push(move, by_player=True)]
            if not self.is_over:
                records.append(self._opponent_move())
            return records
        finally:
            self._lock.release()

    def opponent_opening(self) -> Optional[MoveRecord]:
        """Let the opponent move first when the player has Black."""
        if not self._lock.acquire(blocking=False):
            raise SessionBusy("A move is already being processed for this game")
        try:
            if self.players_turn or self.is_over:
                return None
            return self._opponent_move()
        finally:
            self._lock.release()

    def state(self) -> dict:
        return {
            "fen": self.position.fen,
            "player_color": self.player_color.value,
            "turn": self.position.side_to_move.value,
            "history": list(self.history),
            "status": self.status.value,
            "message": describe_status(self.position),
            "is_game_over": self.is_over,
            "result": result_text(self.position),
        }


class LiveGame(_Session):
    """A game against the computer at a fixed difficulty."""

    def __init__(self, difficulty: Difficulty, player_color: Side = Side.WHITE, **kwargs):
        super().__init__(player_color, **kwargs)
        self.difficulty = difficulty

    def _opponent_difficulty(self) -> Difficulty:
        return self.difficulty

    def state(self) -> dict:
        data = super().state()
        data["difficulty"] = self.difficulty.value
        return data


class DailyGame(_Session):
    """A correspondence game against a randomly named opponent who plays random moves."""

    rating_delta = CONFIG.stats.daily_rating_delta

    def __init__(self, game_id: str, opponent: str, player_color: Side,
                 last_move_time: Optional[str] = None, **kwargs):
        super().__init__(player_color, **kwargs)
        self.id = game_id
        self.opponent = opponent
        self.last_move_time = last_move_time or _now()

    def _opponent_difficulty(self) -> Difficulty:
        return Difficulty.EASY

    def _touch(self):
        self.last_move_time = _now()

    def state(self) -> dict:
        data = super().state()
        data.update({
            "id": self.id,
            "opponent": self.opponent,
            "last_move_time": self.last_move_time,
            "game_status": "completed" if self.is_over else "active",
        })
        return data

    def to_record(self) -> dict:
        """Storage form; the position is replayed from the start on load."""
        board = self.position.to_board()
        return {
            "id": self.id,
            "opponent": self.opponent,
            "playerColor": self.player_color.value,
            "fen": self.position.fen,
            "startFen": board.root().fen(),
            "moves": [m.uci() for m in board.move_stack],
            "moveHistory": list(self.history),
            "lastMoveTime": self.last_move_time,
            "status": "completed" if self.is_over else "active",
            "result": result_text(self.position),
        }

    @classmethod
    def from_record(cls, record: dict, **kwargs) -> "DailyGame":
        """Rebuild a game from ``to_record`` output.

        Records without ``moves`` only carry the current ``fen``; they load
        at that position without repetition history.
        """
        game = cls(record["id"], record["opponent"], Side(record["playerColor"]),
                   last_move_time=record.get("lastMoveTime"), **kwargs)
        if "moves" in record:
            board = chess.Board(record.get("startFen", chess.STARTING_FEN))
            for uci in record["moves"]:
                board.push_uci(uci)
            game.position = Position(board)
        else:
            game.position = Position.from_fen(record["fen"])
        game.history = list(record.get("moveHistory", []))
        return game


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class LiveGames:
    """In-memory registry of live games."""

    def __init__(self, stats: Optional[StatsService] = None):
        self.stats = stats
        self._games: Dict[str, LiveGame] = {}
        self._counter = 0
        self._lock = threading.Lock()

    def create(self, difficulty: Difficulty, player_color: Side,
               rng: Optional[random.Random] = None) -> Tuple[str, LiveGame]:
        with self._lock:
            self._counter += 1
            game_id = str(self._counter)
            game = LiveGame(difficulty, player_color, rng=rng, stats=self.stats)
            self._games[game_id] = game
        logger.info("Live game %s started: %s as %s", game_id, difficulty.value, player_color.value)
        game.opponent_opening()
        return game_id, game

    def get(self, game_id: str) -> LiveGame:
        try:
            return self._games[game_id]
        except KeyError:
            raise GameNotFound(f"No live game with id {game_id}")

    def delete(self, game_id: str) -> None:
        with self._lock:
            if self._games.pop(game_id, None) is None:
                raise GameNotFound(f"No live game with id {game_id}")
        logger.info("Live game %s deleted", game_id)

    def __len__(self) -> int:
        return len(self._games)


class DailyGames:
    """Daily games persisted in the store under ``dailyGames``."""

    def __init__(self, store: JsonStore, stats: Optional[StatsService] = None,
                 rng: Optional[random.Random] = None):
        self.store = store
        self.stats = stats
        self.rng = rng or random.Random(CONFIG.selector.rng_seed)
        self._games: Dict[str, DailyGame] = {}
        self._lock = threading.Lock()
        for record in self.store.get(DAILY_GAMES_KEY, []):
            try:
                game = DailyGame.from_record(record, rng=self.rng, stats=self.stats)
            except (ValueError, KeyError, TypeError, InvalidPosition) as e:
                logger.warning("Skipping unreadable daily game %r: %s", record, e)
                continue
            self._games[game.id] = game

    def _save(self):
        self.store.set(DAILY_GAMES_KEY, [g.to_record() for g in self._games.values()])

    def games(self) -> List[DailyGame]:
        return list(self._games.values())

    def create(self) -> DailyGame:
        with self._lock:
            game_id = str(time.time_ns())
            opponent = f"Player {self.rng.randrange(CONFIG.session.opponent_name_range)}"
            color = Side.WHITE if self.rng.random() > 0.5 else Side.BLACK
            game = DailyGame(game_id, opponent, color, rng=self.rng, stats=self.stats)
            self._games[game_id] = game
            game.opponent_opening()
            self._save()
        logger.info("Daily game %s created against %s, player has %s", game_id, opponent, color.value)
        return game

    def get(self, game_id: str) -> DailyGame:
        try:
            return self._games[game_id]
        except KeyError:
            raise GameNotFound(f"No daily game with id {game_id}")

    def play(self, game_id: str, move: str) -> List[MoveRecord]:
        game = self.get(game_id)
        records = game.play(move)
        with self._lock:
            self._save()
        return records

    def delete(self, game_id: str) -> None:
        with self._lock:
            if self._games.pop(game_id, None) is None:
                raise GameNotFound(f"No daily game with id {game_id}")
            self._save()

    def clear(self) -> None:
        with self._lock:
            self._games.clear()
            self.store.remove(DAILY_GAMES_KEY)
