"""The fixed puzzle set and puzzle sessions built on PuzzleVerifier."""

import enum
import logging
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from chessplatform.core.board import Position, Side
from chessplatform.core.puzzle import Outcome, OutcomeKind, PuzzleVerifier
from chessplatform.errors import PuzzleNotFound, SessionBusy
from chessplatform.stats import StatsService

logger = logging.getLogger(__name__)


class PuzzleLevel(enum.Enum):
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


@dataclass(frozen=True)
class Puzzle:
    id: int
    fen: str
    solution: Tuple[str, ...]
    player_color: Side
    level: PuzzleLevel
    theme: str


PUZZLES: List[Puzzle] = [
    Puzzle(1, "r1bqkb1r/pppp1ppp/2n2n2/4p2Q/2B1P3/8/PPPP1PPP/RNB1K1NR w KQkq - 0 1",
           ("Qxf7",), Side.WHITE, PuzzleLevel.BEGINNER, "Back Rank Mate"),
    Puzzle(2, "r1bqk2r/ppp2ppp/2n5/2bpp3/2B1P3/2NP1Q2/PPP2PPP/R1B1K2R w KQkq - 0 1",
           ("Qxf7",), Side.WHITE, PuzzleLevel.BEGINNER, "Scholar's Mate Pattern"),
    Puzzle(3, "r2qkb1r/ppp2ppp/2n5/3pP3/3Pn1b1/2N2N2/PPP2PPP/R1BQKB1R w KQkq - 0 1",
           ("Nxe4",), Side.WHITE, PuzzleLevel.INTERMEDIATE, "Removing Defender"),
    Puzzle(4, "r1bqk2r/pppp1ppp/2n2n2/2b1p3/2B1P3/3P1N2/PPP2PPP/RNBQK2R w KQkq - 0 1",
           ("Bxf7", "Kxf7", "Ng5"), Side.WHITE, PuzzleLevel.INTERMEDIATE, "Fork"),
    Puzzle(5, "r2qkb1r/ppp2ppp/2n2n2/3pp1N1/2B1P3/8/PPPP1PPP/RNBQK2R w KQkq - 0 1",
           ("Nxf7",), Side.WHITE, PuzzleLevel.BEGINNER, "Knight Fork"),
    Puzzle(6, "r1bqkb1r/pppp1Qpp/2n2n2/4p3/2B1P3/8/PPPP1PPP/RNB1K1NR b KQkq - 0 1",
           (), Side.BLACK, PuzzleLevel.BEGINNER, "Checkmate Recognition"),
    Puzzle(7, "r1b1k2r/ppppqppp/2n2n2/2b5/2B1P3/2N2N2/PPPP1PPP/R1BQ1RK1 w kq - 0 1",
           ("Bxf7", "Kf8", "Bb3"), Side.WHITE, PuzzleLevel.INTERMEDIATE, "Discovered Attack"),
    Puzzle(8, "r1bqk2r/pppp1ppp/2n2n2/2b1p3/1PB1P3/5N2/P1PP1PPP/RNBQK2R w KQkq - 0 1",
           ("Bxf7",), Side.WHITE, PuzzleLevel.BEGINNER, "Exposed King"),
    Puzzle(9, "rnbqkb1r/pppp1ppp/5n2/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 0 1",
           ("Ng5",), Side.WHITE, PuzzleLevel.INTERMEDIATE, "Attacking f7"),
    Puzzle(10, "r1bqkb1r/pppp1ppp/2n5/4p3/2BnP3/5N2/PPPP1PPP/RNBQK2R w KQkq - 0 1",
           ("Nxe5",), Side.WHITE, PuzzleLevel.INTERMEDIATE, "Tactical Vision"),
]


def filter_puzzles(level: Optional[PuzzleLevel] = None) -> List[Puzzle]:
    if level is None:
        return list(PUZZLES)
    return [p for p in PUZZLES if p.level is level]


def get_puzzle(puzzle_id: int) -> Puzzle:
    for p in PUZZLES:
        if p.id == puzzle_id:
            return p
    raise PuzzleNotFound(f"No puzzle with id {puzzle_id}")


def next_index(index: int, count: int) -> int:
    """Index of the next puzzle, wrapping to the first."""
    return index + 1 if index < count - 1 else 0


def previous_index(index: int, count: int) -> int:
    """Index of the previous puzzle, wrapping to the last."""
    return index - 1 if index > 0 else count - 1


class PuzzleSession:
    """One player's attempt at a puzzle.

    Tracks the hints requested and credits the statistics exactly once when
    the puzzle is solved. A puzzle with an empty solution is a mate that only
    has to be recognised, so it counts as solved as soon as it is loaded.
    """

    def __init__(self, puzzle: Puzzle, stats: Optional[StatsService] = None):
        self.puzzle = puzzle
        self.stats = stats
        self.verifier = PuzzleVerifier(Position.from_fen(puzzle.fen), puzzle.solution)
        self.moves_made: List[str] = []
        self.hints_used = 0
        self._credited = False
        self._lock = threading.Lock()
        self._credit_if_solved()

    @property
    def solved(self) -> bool:
        return self.verifier.solved

    def _credit_if_solved(self):
        if self.solved and not self._credited:
            self._credited = True
            logger.info("Puzzle %d solved", self.puzzle.id)
            if self.stats is not None:
                self.stats.record_puzzle_solved()

    def submit_move(self, move: str) -> Outcome:
        if not self._lock.acquire(blocking=False):
            raise SessionBusy(f"Puzzle {self.puzzle.id} is busy")
        try:
            outcome = self.verifier.submit_move(move)
            if outcome.accepted:
                self.moves_made.append(outcome.player_move)
                if outcome.reply:
                    self.moves_made.append(outcome.reply)
            if outcome.kind is OutcomeKind.SOLVED:
                self._credit_if_solved()
            return outcome
        finally:
            self._lock.release()

    def hint(self) -> Optional[str]:
        with self._lock:
            hint = self.verifier.hint()
            if hint is not None:
                self.hints_used += 1
            return hint

    def reset(self) -> None:
        with self._lock:
            self.verifier.reset()
            self.moves_made = []
            self.hints_used = 0

    def to_dict(self) -> dict:
        return {
            "id": self.puzzle.id,
            "fen": self.verifier.position.fen,
            "start_fen": self.puzzle.fen,
            "player_color": self.puzzle.player_color.value,
            "difficulty": self.puzzle.level.value,
            "theme": self.puzzle.theme,
            "cursor": self.verifier.cursor,
            "solution_length": len(self.puzzle.solution),
            "moves_made": list(self.moves_made),
            "hints_used": self.hints_used,
            "solved": self.solved,
        }


class PuzzleBook:
    """Live puzzle sessions keyed by puzzle id."""

    def __init__(self, stats: Optional[StatsService] = None):
        self.stats = stats
        self._sessions: Dict[int, PuzzleSession] = {}
        self._lock = threading.Lock()

    def session(self, puzzle_id: int) -> PuzzleSession:
        with self._lock:
            if puzzle_id not in self._sessions:
                self._sessions[puzzle_id] = PuzzleSession(get_puzzle(puzzle_id), self.stats)
            return self._sessions[puzzle_id]

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
