import enum
import logging
import random
from dataclasses import dataclass
from typing import List, Optional

import chess

from chessplatform.config import CONFIG
from chessplatform.core.board import (
    Position, Side, apply_move, legal_moves, long_notation,
)
from chessplatform.core.evaluator import Evaluator
from chessplatform.errors import NoLegalMoves

logger = logging.getLogger(__name__)


class Difficulty(enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


@dataclass(frozen=True)
class ScoredMove:
    move: chess.Move
    score: int


def medium_slice_size(n_moves: int, percent: Optional[int] = None,
                      minimum: Optional[int] = None) -> int:
    """Number of top-ranked moves the medium tier chooses from: max(minimum, ceil(percent% * n))."""
    percent = CONFIG.selector.medium_top_percent if percent is None else percent
    minimum = CONFIG.selector.medium_min_candidates if minimum is None else minimum
    return max(minimum, -(-n_moves * percent // 100))


class MoveSelector:
    """Chooses the computer's move for a difficulty tier.

    easy   - uniform random legal move.
    medium - random pick among the best slice by one-ply material.
    hard   - best move by a two-ply material search, deterministic.
    """

    def __init__(self, evaluator: Optional[Evaluator] = None):
        self.evaluator = evaluator or Evaluator()

    def select_move(self, position: Position, difficulty: Difficulty,
                    rng: Optional[random.Random] = None) -> chess.Move:
        moves = legal_moves(position)
        if not moves:
            raise NoLegalMoves(f"No legal moves in {position.fen}")
        rng = rng or random.Random(CONFIG.selector.rng_seed)
        mover = position.side_to_move

        if difficulty is Difficulty.EASY:
            move = rng.choice(moves)
        elif difficulty is Difficulty.MEDIUM:
            ranked = self._rank(self._score_one_ply(position, moves), mover)
            top = ranked[:medium_slice_size(len(ranked))]
            move = rng.choice(top).move
        elif difficulty is Difficulty.HARD:
            move = self._rank(self._score_two_ply(position, moves), mover)[0].move
        else:
            raise ValueError(f"Unknown difficulty: {difficulty!r}")

        logger.debug("%s picked %s from %d moves for %s",
                     difficulty.value, long_notation(move), len(moves), mover.value)
        return move

    def _score_one_ply(self, position: Position, moves: List[chess.Move]) -> List[ScoredMove]:
        return [ScoredMove(m, self.evaluator.evaluate(apply_move(position, m))) for m in moves]

    def _score_two_ply(self, position: Position, moves: List[chess.Move]) -> List[ScoredMove]:
        scored = []
        for m1 in moves:
            p1 = apply_move(position, m1)
            score = self.evaluator.evaluate(p1)
            replies = legal_moves(p1)
            if replies:
                reply_scores = [self.evaluator.evaluate(apply_move(p1, r)) for r in replies]
                # The opponent picks the reply that favours it; adding that
                # score pulls m1 away from the mover's end of the ranking.
                if p1.side_to_move is Side.WHITE:
                    score += max(reply_scores)
                else:
                    score += min(reply_scores)
            scored.append(ScoredMove(m1, score))
        return scored

    @staticmethod
    def _rank(scored: List[ScoredMove], mover: Side) -> List[ScoredMove]:
        """Best first from the mover's point of view; stable so ties keep generation order."""
        if mover is Side.WHITE:
            return sorted(scored, key=lambda s: -s.score)
        return sorted(scored, key=lambda s: s.score)


def select_move(position: Position, difficulty: Difficulty,
                rng: Optional[random.Random] = None) -> chess.Move:
    return MoveSelector().select_move(position, difficulty, rng)
