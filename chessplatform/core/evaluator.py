"""Material-only static evaluator."""

import chess

from chessplatform.config import CONFIG
from chessplatform.core.board import Position


class Evaluator:
    def __init__(self, piece_values=None):
        values = piece_values or CONFIG.eval.piece_values
        # Keyed by python-chess piece type for the square loop.
        self.values = {
            pt: values.get(chess.piece_name(pt).upper(), 0)
            for pt in chess.PIECE_TYPES
        }

    def evaluate(self, position: Position) -> int:
        """Return material balance in pawns, positive favors White.

        The sign does not depend on the side to move; callers decide
        whether to maximize or minimize.
        """
        score = 0
        for sq in chess.SQUARES:
            piece = position.piece_at(sq)
            if piece is None:
                continue
            value = self.values[piece.piece_type]
            if piece.color == chess.WHITE:
                score += value
            else:
                score -= value
        return score
