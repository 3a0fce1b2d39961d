"""Immutable position wrapper over python-chess plus the rules helpers the core needs."""

import enum
from typing import List, Optional, Union

import chess

from chessplatform.errors import IllegalMove, InvalidPosition


class Side(enum.Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def color(self) -> chess.Color:
        return chess.WHITE if self is Side.WHITE else chess.BLACK

    @property
    def opponent(self) -> "Side":
        return Side.BLACK if self is Side.WHITE else Side.WHITE

    @classmethod
    def from_color(cls, color: chess.Color) -> "Side":
        return cls.WHITE if color == chess.WHITE else cls.BLACK


class Position:
    """A chess position that is never mutated after construction.

    The wrapped board keeps its move stack so repetition draws are still
    detected, but every move produces a fresh Position.
    """

    __slots__ = ("_board",)

    def __init__(self, board: Optional[chess.Board] = None):
        """Initialize from a board (copied) or the standard starting position."""
        self._board = board.copy() if board is not None else chess.Board()

    @classmethod
    def from_fen(cls, fen: str) -> "Position":
        try:
            return cls(chess.Board(fen))
        except ValueError as e:
            raise InvalidPosition(f"Invalid FEN: {e}") from e

    @property
    def fen(self) -> str:
        return self._board.fen()

    @property
    def side_to_move(self) -> Side:
        return Side.from_color(self._board.turn)

    def piece_at(self, square: chess.Square) -> Optional[chess.Piece]:
        return self._board.piece_at(square)

    def to_board(self) -> chess.Board:
        """Return a private copy of the underlying board."""
        return self._board.copy()

    def mirror(self) -> "Position":
        """Flip the board vertically and swap piece colours."""
        return Position(self._board.mirror())

    def __eq__(self, other):
        if not isinstance(other, Position):
            return NotImplemented
        return self.fen == other.fen

    def __hash__(self):
        return hash(self.fen)

    def __repr__(self):
        return f"Position({self.fen!r})"

    def __str__(self):
        return str(self._board)


MoveLike = Union[chess.Move, str]


def legal_moves(position: Position) -> List[chess.Move]:
    """Legal moves in python-chess generation order."""
    return list(position._board.legal_moves)


def parse_move(position: Position, move: MoveLike) -> chess.Move:
    """Turn a chess.Move, SAN string or UCI string into a legal move.

    Raises IllegalMove when the text cannot be parsed or the move is not
    legal in ``position``.
    """
    board = position._board
    if isinstance(move, chess.Move):
        if move in board.legal_moves:
            return move
        raise IllegalMove(f"Illegal move: {move.uci()}")
    text = move.strip()
    try:
        parsed = board.parse_san(text)
        if parsed:  # parse_san accepts "--" as a null move
            return parsed
    except ValueError:
        pass
    try:
        parsed = chess.Move.from_uci(text)
    except ValueError:
        raise IllegalMove(f"Unparseable move: {move!r}")
    if parsed in board.legal_moves:
        return parsed
    raise IllegalMove(f"Illegal move: {move!r}")


def apply_move(position: Position, move: MoveLike) -> Position:
    """Return the position after ``move``; the input position is untouched."""
    legal = parse_move(position, move)
    board = position.to_board()
    board.push(legal)
    return Position(board)


def side_to_move(position: Position) -> Side:
    return position.side_to_move


def short_notation(move: chess.Move, position: Position) -> str:
    """SAN of ``move`` played from ``position`` (e.g. 'Qxf7#')."""
    return position._board.san(move)


def long_notation(move: chess.Move) -> str:
    """From square, to square and promotion piece (e.g. 'e7e8q')."""
    return move.uci()


def is_checkmate(position: Position) -> bool:
    return position._board.is_checkmate()


def is_stalemate(position: Position) -> bool:
    return position._board.is_stalemate()


def is_repetition(position: Position) -> bool:
    return position._board.is_repetition(3)


def is_insufficient_material(position: Position) -> bool:
    return position._board.is_insufficient_material()


def is_fifty_moves(position: Position) -> bool:
    return position._board.is_fifty_moves()


def is_draw(position: Position) -> bool:
    """Draw by stalemate, threefold repetition, insufficient material or fifty-move rule."""
    return (is_stalemate(position) or is_repetition(position)
            or is_insufficient_material(position) or is_fifty_moves(position))


def is_check(position: Position) -> bool:
    return position._board.is_check()


def is_terminal(position: Position) -> bool:
    return is_checkmate(position) or is_draw(position)
