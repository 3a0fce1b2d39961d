"""Scripted puzzle line checker.

A puzzle line alternates player moves and scripted opponent replies,
starting with the player's move. The verifier keeps a cursor into the line
and, after each correct player move, plays the scripted reply itself.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import chess

from chessplatform.core.board import (
    MoveLike, Position, apply_move, long_notation, parse_move, short_notation,
)
from chessplatform.errors import IllegalMove, InvalidPuzzle

logger = logging.getLogger(__name__)


class OutcomeKind(enum.Enum):
    REJECTED = "rejected"
    ADVANCED = "advanced"  # correct, waiting for the next player move
    SOLVED = "solved"


class RejectReason(enum.Enum):
    ILLEGAL_MOVE = "illegal_move"
    WRONG_MOVE = "wrong_move"


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    cursor: int
    reason: Optional[RejectReason] = None
    player_move: Optional[str] = None  # SAN of the accepted player move
    reply: Optional[str] = None        # SAN of the scripted reply that was played

    @property
    def accepted(self) -> bool:
        return self.kind is not OutcomeKind.REJECTED


def _strip_markers(san: str) -> str:
    return san.rstrip("+#")


def matches(move: chess.Move, position: Position, expected: str) -> bool:
    """True when ``expected`` names ``move`` in SAN or long notation.

    Check markers are optional and a queen promotion may be written without
    its suffix.
    """
    expected = expected.strip()
    san = short_notation(move, position)
    forms = {san, _strip_markers(san), long_notation(move)}
    if move.promotion == chess.QUEEN:
        forms.add(_strip_markers(san).replace("=Q", ""))
        forms.add(long_notation(move)[:4])
    return expected in forms or _strip_markers(expected) in forms


class PuzzleVerifier:
    def __init__(self, start: Position, line: Sequence[str]):
        self.start = start
        self.line: Tuple[str, ...] = tuple(line)
        self.position = start
        self.cursor = 0

    @property
    def solved(self) -> bool:
        return self.cursor >= len(self.line)

    def reset(self) -> None:
        self.position = self.start
        self.cursor = 0

    def hint(self) -> Optional[str]:
        """The move the player is expected to play next, if any."""
        if self.solved:
            return None
        return self.line[self.cursor]

    def submit_move(self, candidate: MoveLike) -> Outcome:
        if self.solved:
            return Outcome(OutcomeKind.REJECTED, self.cursor, RejectReason.WRONG_MOVE)

        try:
            move = parse_move(self.position, candidate)
        except IllegalMove:
            return Outcome(OutcomeKind.REJECTED, self.cursor, RejectReason.ILLEGAL_MOVE)

        if not matches(move, self.position, self.line[self.cursor]):
            return Outcome(OutcomeKind.REJECTED, self.cursor, RejectReason.WRONG_MOVE)

        player_san = short_notation(move, self.position)
        position = apply_move(self.position, move)
        cursor = self.cursor + 1
        reply_san = None

        if cursor < len(self.line):
            scripted = self.line[cursor]
            try:
                reply = parse_move(position, scripted)
            except IllegalMove as e:
                logger.error("Scripted reply %r at index %d is not playable in %s",
                             scripted, cursor, position.fen)
                raise InvalidPuzzle(f"Scripted reply {scripted!r} is not legal") from e
            reply_san = short_notation(reply, position)
            position = apply_move(position, reply)
            cursor += 1

        self.position = position
        self.cursor = cursor
        kind = OutcomeKind.SOLVED if self.solved else OutcomeKind.ADVANCED
        return Outcome(kind, cursor, player_move=player_san, reply=reply_san)
