"""Move decision core: rules adapter, evaluator, move selector and puzzle verifier."""

from .board import Position, Side
from .evaluator import Evaluator
from .selector import Difficulty, MoveSelector, ScoredMove
from .puzzle import Outcome, OutcomeKind, PuzzleVerifier, RejectReason
