"""Exception hierarchy shared by the core, the sessions and the interfaces."""


class ChessPlatformError(Exception):
    """Base class for every error raised by chessplatform."""


class NoLegalMoves(ChessPlatformError):
    """The move selector was asked to move in a position with no legal moves.

    Callers are expected to check ``is_terminal`` first, so seeing this
    means the caller has a logic error.
    """


class IllegalMove(ChessPlatformError):
    """A move could not be parsed or is not legal in the given position."""


class InvalidPosition(ChessPlatformError):
    """A FEN string could not be turned into a position."""


class InvalidPuzzle(ChessPlatformError):
    """A scripted puzzle line contains a move that cannot be played."""


class GameOver(ChessPlatformError):
    """A move was submitted to a session whose game has already ended."""


class NotPlayersTurn(ChessPlatformError):
    """The player tried to move while it is the opponent's turn."""


class SessionBusy(ChessPlatformError):
    """Another call is already running against the same session."""


class GameNotFound(ChessPlatformError):
    pass


class PuzzleNotFound(ChessPlatformError):
    pass
