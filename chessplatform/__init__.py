"""ChessPlatform: play the computer, daily games, puzzles and statistics."""

__version__ = "1.0.0"
