"""Player statistics and rating bookkeeping."""

import logging
import threading
from dataclasses import asdict, dataclass, fields
from typing import Optional

from chessplatform.config import CONFIG
from chessplatform.storage import JsonStore

logger = logging.getLogger(__name__)

STATS_KEY = "chessStats"

# (minimum rating, tier name), highest first
RATING_TIERS = [
    (2400, "Grandmaster"),
    (2200, "International Master"),
    (2000, "FIDE Master"),
    (1800, "Expert"),
    (1600, "Class A"),
    (1400, "Class B"),
    (1200, "Class C"),
    (1000, "Class D"),
]


def rating_tier(rating: int) -> str:
    for threshold, name in RATING_TIERS:
        if rating >= threshold:
            return name
    return "Beginner"


@dataclass
class Stats:
    games_played: int = 0
    puzzles_solved: int = 0
    rating: int = CONFIG.stats.initial_rating
    win_rate: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0

    @classmethod
    def from_dict(cls, raw: dict) -> "Stats":
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in raw.items() if k in known})

    def to_dict(self) -> dict:
        return asdict(self)


class StatsService:
    """Read-modify-write access to the stored statistics.

    Every update holds one lock for the whole load, change and save, so
    games and puzzles finishing at the same time are all counted.
    """

    def __init__(self, store: JsonStore):
        self.store = store
        self._lock = threading.Lock()

    def load(self) -> Stats:
        return Stats.from_dict(self.store.get(STATS_KEY, {}))

    def save(self, stats: Stats) -> None:
        self.store.set(STATS_KEY, stats.to_dict())

    def record_game(self, won: bool, draw: bool = False,
                    rating_delta: Optional[int] = None) -> Stats:
        """Count a finished game. Draws leave the rating untouched."""
        delta = CONFIG.stats.live_rating_delta if rating_delta is None else rating_delta
        with self._lock:
            stats = self.load()
            stats.games_played += 1
            if draw:
                stats.draws += 1
            elif won:
                stats.wins += 1
                stats.rating += delta
            else:
                stats.losses += 1
                stats.rating = max(CONFIG.stats.rating_floor, stats.rating - delta)
            # percentage rounded half up
            stats.win_rate = (200 * stats.wins + stats.games_played) // (2 * stats.games_played)
            self.save(stats)
        logger.info("Game recorded (won=%s draw=%s), rating now %d", won, draw, stats.rating)
        return stats

    def record_puzzle_solved(self) -> Stats:
        with self._lock:
            stats = self.load()
            stats.puzzles_solved += 1
            stats.rating += CONFIG.stats.puzzle_rating_bonus
            self.save(stats)
        return stats

    def reset(self) -> Stats:
        with self._lock:
            stats = Stats()
            self.save(stats)
        return stats
