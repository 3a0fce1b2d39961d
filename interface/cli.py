"""Play a live game against the computer in the terminal."""

import argparse
import random
import sys
import time

from chessplatform.config import CONFIG, setup_logging
from chessplatform.core.board import Side
from chessplatform.core.selector import Difficulty
from chessplatform.errors import IllegalMove
from chessplatform.session import LiveGame, describe_status
from chessplatform.stats import StatsService, rating_tier
from chessplatform.storage import JsonStore


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Play chess against the computer.")
    parser.add_argument("--difficulty", choices=[d.value for d in Difficulty],
                        default=Difficulty.MEDIUM.value)
    parser.add_argument("--color", choices=[s.value for s in Side], default=Side.WHITE.value)
    parser.add_argument("--seed", type=int, default=None, help="seed for the computer's choices")
    parser.add_argument("--no-stats", action="store_true", help="do not record the result")
    return parser.parse_args(argv)


def main(argv=None, input_fn=input) -> int:
    args = parse_args(argv)
    setup_logging()

    stats = None if args.no_stats else StatsService(JsonStore(CONFIG.store_path))
    game = LiveGame(Difficulty(args.difficulty), Side(args.color),
                    rng=random.Random(args.seed), stats=stats)
    delay = CONFIG.session.reply_delay_ms / 1000

    opening = game.opponent_opening()
    if opening:
        print(f"Computer plays: {opening.san}")

    while not game.is_over:
        print(game.position)
        print("----------------------------")
        try:
            user_move = input_fn("Your move (SAN or UCI, e.g. Nf3 or g1f3): ")
        except EOFError:
            print()
            return 1
        try:
            records = game.play(user_move)
        except IllegalMove:
            print("Illegal move, try again.")
            continue
        if len(records) > 1:
            time.sleep(delay)
            print(f"Computer plays: {records[1].san}")
        status = describe_status(game.position)
        if status:
            print(status)

    print(game.position)
    print("Game Over")
    print(f"Result: {game.state()['result']}")
    if stats is not None:
        s = stats.load()
        print(f"Rating: {s.rating} ({rating_tier(s.rating)})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
