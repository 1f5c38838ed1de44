"""Command-line entry point for the CTrain arrival board."""

import argparse
import logging
import sys

from .board_tracker import BoardTracker
from .config import BoardConfig
from .display import ConsoleDisplay
from .scheduler import PollScheduler

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Show the next CTrains at City Hall, refreshed from the GTFS-Realtime feed."
    )
    parser.add_argument(
        "--once",
        action="store_true",
        help="Run a single cycle and exit.",
    )
    parser.add_argument(
        "--max-cycles",
        type=int,
        help="Stop after this many cycles (default: run until interrupted).",
    )
    parser.add_argument(
        "--env-file",
        help="Path to a .env file with CTRAINBOARD_* settings.",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO).",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        config = BoardConfig.from_env(args.env_file)
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    tracker = BoardTracker(config)
    scheduler = PollScheduler(tracker, ConsoleDisplay())
    max_cycles = 1 if args.once else args.max_cycles

    try:
        scheduler.run_forever(max_cycles=max_cycles)
    except KeyboardInterrupt:
        logger.info("Stopped")
    finally:
        tracker.cleanup()
    return 0


if __name__ == "__main__":
    sys.exit(main())
