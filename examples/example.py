"""Example usage of BoardTracker."""

import logging
import sys
from pathlib import Path

# Add src to path so we can import ctrainboard
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from ctrainboard import BoardConfig, BoardTracker, PollContext

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


def print_board():
    """Fetch and display the next trains and the current alert at City Hall."""
    config = BoardConfig.from_env()
    tracker = BoardTracker(config)
    context = PollContext()

    print(f"\n{'='*70}")
    print(f"City Hall (west {config.west_stop_id} / east {config.east_stop_id})")
    print(f"{'='*70}\n")

    try:
        result = tracker.fetch_board(context)
        if not result.has_data:
            print(f"No data this cycle: {result.error}")
        else:
            for label, arrivals in (("WESTBOUND", result.board.west), ("EASTBOUND", result.board.east)):
                print(f"{label}:")
                if not arrivals:
                    print("  No trains")
                for arrival in arrivals:
                    print(
                        f"  {arrival.route_color.title()} line: {arrival.minutes_until_arrival} min "
                        f"→ {arrival.destination} ({arrival.boarding_status})"
                    )
                print()

        alert = tracker.fetch_alert(context)
        print("SERVICE ALERT:")
        print(f"  {alert.message if alert.active else 'No service alerts'}")
        print("\n" + "=" * 70 + "\n")
    finally:
        tracker.cleanup()


if __name__ == "__main__":
    print_board()
