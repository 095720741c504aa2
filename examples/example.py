"""Example usage of StopBoard."""

import logging
import sys
from pathlib import Path

# Add src to path so we can import stopboard
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from stopboard import BoardType, GTFSLoader, StopBoard
from stopboard.errors import StopBoardError

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

DB_PATH = "gtfs.sqlite"


def format_offset(offset) -> str:
    """Format a stop time offset as HH:MM, wrapping past midnight."""
    minutes = int(offset.total_seconds()) // 60
    return f"{(minutes // 60) % 24:02d}:{minutes % 60:02d}"


def print_board(station_input: str, board_type: BoardType = BoardType.DEPARTURE):
    """
    Fetch and display the board for a station.

    Args:
        station_input: Station name or stop ID (e.g., "Frankfurt" or "8000105")
        board_type: Show arrivals or departures
    """
    print(f"\n{'='*70}")
    print(f"Fetching {board_type.value}s for: {station_input}")
    print(f"{'='*70}\n")

    stop_board = None
    try:
        stop_board = StopBoard(DB_PATH)
        data = stop_board.get_board(station_input, board_type)

        print(f"Station: {data.station.name}")
        print(f"Stop ID: {data.station.stop_id}")
        print(f"Reference time: {data.reference_time.strftime('%Y-%m-%d %H:%M')}\n")

        print(f"{board_type.value.upper()}S:")
        print("-" * 70)
        if data.stops:
            for stop in data.stops:
                print(f"  {format_offset(stop.offset(board_type))}  {stop.short_name:<10} → {stop.head_sign}")
        else:
            print(f"  No {board_type.value}s found")

        print("\n" + "=" * 70 + "\n")

    # Parse errors are ValueErrors as well
    except StopBoardError as e:
        logger.error(f"Failed to build board: {e}", exc_info=True)
        print(f"Error: {e}")
        sys.exit(1)
    except ValueError as e:
        print(f"Error: {e}")
        print("Try searching by station name (e.g., 'Frankfurt')")
        sys.exit(1)
    finally:
        if stop_board is not None:
            stop_board.close()


if __name__ == "__main__":
    # Usage: example.py --load <gtfs.zip>
    #        example.py [--arrivals] <station>
    args = sys.argv[1:]
    if len(args) == 2 and args[0] == "--load":
        GTFSLoader(DB_PATH).load_from_zip(args[1])
        sys.exit(0)

    board_type = BoardType.DEPARTURE
    if args and args[0] == "--arrivals":
        board_type = BoardType.ARRIVAL
        args = args[1:]

    if not args:
        print("Usage: example.py [--arrivals] <station> | example.py --load <gtfs.zip>")
        sys.exit(1)

    print_board(" ".join(args), board_type)
