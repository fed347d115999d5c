"""
Main entry point for the nextboard display engine.
Handles CLI arguments, environment setup, and application lifecycle.
"""

import asyncio
import json
import signal
import sys
import argparse
from datetime import datetime
from pathlib import Path
from dotenv import load_dotenv

# Load .env before config reads the environment
load_dotenv(Path.cwd() / ".env")

from config.logging_config import setup_logging, set_level  # noqa: E402
from nextboard.core.coordinator import BoardCoordinator  # noqa: E402
from nextboard.engine.ranker import rank  # noqa: E402
from nextboard.reminder.repository import ReminderRepository  # noqa: E402

# Setup logging first
logger = setup_logging()


def parse_arguments(argv=None):
    """
    Parse command line arguments.

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        description="nextboard - shared-display next task board"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    parser.add_argument(
        "--db",
        default=None,
        help="Path to the SQLite reminder store (default from settings)"
    )

    parser.add_argument(
        "--import",
        dest="import_file",
        default=None,
        help="Load a JSON list of reminder records into the store before starting"
    )

    parser.add_argument(
        "--once",
        action="store_true",
        help="Print the current board as JSON and exit"
    )

    parser.add_argument(
        "--no-gpio",
        action="store_true",
        help="Disable GPIO (LED) for development on non-Pi systems"
    )

    parser.add_argument(
        "--no-sound",
        action="store_true",
        help="Disable alert sounds"
    )

    return parser.parse_args(argv)


def import_reminders(repository: ReminderRepository, path: Path) -> int:
    """
    Load reminder records from a JSON file.

    Args:
        repository: Target store
        path: File containing a JSON list of records

    Returns:
        Number of records imported
    """
    records = json.loads(path.read_text())
    imported = 0

    for record in records:
        try:
            repository.create(record)
            imported += 1
        except Exception as e:
            logger.error(f"Skipping record {record.get('title')!r}: {e}")

    logger.info(f"Imported {imported}/{len(records)} reminders from {path}")
    return imported


def print_board(repository: ReminderRepository) -> None:
    """Rank the stored reminders for the current instant and print them."""
    reminders, board_settings = repository.fetch_snapshot()
    state = rank(reminders, datetime.now(), board_settings)
    print(json.dumps(state.to_dict(), indent=2))


async def main(argv=None):
    """Main application entry point."""
    args = parse_arguments(argv)

    if args.debug:
        set_level("DEBUG")
        logger.info("Debug logging enabled")

    if args.import_file or args.once:
        repository = ReminderRepository(args.db)

        if args.import_file:
            import_reminders(repository, Path(args.import_file))

        if args.once:
            print_board(repository)
            return 0

    logger.info("=" * 60)
    logger.info("nextboard display engine")
    logger.info("=" * 60)

    coordinator = BoardCoordinator(
        db_path=args.db,
        enable_sound=not args.no_sound,
        enable_gpio=not args.no_gpio
    )

    # Setup signal handlers for graceful shutdown
    shutdown_event = asyncio.Event()

    def signal_handler(sig, frame):
        """Handle shutdown signals."""
        logger.info(f"Received signal {sig}, shutting down...")
        shutdown_event.set()

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        if not await coordinator.initialize():
            logger.error("Failed to initialize application")
            return 1

        await coordinator.start()

        logger.info("Board running, press Ctrl+C to stop")

        await shutdown_event.wait()

    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")

    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        return 1

    finally:
        logger.info("Shutting down...")
        await coordinator.stop()

    logger.info("Application stopped")
    return 0


def run():
    """Console script entry point."""
    try:
        sys.exit(asyncio.run(main()))

    except Exception as e:
        logger.error(f"Fatal error in main: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    run()
