"""
ExpertCart - Expert-Driven Product Reviews + Purchasing

CLI entry point for the interactive catalog session.
"""

import argparse
import logging
import sys

from src.errors import StorageError
from src.session import CatalogSession
from src.shell import InteractiveShell
import config.settings as settings


def setup_logging(log_level: str = "INFO", log_file: str = settings.LOG_FILE, verbose: bool = False):
    """Configure logging for the entire application."""
    handlers = [logging.FileHandler(log_file)]
    if verbose:
        # Logs on stderr so they don't interleave with menu output on stdout
        handlers.append(logging.StreamHandler(sys.stderr))
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format=settings.LOG_FORMAT,
        handlers=handlers
    )


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="ExpertCart - Expert-Driven Product Reviews + Purchasing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Start an empty session
  python main.py

  # Start from a saved snapshot
  python main.py --snapshot data/catalog.json --load

  # Write bills somewhere else and log to the console too
  python main.py --bills-dir /tmp/bills --verbose --log-level DEBUG
        """
    )

    parser.add_argument(
        "--snapshot",
        default=str(settings.SNAPSHOT_PATH),
        help=f"Default snapshot path for save/load (default: {settings.SNAPSHOT_PATH})"
    )

    parser.add_argument(
        "--load",
        action="store_true",
        help="Load the snapshot before starting the menu"
    )

    parser.add_argument(
        "--bills-dir",
        default=str(settings.BILLS_DIR),
        help=f"Directory for bill files (default: {settings.BILLS_DIR})"
    )

    parser.add_argument(
        "--output-dir",
        default=str(settings.OUTPUT_ROOT),
        help=f"Directory for reports (default: {settings.OUTPUT_ROOT})"
    )

    parser.add_argument(
        "--log-level",
        default=settings.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help=f"Logging level (default: {settings.LOG_LEVEL})"
    )

    parser.add_argument(
        "--log-file",
        default=settings.LOG_FILE,
        help=f"Log file (default: {settings.LOG_FILE})"
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Also log to stderr"
    )

    args = parser.parse_args()

    # Setup logging
    setup_logging(args.log_level, args.log_file, args.verbose)
    logger = logging.getLogger(__name__)

    session = CatalogSession(bills_dir=args.bills_dir, output_dir=args.output_dir)

    if args.load:
        try:
            session.load(args.snapshot)
            print(f"Loaded from {args.snapshot}")
        except StorageError as e:
            logger.error(f"Startup load failed: {e}")
            print(f"Error: {e}")
            sys.exit(1)

    logger.info("Starting interactive session")
    try:
        InteractiveShell(session, snapshot_path=args.snapshot).run()
    except Exception as e:
        logger.error(f"Session crashed: {e}", exc_info=True)
        print(f"\n❌ Session failed: {e}")
        print(f"Check {args.log_file} for details")
        sys.exit(1)

    logger.info("Session ended")
    sys.exit(0)


if __name__ == "__main__":
    main()
