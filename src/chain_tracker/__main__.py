"""
Chain tracker CLI entry point.

Track a ledger endpoint and serve its view state to displays.

Usage::

    python -m chain_tracker --rpc-url http://localhost:50012
    python -m chain_tracker --rpc-url http://localhost:50012 --port 5060 --page-size 25

Options:
    --rpc-url              JSON-RPC endpoint of the node to track (required)
    --host                 Address the display API binds to (default: 127.0.0.1)
    --port                 Port the display API listens on (default: 5060)
    --poll-interval        Seconds between chain height checks (default: 3)
    --page-size            Blocks per displayed page (default: 50)
    --pagination-distance  Lookahead kept above a selected block (default: 15)
    --max-retries          Attempts per remote read (default: 5)
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal

from chain_tracker.api import ApiServer, ApiServerConfig, DisplayHost
from chain_tracker.tracker import TrackerConfig, TrackerSession
from chain_tracker.tracker.config import (
    BLOCKS_PER_PAGE,
    MAX_RETRIES,
    PAGINATION_DISTANCE,
    REFRESH_INTERVAL,
)

logger = logging.getLogger(__name__)


class ColoredFormatter(logging.Formatter):
    """Logging formatter with ANSI colors for better readability."""

    GREY = "\x1b[38;5;244m"
    BLUE = "\x1b[38;5;39m"
    GREEN = "\x1b[38;5;40m"
    YELLOW = "\x1b[38;5;220m"
    RED = "\x1b[38;5;196m"
    BOLD_RED = "\x1b[38;5;196;1m"
    CYAN = "\x1b[38;5;51m"
    RESET = "\x1b[0m"

    LEVEL_COLORS = {
        logging.DEBUG: GREY,
        logging.INFO: GREEN,
        logging.WARNING: YELLOW,
        logging.ERROR: RED,
        logging.CRITICAL: BOLD_RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors."""
        color = self.LEVEL_COLORS.get(record.levelno, self.RESET)

        timestamp = f"{self.CYAN}{self.formatTime(record, self.datefmt)}{self.RESET}"
        levelname = f"{color}{record.levelname:8}{self.RESET}"
        name = f"{self.BLUE}{record.name}{self.RESET}"

        return f"{timestamp} {levelname} {name}: {record.getMessage()}"


def setup_logging(verbose: bool = False, no_color: bool = False) -> None:
    """Configure logging for the tracker with optional colors."""
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler()
    handler.setLevel(level)

    if no_color:
        formatter = logging.Formatter(
            "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    else:
        formatter = ColoredFormatter(datefmt="%Y-%m-%d %H:%M:%S")

    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level)
    root.addHandler(handler)


def build_config(args: argparse.Namespace) -> TrackerConfig:
    """Collect tracker parameters from parsed CLI arguments."""
    return TrackerConfig(
        refresh_interval=args.poll_interval,
        blocks_per_page=args.page_size,
        pagination_distance=args.pagination_distance,
        max_retries=args.max_retries,
    )


async def run_tracker(
    rpc_url: str,
    config: TrackerConfig,
    api_config: ApiServerConfig,
) -> None:
    """
    Track `rpc_url` and serve its view state until SIGINT or SIGTERM.

    Args:
        rpc_url: JSON-RPC endpoint of the node.
        config: Tracker parameters.
        api_config: Display API bind address.
    """
    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()
    try:
        for sig in (signal.SIGINT, signal.SIGTERM):
            loop.add_signal_handler(sig, shutdown.set)
    except (ValueError, RuntimeError, NotImplementedError):
        # Signal handlers are unavailable outside the main thread.
        pass

    host = DisplayHost()
    session = await TrackerSession.open(rpc_url, host, config=config)
    server = ApiServer(config=api_config, host=host, session_getter=lambda: session)

    try:
        await server.start()
        await shutdown.wait()
    finally:
        logger.info("Shutting down...")
        await session.aclose()
        await server.aclose()


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Ledger view-state tracker",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--rpc-url",
        required=True,
        help="JSON-RPC endpoint of the node to track",
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Address the display API binds to (default: 127.0.0.1)",
    )
    parser.add_argument(
        "--port",
        type=int,
        default=5060,
        help="Port the display API listens on (default: 5060)",
    )
    parser.add_argument(
        "--poll-interval",
        type=float,
        default=REFRESH_INTERVAL,
        help=f"Seconds between chain height checks (default: {REFRESH_INTERVAL:g})",
    )
    parser.add_argument(
        "--page-size",
        type=int,
        default=BLOCKS_PER_PAGE,
        help=f"Blocks per displayed page (default: {BLOCKS_PER_PAGE})",
    )
    parser.add_argument(
        "--pagination-distance",
        type=int,
        default=PAGINATION_DISTANCE,
        help=f"Lookahead kept above a selected block (default: {PAGINATION_DISTANCE})",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=MAX_RETRIES,
        help=f"Attempts per remote read (default: {MAX_RETRIES})",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored logging output",
    )

    args = parser.parse_args()

    setup_logging(args.verbose, args.no_color)

    try:
        config = build_config(args)
    except ValueError as e:
        parser.error(str(e))

    try:
        asyncio.run(run_tracker(args.rpc_url, config, ApiServerConfig(args.host, args.port)))
    except KeyboardInterrupt:
        logger.info("Shutting down...")


if __name__ == "__main__":
    main()
