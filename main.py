# main.py

"""Entry point for the goldwatch poller (run once per cron tick)."""

import argparse
import logging
import sys

from goldwatch.config.logging_config import setup_logging

logger = logging.getLogger("goldwatch.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="goldwatch",
        description=(
            "Poll the gold price page once and notify Telegram on "
            "price changes and hourly heartbeats."
        ),
    )
    group = parser.add_mutually_exclusive_group()
    group.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        dest="dry_run",
        help="Print messages and save the chart instead of sending.",
    )
    group.add_argument(
        "--check",
        action="store_true",
        default=False,
        help="Fetch and print the current price; state is not touched.",
    )
    group.add_argument(
        "--chart",
        default=None,
        metavar="PATH",
        help="Render the recent history to a PNG file and exit.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Route to the requested command and return its exit code."""
    # Parse first so --help and usage errors leave no run log behind
    args = _build_parser().parse_args(argv)

    try:
        log_file = setup_logging()
    except OSError as exc:
        print(f"goldwatch: cannot set up logging: {exc}", file=sys.stderr)
        return 1
    logger.info("goldwatch starting, log file: %s", log_file)

    from goldwatch.cli.runner import run_check, run_export_chart, run_poll

    try:
        if args.check:
            return run_check()
        if args.chart:
            return run_export_chart(args.chart)
        return run_poll(dry_run=args.dry_run)
    except Exception:
        logger.critical("Unhandled error during run", exc_info=True)
        return 1
    finally:
        logger.info("goldwatch shutting down")


def cli() -> None:
    """Console-script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    cli()
