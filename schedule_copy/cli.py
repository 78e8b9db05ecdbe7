"""Command line entry point for schedule-copy."""

import argparse
import sys
from datetime import datetime
from typing import List, Optional

from . import __version__
from .config import CopyConfig, build_config, load_config
from .copy_manager import (
    CopyManager,
    DryRunResult,
    estimate_transfer_time,
    format_copy_summary,
    format_duration,
    format_size,
)
from .logging_setup import setup_logging
from .runner import CopyScheduler


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="schedule-copy",
        description="Copy files missing at a destination, once or on a cron schedule",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  schedule-copy -f /data/photos -t /mnt/backup            # Copy once
  schedule-copy -f /a -f /b -t /mnt/backup -p 8 -vv       # Two sources, 8 workers
  schedule-copy -f /data -t /mnt/backup -c "0 30 2 * * *" # Every day at 02:30:00
  schedule-copy --config copy.yaml --dry-run              # Show what would be copied
        """,
    )

    parser.add_argument(
        "-f",
        "--from",
        dest="sources",
        action="append",
        default=[],
        metavar="PATH",
        help="Source directory or file (repeatable)",
    )
    parser.add_argument(
        "-t", "--to", dest="destination", metavar="PATH", help="Destination directory"
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (up to -vvvv)",
    )
    parser.add_argument(
        "-p",
        "--parallel-threads",
        type=int,
        metavar="N",
        help="Number of parallel copy workers (default: CPU count)",
    )
    parser.add_argument(
        "-c", "--cron-expr", metavar="EXPR", help="Cron expression to repeat the copy on"
    )
    parser.add_argument("--config", metavar="FILE", help="YAML configuration file")
    parser.add_argument("--log-file", metavar="FILE", help="Also write logs to this file")
    parser.add_argument(
        "--dry-run",
        "-n",
        action="store_true",
        help="List files that would be copied without copying",
    )
    parser.add_argument(
        "--max-runs", type=int, metavar="N", help="Stop after N scheduled runs"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    return build_parser().parse_args(argv)


def resolve_config(args: argparse.Namespace) -> CopyConfig:
    """Combine the optional config file with command line values."""
    file_data = load_config(args.config) if args.config else None
    overrides = {
        "sources": args.sources,
        "destination": args.destination,
        "verbose": args.verbose,
        "parallel_threads": args.parallel_threads,
        "cron_expr": args.cron_expr,
        "log_file": args.log_file,
        "dry_run": args.dry_run,
        "max_runs": args.max_runs,
    }
    return build_config(file_data, overrides)


def print_dry_run_result(result: DryRunResult) -> None:
    """Print dry run analysis to the console."""
    print("\n=== DRY RUN SUMMARY ===")
    print(f"Sources: {', '.join(result.sources)}")
    print(f"Destination: {result.destination}")
    if not result.success:
        print(f"Error: {result.error_message}")
        return

    print(f"Files to copy: {result.total_files:,}")
    print(f"Total size: {format_size(result.total_size)}")
    if result.total_size > 0:
        print(f"Estimated time: {format_duration(estimate_transfer_time(result.total_size))}")

    for file_path in result.filtered_files[:10]:
        print(f"  • {file_path}")
    if len(result.filtered_files) > 10:
        print(f"  • ... and {len(result.filtered_files) - 10} more files")


def main(argv: Optional[List[str]] = None) -> int:
    """Main application entry point."""
    start_time = datetime.now()
    args = parse_arguments(argv)
    logger = None

    try:
        config = resolve_config(args)
        logger = setup_logging(config.verbose, config.log_file)

        manager = CopyManager(config)

        errors = manager.perform_preflight_checks()
        if errors:
            for error in errors:
                logger.critical(error)
            print(f"ERROR: failed to run: {'; '.join(errors)}", file=sys.stderr)
            return 1

        if config.dry_run:
            logger.info("Running in DRY RUN mode - no files will be copied")
            result = manager.analyze()
            print_dry_run_result(result)
            return 0 if result.success else 1

        scheduler = CopyScheduler(config, manager=manager)
        results = scheduler.run()

        total_execution_time = (datetime.now() - start_time).total_seconds()
        logger.info("\n" + format_copy_summary(results, total_execution_time))
        return 0

    except (OSError, ValueError) as e:
        print(f"ERROR: failed to run: {e}", file=sys.stderr)
        if logger:
            logger.critical(str(e))
        return 1

    except KeyboardInterrupt:
        error_msg = "Copy interrupted by user"
        print(f"\nINTERRUPTED: {error_msg}", file=sys.stderr)
        if logger:
            logger.warning(error_msg)
        return 130

    except Exception as e:
        print(f"ERROR: failed to run: {e}", file=sys.stderr)
        if logger:
            logger.critical(f"Unexpected error: {e}", exc_info=True)
        return 1

    finally:
        if logger:
            total_time = (datetime.now() - start_time).total_seconds()
            logger.info(f"Process completed in {total_time:.2f} seconds")


def run() -> None:
    """Console script entry point."""
    sys.exit(main())
