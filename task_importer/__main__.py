"""
CLI entry point for task-importer.

Usage:
    python -m task_importer https://docs.google.com/spreadsheets/d/<id>/edit
    python -m task_importer <url> --db tasks.sqlite3 --dedupe disabled
    python -m task_importer <url> --config /path/to/settings.yml --json-logs
"""

import argparse
import asyncio
import dataclasses
import json
import logging
import sys

import structlog

from .exceptions import InvalidInput, TaskImportError

# Log level mapping
LOG_LEVELS = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}

EXIT_OK = 0
EXIT_IMPORT_FAILED = 1
EXIT_INVALID_INPUT = 2


def setup_logging(level: str = "INFO", json_output: bool = False):
    """Configure structured logging on stderr."""
    log_level = LOG_LEVELS.get(level.upper(), logging.INFO)

    if json_output:
        renderer = structlog.processors.JSONRenderer()
        timestamper = structlog.processors.TimeStamper(fmt="iso")
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
        timestamper = structlog.processors.TimeStamper(fmt="%Y-%m-%d %H:%M:%S")

    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            timestamper,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="task-importer",
        description="Import tasks from a published Google Sheet",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
The sheet needs a "Title" column. "Description", "Due Date" (or "DueDate")
and "Completed" columns are optional.

Examples:
  # Import into the default database
  python -m task_importer https://docs.google.com/spreadsheets/d/<id>/edit

  # Import everything in one bulk write, without duplicate checks
  python -m task_importer <url> --dedupe disabled

  # Use custom settings file
  python -m task_importer <url> --config /path/to/settings.yml
        """,
    )

    parser.add_argument(
        "url",
        nargs="?",
        help="Google Sheets URL (share link or published link)",
    )

    parser.add_argument(
        "--db",
        type=str,
        help="Path to the SQLite task database (default: from settings)",
    )

    parser.add_argument(
        "--dedupe",
        choices=["enabled", "disabled"],
        help="Skip duplicate titles (enabled) or bulk insert everything (disabled)",
    )

    parser.add_argument(
        "--config",
        type=str,
        help="Path to settings.yml config file",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        help="Sheet download timeout in seconds",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: from settings)",
    )

    parser.add_argument(
        "--json-logs",
        action="store_true",
        help="Output logs as JSON (for production)",
    )

    parser.add_argument(
        "--version",
        action="store_true",
        help="Show version and exit",
    )

    return parser.parse_args(argv)


def build_settings(args):
    """Load settings and apply command line overrides."""
    from .config.loader import load_settings
    from .core.models import DedupeStrategy

    settings = load_settings(args.config)

    overrides = {}
    if args.db:
        overrides["db_path"] = args.db
    if args.dedupe:
        overrides["dedupe"] = DedupeStrategy(args.dedupe)
    if args.timeout:
        overrides["fetch_timeout"] = args.timeout
    if args.log_level:
        overrides["log_level"] = args.log_level

    return dataclasses.replace(settings, **overrides)


async def main_async(args, settings):
    """Async main function."""
    from .orchestrator import TaskImporter
    from .store.sqlite import SqliteTaskStore

    logger = structlog.get_logger(__name__)

    logger.info(
        "starting_task_importer",
        url=args.url,
        dedupe=settings.dedupe.value,
        db=settings.db_path,
    )

    store = SqliteTaskStore(settings.db_path)
    importer = TaskImporter(store=store, settings=settings)

    return await importer.import_from(args.url)


def main(argv=None):
    """Main entry point."""
    args = parse_args(argv)

    # Version check
    if args.version:
        from . import __version__
        print(f"task-importer {__version__}")
        sys.exit(EXIT_OK)

    if not args.url:
        print("error: a Google Sheet URL is required", file=sys.stderr)
        sys.exit(EXIT_INVALID_INPUT)

    try:
        settings = build_settings(args)
    except (OSError, ValueError) as e:
        print(f"error: invalid configuration: {e}", file=sys.stderr)
        sys.exit(EXIT_IMPORT_FAILED)

    setup_logging(settings.log_level, args.json_logs)
    logger = structlog.get_logger(__name__)

    try:
        outcome = asyncio.run(main_async(args, settings))
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        sys.exit(130)
    except InvalidInput as e:
        logger.error("invalid_input", error=str(e))
        print(json.dumps({"message": str(e)}), file=sys.stdout)
        sys.exit(EXIT_INVALID_INPUT)
    except TaskImportError as e:
        logger.error("import_failed", error=str(e), error_type=type(e).__name__)
        print(json.dumps({"message": "Failed to import tasks", "error": str(e)}), file=sys.stdout)
        sys.exit(EXIT_IMPORT_FAILED)
    except Exception as e:
        logger.exception("fatal_error", error=str(e))
        sys.exit(EXIT_IMPORT_FAILED)

    print(json.dumps(outcome.to_dict(), ensure_ascii=False, indent=2))
    sys.exit(EXIT_OK)


if __name__ == "__main__":
    main()
