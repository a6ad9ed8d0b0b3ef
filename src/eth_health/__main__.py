"""CLI entry point for the ETH node health checker.

This module runs one health check pass and exits, so it is meant to be
triggered by an external scheduler such as cron or a systemd timer.

Usage:
    python -m eth_health [options]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import logging.config
import sys
from typing import NoReturn

from pydantic import ValidationError

from eth_health import __version__
from eth_health.config import Settings, clear_settings_cache, get_settings
from eth_health.engine import ConfigurationError
from eth_health.metrics import write_metrics
from eth_health.monitor import build_engine, run_health_check

# Exit codes
EXIT_SUCCESS = 0
EXIT_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_ALERT = 3
EXIT_INTERRUPTED = 130

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s (%(filename)s:%(lineno)d): %(message)s"

# Client libraries that log every request at INFO/DEBUG
QUIET_LOGGERS = ("httpx", "httpcore", "web3", "urllib3")


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="eth-health",
        description="Check that an Ethereum node is in sync with a reference chain.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config-check",
        action="store_true",
        help="validate configuration and exit",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="override LOG_LEVEL",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="enable debug logging")
    parser.add_argument("--blocks", type=int, help="maximum allowed lag in blocks")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="run the checks but only log alerts",
    )
    parser.add_argument(
        "--metrics-file",
        metavar="PATH",
        help="write Prometheus metrics to this textfile after the run",
    )
    return parser


def configure_logging(level: str) -> None:
    """Send log records at ``level`` and above to stdout."""
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": DEBUG_LOG_FORMAT if level == "DEBUG" else LOG_FORMAT,
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                    "stream": "ext://sys.stdout",
                },
            },
            "root": {"level": level, "handlers": ["console"]},
            "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        }
    )


def validate_config() -> Settings | None:
    """Load settings, printing validation errors to stderr.

    Returns:
        Settings instance if valid, None if invalid.
    """
    clear_settings_cache()
    try:
        return get_settings()
    except ValidationError as e:
        lines = [f"  {'.'.join(map(str, err['loc']))}: {err['msg']}" for err in e.errors()]
        print("Configuration validation failed:", *lines, sep="\n", file=sys.stderr)
        return None


def print_config_summary(settings: Settings, dry_run: bool) -> None:
    """Print a summary of the configuration.

    Args:
        settings: Application settings.
        dry_run: Whether dry-run mode is enabled.
    """
    summary = settings.redacted_summary()
    print("Configuration:")
    print(f"  Node: {summary['node_url']}")
    print(f"  Reference: {settings.reference.endpoint}")
    print(f"  Max Blocks Away: {summary['blocks']}")
    print(f"  Log Level: {summary['log_level']}")
    print(f"  Dry Run: {dry_run}")
    print(f"  Email: {'enabled' if summary['email_enabled'] == 'True' else 'disabled'}")
    print(f"  Slack: {'enabled' if summary['slack_enabled'] == 'True' else 'disabled'}")
    print()


def run_config_check(settings: Settings) -> int:
    """Run configuration check and exit.

    Args:
        settings: Validated settings.

    Returns:
        Exit code (0 for success).
    """
    print("Configuration is valid!")
    print()
    print_config_summary(settings, dry_run=settings.dry_run)

    try:
        build_engine(settings, dry_run=True)
    except ConfigurationError as e:
        print(f"Engine configuration invalid: {e}", file=sys.stderr)
        return EXIT_CONFIG_ERROR

    if not settings.email.enabled and not settings.slack.enabled:
        print("Warning: no notification transports configured")

    print("All checks passed. Ready to run.")
    return EXIT_SUCCESS


async def run_once(
    settings: Settings,
    *,
    blocks: int | None = None,
    dry_run: bool = False,
) -> int:
    """Run a single health check pass.

    Args:
        settings: Application settings.
        blocks: Lag threshold override.
        dry_run: Whether to skip sending notifications.

    Returns:
        Exit code.
    """
    logger = logging.getLogger(__name__)

    try:
        engine = build_engine(settings, blocks=blocks, dry_run=dry_run)
        alert = await run_health_check(engine)
    except ConfigurationError as e:
        logger.error("Configuration error: %s", e)
        return EXIT_CONFIG_ERROR
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return EXIT_INTERRUPTED
    except Exception as e:
        logger.exception("Health check failed: %s", e)
        return EXIT_ERROR

    return EXIT_SUCCESS if alert is None else EXIT_ALERT


def main(argv: list[str] | None = None) -> NoReturn:
    """Main entry point for the CLI.

    Args:
        argv: Command line arguments (defaults to sys.argv[1:]).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # Validate configuration first
    settings = validate_config()
    if settings is None:
        sys.exit(EXIT_CONFIG_ERROR)

    if args.verbose:
        settings.verbose = True

    # Determine effective log level
    log_level = args.log_level or settings.effective_log_level
    configure_logging(log_level)

    # Config check mode
    if args.config_check:
        sys.exit(run_config_check(settings))

    dry_run = args.dry_run or settings.dry_run

    exit_code = asyncio.run(run_once(settings, blocks=args.blocks, dry_run=dry_run))

    if args.metrics_file:
        try:
            write_metrics(args.metrics_file)
        except OSError as e:
            logging.getLogger(__name__).error("Failed to write metrics: %s", e)

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
