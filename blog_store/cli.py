"""Command-line interface for validating and previewing blog content."""

from __future__ import annotations

import argparse
import logging
import os
from pathlib import Path
from typing import List, Optional

from .config import parse_app_config, parse_env_config
from .errors import ConfigurationError, ContentValidationError, NotFoundError
from .runner import RunConfig, execute

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Load the site configuration and content, and print a JSON listing."
    )
    parser.add_argument(
        "--config",
        default="configs/config.xml",
        help="Path to the main configuration XML file.",
    )

    # Overrides for logging/debugging
    parser.add_argument(
        "--log-level",
        default=None,
        help="Logging level (e.g. DEBUG, INFO, WARNING). Overrides config.",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Optional path to a log file. Overrides config.",
    )

    parser.add_argument(
        "--drafts",
        action="store_true",
        help="Include draft entries in the listing (local preview).",
    )
    parser.add_argument(
        "--entry",
        metavar="ID",
        help="Print a single entry, including its body, instead of the listing.",
    )
    parser.add_argument(
        "--output",
        metavar="PATH",
        help="Also write the JSON output to PATH.",
    )

    return parser


def configure_logging(level_name: str, log_file: Optional[str] = None) -> None:
    """Send log records to stderr and, optionally, to a file as well."""
    log_level = getattr(logging, level_name.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(formatter)
    root_logger.addHandler(stream_handler)

    if log_file:
        log_path = Path(log_file)
        if log_path.parent and not log_path.parent.exists():
            log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
        logger.debug("Logging at %s to stderr and %s", level_name.upper(), log_path)
    else:
        logger.debug("Logging at %s to stderr", level_name.upper())


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = parse_app_config(args.config)

        if app_config.env_file:
            env_vars = parse_env_config(app_config.env_file)
            os.environ.update(env_vars)

        log_level = args.log_level or app_config.logging.level
        log_file = args.log_file or app_config.logging.file

        configure_logging(log_level, log_file)

        config = RunConfig(
            content_dir=app_config.content_dir,
            on_invalid=app_config.on_invalid,
            concurrency=app_config.concurrency,
            posts_path=app_config.posts_path,
            include_drafts=args.drafts,
            entry_id=args.entry,
            output_path=args.output,
            site=app_config.site,
        )

        result = execute(config)
    except (
        ConfigurationError,
        ContentValidationError,
        NotFoundError,
        FileNotFoundError,
    ) as exc:
        logger.error("%s", exc)
        return 1
    except ValueError as exc:
        parser.error(str(exc))
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error during execution.")
        return 1

    print(result.output_text)
    return 0
