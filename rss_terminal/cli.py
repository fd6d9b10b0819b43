"""Command-line interface for reading the feed in the local terminal."""

from __future__ import annotations

import argparse
import logging
import shutil
import sys
from pathlib import Path
from typing import List, Optional

from .config import load_app_config
from .feeds import FeedError, load_feed
from .rendering import Renderer
from .state import PresentationState
from .terminal import run_local

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    """Create the CLI argument parser."""
    parser = argparse.ArgumentParser(
        description="Browse the configured RSS feed in the terminal."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the configuration XML file. Built-in defaults when omitted.",
    )
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
    return parser


def configure_logging(
    level_name: str, log_file: Optional[str] = None, console: bool = True
) -> None:
    """Initialise logging according to options.

    With ``console`` disabled and no ``log_file`` records are discarded,
    which keeps a full-screen UI free of log output.
    """
    log_level = getattr(logging, level_name.upper(), None)
    if not isinstance(log_level, int):
        raise ValueError(f"Unsupported log level: {level_name}")

    formatter = logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")

    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    root_logger.setLevel(log_level)

    if console:
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
        logger.debug(
            "Logger initialised with level %s and file output to %s",
            level_name.upper(),
            log_path,
        )
    elif console:
        logger.debug(
            "Logger initialised with console output at level %s", level_name.upper()
        )
    else:
        root_logger.addHandler(logging.NullHandler())


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = load_app_config(args.config)
        configure_logging(
            args.log_level or app_config.logging.level,
            args.log_file or app_config.logging.file,
            console=False,
        )
    except ValueError as exc:
        parser.error(str(exc))
    except FileNotFoundError as exc:
        print(exc, file=sys.stderr)
        return 1

    styles = app_config.theme.to_styles()

    try:
        feed = load_feed(app_config.feed.url, timeout=app_config.feed.timeout)
    except FeedError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    width, height = shutil.get_terminal_size()
    state = PresentationState.from_feed(feed, width, height, styles=styles)

    try:
        run_local(state, Renderer(styles))
    except Exception as exc:  # noqa: BLE001
        logger.exception("Unexpected error while running the reader.")
        print(f"Error running program: {exc}")
        return 1
    return 0
