"""CLI for serving the feed reader over SSH."""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List, Optional

from .cli import configure_logging
from .config import load_app_config
from .server import serve

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Serve the RSS reader to SSH clients."
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to the configuration XML file. Built-in defaults when omitted.",
    )
    parser.add_argument("--host", help="Address to listen on. Overrides config.")
    parser.add_argument(
        "--port", type=int, help="Port to listen on. Overrides config."
    )
    parser.add_argument(
        "--host-key",
        help="Path of the server host key; generated when missing. Overrides config.",
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


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        app_config = load_app_config(args.config)
        configure_logging(
            args.log_level or app_config.logging.level,
            args.log_file or app_config.logging.file,
        )
    except ValueError as exc:
        parser.error(str(exc))
    except FileNotFoundError as exc:
        logger.error("%s", exc)
        return 1

    if args.host:
        app_config.server.host = args.host
    if args.port is not None:
        app_config.server.port = args.port
    if args.host_key:
        app_config.server.host_key = args.host_key

    try:
        asyncio.run(serve(app_config))
    except OSError as exc:
        logger.error("Could not start server: %s", exc)
        return 1
    except Exception:  # noqa: BLE001
        logger.exception("Unexpected error while serving.")
        return 1
    return 0


if __name__ == "__main__":
    import sys

    sys.exit(main())
