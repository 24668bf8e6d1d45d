#!/usr/bin/env python3
# -*- coding: utf-8 -*-
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from .app import WallabagApp
from .cache import EntryCache
from .config import CONFIG_PATH, __version__, load_client_config, setup_logging
from .errors import ConfigError

logger = logging.getLogger("wallabag_tui")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Wallabag TUI Client")
    parser.add_argument("-v", "--version", action="store_true", help="Print version and exit")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument(
        "-d", "--debug", action="store_true", help="Enable debug logging (implies verbose)"
    )
    parser.add_argument(
        "--config", type=str, default=CONFIG_PATH, help=f"Config file (default: {CONFIG_PATH})"
    )
    parser.add_argument(
        "--clear-cache", action="store_true", help="Delete the entries cache before starting"
    )
    return parser


# --- Entrypoint ---
def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"version {__version__}")
        return 0

    log_path = setup_logging(debug=args.debug, verbose=args.verbose)
    if log_path:
        print(f"Logging to {log_path}", file=sys.stderr)

    try:
        config = load_client_config(args.config, debug=args.debug)
    except ConfigError as e:
        logger.error("Error reading config: %s", e)
        print(f"Error reading config: {e}", file=sys.stderr)
        return 1

    cache = EntryCache(config.cache_path)
    if args.clear_cache:
        cache.clear()

    try:
        app = WallabagApp(config=config, cache=cache)
        app.run()
    except Exception as e:
        logger.exception("Application crashed: %s", e)
        print(f"Application crashed: {e}", file=sys.stderr)
        return 1
    return app.return_code or 0


if __name__ == "__main__":
    sys.exit(main())
