#!/usr/bin/env python3
"""Run the local simulation API: ``python -m bgsim``."""

import argparse
import os

from bgsim.core.config import clear_config_cache, get_service_config
from bgsim.core.logging_config import get_logger, setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Battlegrounds local simulation API")
    parser.add_argument("--port", type=int, help="Listening port on 127.0.0.1")
    parser.add_argument("--cards", help="Card definitions JSON file")
    parser.add_argument("--simulator", help="Simulator factory as module:callable")
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)

    # Command-line flags override the environment
    overrides = {
        "BGSIM_PORT": args.port,
        "BGSIM_CARDS_PATH": args.cards,
        "BGSIM_SIMULATOR": args.simulator,
        "BGSIM_LOG_LEVEL": args.log_level,
    }
    for name, value in overrides.items():
        if value is not None:
            os.environ[name] = str(value)
    clear_config_cache()
    config = get_service_config()

    setup_logging(log_level=config.log_level, enable_file=config.log_to_file)
    logger = get_logger("bgsim")

    # The module-level app reads the configuration at import time
    from bgsim.main import app
    from bgsim.server import LocalApiServer

    server = LocalApiServer(app, port=config.port)
    if not server.start():
        return 1

    try:
        server.wait()
    except KeyboardInterrupt:
        logger.info("Interrupted; shutting down")
    finally:
        server.stop()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
