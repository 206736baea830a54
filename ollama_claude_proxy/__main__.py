"""
Entry point: python -m ollama_claude_proxy [--config PATH]
"""
import argparse
import logging
import sys
from typing import Optional

import uvicorn

from .config import load_settings
from .errors import ConfigError
from .server import create_app, setup_logging


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Ollama-compatible proxy for the Claude API")
    parser.add_argument("--config", default=None, help="Path to JSON configuration file")
    args = parser.parse_args(argv)

    try:
        settings = load_settings(args.config)
    except ConfigError as e:
        logging.basicConfig(level=logging.ERROR)
        logging.getLogger(__name__).error("Failed to load configuration: %s", e.message)
        return 1

    logger = setup_logging(settings)
    logger.info("Ollama-Claude proxy listening on %s:%d", settings.host, settings.port)

    uvicorn.run(
        create_app(settings),
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
