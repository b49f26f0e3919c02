"""Main entry point for the character builder server."""

import logging
import sys
from pathlib import Path

import uvicorn

from .config import LoggingConfig, load_config
from .data.repository import ReferenceRepository
from .web.server import create_app

logger = logging.getLogger(__name__)


def configure_logging(config: LoggingConfig) -> None:
    """Configure root logging from the logging section of the config."""
    logging.basicConfig(level=config.level.upper(), format=config.format)


def main(config_path: Path | str | None = None) -> int:
    """Main entry point for the application.

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    try:
        config = load_config(config_path)
        configure_logging(config.logging)

        # Reference data is loaded once, before the server accepts requests
        repository = ReferenceRepository.build(config.data)
        app = create_app(repository, config)

        logger.info("Starting server at http://%s:%d", config.server.host, config.server.port)
        uvicorn.run(app, host=config.server.host, port=config.server.port)
        return 0

    except KeyboardInterrupt:
        return 0
    except Exception as e:
        print(f"Fatal error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
