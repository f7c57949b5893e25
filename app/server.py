# =============================================================================
# app/server.py - Process Entry Point
# =============================================================================
# Starts the API with the full lifecycle: database connection, listener,
# fault/signal handlers, graceful shutdown.
#
# Usage:
#   python -m app
#   tour-api            # console script installed by pyproject.toml
# =============================================================================

import asyncio
import logging
import sys

from pydantic import ValidationError

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the server until a fault or signal stops it, then exit with its code."""
    try:
        from app.config import get_settings
        from app.main import app
    except ValidationError as e:
        # Settings failed before app.main could configure logging
        logging.basicConfig(format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        logger.error(f"Invalid configuration:\n{e}")
        sys.exit(1)

    from app.lifecycle import Bootstrapper

    bootstrapper = Bootstrapper(settings=get_settings(), app=app)
    exit_code = asyncio.run(bootstrapper.run())
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
