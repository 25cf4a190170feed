"""
Process entry point: validate configuration, then serve the API with uvicorn.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, Sequence

import uvicorn
from pydantic import ValidationError

from tgtasks.config import get_settings

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _missing_fields(exc: ValidationError) -> list[str]:
    return [str(err["loc"][0]).upper() for err in exc.errors() if err.get("loc")]


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Serve the Telegram tasks API.")
    parser.add_argument("--host", default=None, help="Interface to bind (overrides HOST)")
    parser.add_argument("--port", type=int, default=None, help="Port to bind (overrides PORT)")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format=LOG_FORMAT)

    try:
        settings = get_settings()
    except ValidationError as exc:
        logger.error(
            "Database URL or bot token not provided (%s)",
            ", ".join(_missing_fields(exc)),
        )
        sys.exit(1)

    logging.getLogger().setLevel(settings.log_level.upper())

    host = args.host or settings.host
    port = args.port or settings.port
    logger.info("Server is running on %s:%d", host, port)
    uvicorn.run(
        "tgtasks.app:create_app",
        factory=True,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
