"""Process entry point: ``python -m visitor_service``."""
from __future__ import annotations

import logging
import sys

import uvicorn
from pydantic import ValidationError

from .config import get_settings
from .main import configure_logging, create_app

log = logging.getLogger("visitor_service")


def main() -> None:
    try:
        settings = get_settings()
    except ValidationError as exc:
        configure_logging()
        fields = ", ".join(str(err["loc"][0]).upper() for err in exc.errors() if err.get("loc"))
        log.critical("FATAL: invalid configuration (%s); refusing to start", fields or exc)
        sys.exit(1)

    configure_logging(settings.log_level, settings.log_format)
    app = create_app(settings)
    log.info("Starting server on port %d", settings.port)
    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_config=None,
        server_header=False,
    )


if __name__ == "__main__":
    main()
