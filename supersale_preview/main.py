"""Main entry point for the SuperSALE preview server."""

import sys
from typing import NoReturn

import structlog

from . import config
from .web_app import main as web_main


def setup_logging() -> None:
    """Setup structured logging."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="%H:%M:%S"),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]

    if config.ENVIRONMENT == "development":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        logger_factory=structlog.WriteLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(config.LOG_LEVEL),
        cache_logger_on_first_use=True,
    )


def main() -> NoReturn:
    """Main entry point for the preview server."""
    setup_logging()
    logger = structlog.get_logger(__name__)

    try:
        logger.info("Starting SuperSALE preview server", version=config.APP_VERSION)
        sys.exit(web_main())
    except KeyboardInterrupt:
        logger.info("Preview server interrupted by user")
        sys.exit(0)
    except Exception as e:
        logger.error("Preview server crashed", error=str(e))
        sys.exit(1)


if __name__ == "__main__":
    main()
