import logging
import structlog


def configure_logging(level=logging.INFO) -> None:
    """Route structlog through stdlib logging with ISO timestamps and JSON output."""
    logging.basicConfig(level=level)
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer(ensure_ascii=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
    )
