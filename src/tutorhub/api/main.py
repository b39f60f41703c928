"""TutorHub API entry point.

``tutorhub.api.main:app`` is the ASGI application for uvicorn; ``run()``
backs the ``tutorhub-api`` console script.
"""

import logging

from tutorhub.api import create_app
from tutorhub.api.middleware.request_id import RequestIDLogFilter
from tutorhub.core.settings import get_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"


def configure_logging(level: str) -> None:
    """Root handler whose records carry the current request ID."""
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIDLogFilter())
    logging.basicConfig(level=level, handlers=[handler], force=True)


settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)

app = create_app(settings)


def run() -> None:
    import uvicorn

    logger.info(
        "Starting TutorHub API on %s:%d",
        settings.api_host,
        settings.api_port,
        extra=settings.get_config_snapshot(),
    )
    # log_config=None keeps the handler configured above for uvicorn's loggers
    uvicorn.run(
        "tutorhub.api.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=False,
        log_config=None,
    )


if __name__ == "__main__":
    run()
