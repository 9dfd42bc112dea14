"""Main entry point for running the Routekit FastAPI application."""

import os

import uvicorn
from loguru import logger

from src.api.main import app
from src.core.config import get_settings
from src.core.logging import setup_logging


def main() -> None:
    """Main entry point for the Routekit application."""
    settings = get_settings()

    # Setup logging first
    setup_logging(settings)

    # PORT overrides the configured port when the platform assigns one
    port = int(os.environ.get("PORT", settings.api_port))

    # Configure uvicorn to use our logging
    log_config = {
        "version": 1,
        "disable_existing_loggers": False,
        "handlers": {
            "default": {
                "class": "src.core.logging.InterceptHandler",
            },
        },
        "loggers": {
            "uvicorn": {"handlers": ["default"], "level": "INFO", "propagate": False},
            "uvicorn.error": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False,
            },
            "uvicorn.access": {
                "handlers": ["default"],
                "level": "INFO",
                "propagate": False,
            },
        },
    }

    tls_options = (
        {"ssl_certfile": settings.ssl_certfile, "ssl_keyfile": settings.ssl_keyfile}
        if settings.tls_enabled
        else {}
    )

    # When reload is enabled, we must pass the app as an import string
    if settings.debug:
        logger.info(
            f"Starting Uvicorn on {settings.base_url} "
            "(development mode with auto-reload)"
        )
        uvicorn.run(
            "src.api.main:app",
            host=settings.api_host,
            port=port,
            reload=True,
            log_config=log_config,
            **tls_options,
        )
    else:
        logger.info(f"Starting Uvicorn on {settings.base_url} (production mode)")
        uvicorn.run(
            app,
            host=settings.api_host,
            port=port,
            reload=False,
            log_config=log_config,
            **tls_options,
        )


if __name__ == "__main__":
    main()
