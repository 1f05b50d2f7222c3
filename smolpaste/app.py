"""
smolpaste application.

Run with ``python -m smolpaste`` or ``hypercorn smolpaste.app:app``.
"""

from __future__ import annotations

import asyncio

from dishka import AsyncContainer
from hypercorn.asyncio import serve
from hypercorn.config import Config
from quart_dishka import QuartDishka

from smolpaste import startup_setup
from smolpaste.api.health_routes import health_bp
from smolpaste.api.paste_routes import paste_bp
from smolpaste.config import Settings, settings
from smolpaste.logging_utils import configure_service_logging, create_service_logger
from smolpaste.quart_app import SmolpasteApp

configure_service_logging(settings.SERVICE_NAME, log_level=settings.LOG_LEVEL)
logger = create_service_logger("app")


def create_app(
    app_settings: Settings | None = None,
    container: AsyncContainer | None = None,
) -> SmolpasteApp:
    """Build the application around a DI container.

    Args:
        app_settings: Settings to use; the module-level settings by default
        container: Pre-built container, e.g. with test providers
    """
    app_settings = app_settings or settings

    app = SmolpasteApp(__name__)
    # Upload size is enforced on streamed bytes by the blob store
    app.config["MAX_CONTENT_LENGTH"] = None
    app.config["BODY_TIMEOUT"] = app_settings.BODY_TIMEOUT_SECONDS

    app.container = container or startup_setup.create_di_container(app_settings)
    QuartDishka(app=app, container=app.container)

    @app.before_serving
    async def startup() -> None:
        await startup_setup.initialize_services(app.container)
        logger.info("smolpaste startup completed successfully")

    @app.after_serving
    async def shutdown() -> None:
        await startup_setup.shutdown_services(app.container)
        logger.info("smolpaste shutdown completed")

    app.register_blueprint(paste_bp)
    app.register_blueprint(health_bp)
    return app


app = create_app()


def main() -> None:
    """Bind the configured address and serve until interrupted."""
    logger.info("Starting server...")
    config = Config.from_object("smolpaste.hypercorn_config")
    config.bind = [settings.ADDR]
    logger.info(f"Listening on {settings.ADDR}...")

    try:
        asyncio.run(serve(app, config))
    except KeyboardInterrupt:
        pass
    except Exception as e:
        logger.critical(f"Error: {e}", exc_info=True)
        raise SystemExit(1) from e

    logger.info("Program exited successfully.")


if __name__ == "__main__":
    main()
