"""Startup and shutdown logic for smolpaste."""

from __future__ import annotations

from dishka import AsyncContainer, make_async_container

from smolpaste.config import Settings
from smolpaste.di import SmolpasteProvider
from smolpaste.logging_utils import create_service_logger
from smolpaste.protocols import BlobStoreProtocol, PasteRepositoryProtocol

logger = create_service_logger("startup")


def create_di_container(settings: Settings) -> AsyncContainer:
    """Creates and returns the DI AsyncContainer."""
    container = make_async_container(SmolpasteProvider(settings))
    logger.info("DI AsyncContainer created.")
    return container


async def initialize_services(container: AsyncContainer) -> None:
    """Ensure the paste directory and the metadata schema exist.

    Any failure here is fatal to the process.
    """
    try:
        blob_store = await container.get(BlobStoreProtocol)
        await blob_store.ensure_directory()

        repository = await container.get(PasteRepositoryProtocol)
        await repository.ensure_schema()
    except Exception as e:
        logger.critical(f"Failed to initialize smolpaste: {e}", exc_info=True)
        raise

    logger.info("smolpaste services initialized")


async def shutdown_services(container: AsyncContainer) -> None:
    """Close the DI container, disposing the database engine."""
    try:
        await container.close()
        logger.info("DI container closed")
    except Exception as e:
        logger.error(f"Error during shutdown: {e}", exc_info=True)
