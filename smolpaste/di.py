"""
Dependency injection configuration.

The APP-scoped container is the process-wide, immutable state shared by every
request: settings, the database engine and the stores built on it.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from dishka import Provider, Scope, provide
from prometheus_client import CollectorRegistry, Counter
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from smolpaste.config import Settings
from smolpaste.implementations.filesystem_blob_store import FileSystemBlobStore
from smolpaste.implementations.paste_repository_impl import PasteRepository
from smolpaste.implementations.prometheus_paste_metrics import PrometheusPasteMetrics
from smolpaste.implementations.token_authenticator_impl import TokenAuthenticator
from smolpaste.protocols import (
    BlobStoreProtocol,
    PasteMetricsProtocol,
    PasteRepositoryProtocol,
    TokenAuthenticatorProtocol,
)


class SmolpasteProvider(Provider):
    """DI provider for smolpaste dependencies."""

    def __init__(self, settings: Settings) -> None:
        super().__init__()
        self._settings = settings

    @provide(scope=Scope.APP)
    def provide_settings(self) -> Settings:
        return self._settings

    @provide(scope=Scope.APP)
    def provide_collector_registry(self) -> CollectorRegistry:
        return CollectorRegistry()

    @provide(scope=Scope.APP)
    def provide_paste_metrics(self, registry: CollectorRegistry) -> PasteMetricsProtocol:
        paste_operations = Counter(
            "paste_operations_total",
            "Total paste operations",
            ["operation", "status"],
            registry=registry,
        )
        return PrometheusPasteMetrics(paste_operations)

    @provide(scope=Scope.APP)
    async def provide_database_engine(self, settings: Settings) -> AsyncIterator[AsyncEngine]:
        """Provide the async engine; disposed when the container closes."""
        engine = create_async_engine(
            settings.SQLALCHEMY_DATABASE_URL,
            echo=False,
            pool_size=settings.DB_POOL_SIZE,
            max_overflow=0,
            pool_timeout=settings.DB_POOL_TIMEOUT_SECONDS,
        )
        yield engine
        await engine.dispose()

    @provide(scope=Scope.APP)
    def provide_paste_repository(self, engine: AsyncEngine) -> PasteRepositoryProtocol:
        return PasteRepository(engine)

    @provide(scope=Scope.APP)
    def provide_blob_store(self, settings: Settings) -> BlobStoreProtocol:
        return FileSystemBlobStore(
            settings.PASTE_DIRECTORY,
            max_upload_bytes=settings.MAX_UPLOAD_BYTES,
            buffer_size=settings.WRITE_BUFFER_BYTES,
        )

    @provide(scope=Scope.APP)
    def provide_token_authenticator(
        self, repository: PasteRepositoryProtocol
    ) -> TokenAuthenticatorProtocol:
        return TokenAuthenticator(repository)
