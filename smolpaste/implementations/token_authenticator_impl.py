"""Token authenticator backed by the metadata store."""

from __future__ import annotations

from uuid import UUID

from smolpaste.error_handling import (
    SmolpasteError,
    raise_internal_error,
    raise_unauthorized,
)
from smolpaste.logging_utils import create_service_logger
from smolpaste.protocols import PasteRepositoryProtocol, TokenAuthenticatorProtocol

logger = create_service_logger("auth.token")


class TokenAuthenticator(TokenAuthenticatorProtocol):
    """Accepts any token with at least one matching row. No caching."""

    def __init__(self, repository: PasteRepositoryProtocol) -> None:
        self._repository = repository

    async def authenticate(self, token: str | None, correlation_id: UUID | None = None) -> None:
        if not token:
            raise_unauthorized(
                operation="authenticate",
                message="No token supplied",
                correlation_id=correlation_id,
            )

        try:
            count = await self._repository.count_token(token, correlation_id)
        except SmolpasteError as exc:
            raise_internal_error(
                operation="authenticate",
                message=f"Token lookup failed: {exc.error_detail.message}",
                correlation_id=correlation_id,
            )

        if count < 1:
            logger.info("Rejected unknown token")
            raise_unauthorized(
                operation="authenticate",
                message="Unknown token",
                correlation_id=correlation_id,
            )
