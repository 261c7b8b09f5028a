"""KarmaService: orchestrates karma repositories, translating storage failures."""

from __future__ import annotations

from typing import Protocol

import structlog

from src.infra.errors import KarmaServiceError, StorageError
from src.model.karma import KarmaPoint, KarmaStatus, KarmaType, State
from src.storage.karma_repository import KarmaRepository, KarmaStatusRepository

logger = structlog.get_logger()


class KarmaStore(KarmaRepository, KarmaStatusRepository, Protocol):
    """Repository capabilities the karma service depends on."""


def _by_name(name: str) -> KarmaPoint:
    # Status lookups resolve the point by name; purpose is not consulted.
    return KarmaPoint(KarmaType.work, name)


class KarmaService:
    def __init__(self, karma_repository: KarmaStore) -> None:
        self._repo = karma_repository

    async def create_karma(self, karma: KarmaPoint) -> KarmaPoint:
        try:
            return await self._repo.insert_karma(karma)
        except StorageError as e:
            raise KarmaServiceError(str(e)) from e

    async def get_karma(self, name: str) -> KarmaPoint:
        try:
            return await self._repo.get_karma_by_name(name)
        except StorageError as e:
            raise KarmaServiceError(str(e)) from e

    async def record_status(
        self,
        name: str,
        state: State,
        timestamp: int,
        closed_with: KarmaType | None = None,
    ) -> KarmaStatus:
        """Append a status record for the named point."""
        try:
            point = await self._repo.get_karma_by_name(name)
            status = KarmaStatus(
                karma_id=point.id, state=state, timestamp=timestamp, closed_with=closed_with
            )
            inserted = await self._repo.insert_status(status)
        except StorageError as e:
            raise KarmaServiceError(str(e)) from e

        logger.info("karma_status_recorded", name=name, state=state.value, timestamp=timestamp)
        return inserted

    async def get_status(self, name: str) -> KarmaStatus:
        try:
            return await self._repo.get_status(_by_name(name))
        except StorageError as e:
            raise KarmaServiceError(str(e)) from e

    async def history(self, name: str) -> list[KarmaStatus]:
        try:
            return await self._repo.list_statuses(_by_name(name))
        except StorageError as e:
            raise KarmaServiceError(str(e)) from e
