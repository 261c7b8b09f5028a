"""Tests for KarmaService against an in-memory repository."""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from src.infra.errors import (
    ConstraintViolationError,
    KarmaAlreadyPersisted,
    KarmaServiceError,
    NotFoundError,
    RepositoryError,
)
from src.model.karma import KarmaPoint, KarmaStatus, KarmaType, State
from src.service.karma_service import KarmaService


class InMemoryKarmaRepository:
    def __init__(self) -> None:
        self.points: dict[str, KarmaPoint] = {}
        self.statuses: list[KarmaStatus] = []
        self.name_lookups = 0

    async def insert_karma(self, karma: KarmaPoint) -> KarmaPoint:
        if karma.id is not None:
            raise KarmaAlreadyPersisted(karma.name, karma.id)
        if karma.name in self.points:
            raise ConstraintViolationError(f"UNIQUE constraint failed: {karma.name}")
        stored = karma.persisted(len(self.points) + 1)
        self.points[karma.name] = stored
        return stored

    async def get_karma_by_name(self, name: str) -> KarmaPoint:
        self.name_lookups += 1
        try:
            return self.points[name]
        except KeyError:
            raise NotFoundError(f"No karma point named '{name}'") from None

    async def insert_status(self, status: KarmaStatus) -> KarmaStatus:
        self.statuses.append(status)
        return status

    async def get_status(self, karma: KarmaPoint) -> KarmaStatus:
        stored = await self.get_karma_by_name(karma.name)
        matching = [s for s in self.statuses if s.karma_id == stored.id]
        if not matching:
            raise NotFoundError(f"No status recorded for '{karma.name}'")
        return max(matching, key=lambda s: s.timestamp)

    async def list_statuses(self, karma: KarmaPoint) -> list[KarmaStatus]:
        stored = await self.get_karma_by_name(karma.name)
        return [s for s in self.statuses if s.karma_id == stored.id]


@pytest.fixture
def repo() -> InMemoryKarmaRepository:
    return InMemoryKarmaRepository()


@pytest.fixture
def service(repo: InMemoryKarmaRepository) -> KarmaService:
    return KarmaService(repo)


class TestCreateKarma:
    async def test_returns_point_with_id(self, service: KarmaService) -> None:
        created = await service.create_karma(KarmaPoint(KarmaType.work, "Deep work"))
        assert created.id == 1
        assert created.purpose is KarmaType.work

    async def test_then_lookup_by_name(self, service: KarmaService) -> None:
        await service.create_karma(KarmaPoint(KarmaType.sport, "Run 5k"))
        fetched = await service.get_karma("Run 5k")
        assert fetched.name == "Run 5k"
        assert fetched.purpose is KarmaType.sport

    async def test_duplicate_wrapped_as_storage_error(self, service: KarmaService) -> None:
        await service.create_karma(KarmaPoint(KarmaType.work, "Deep work"))
        with pytest.raises(KarmaServiceError) as exc_info:
            await service.create_karma(KarmaPoint(KarmaType.work, "Deep work"))
        assert exc_info.value.code == "STORAGE"
        assert isinstance(exc_info.value.__cause__, ConstraintViolationError)

    async def test_point_with_id_is_validation_error(
        self, service: KarmaService, repo: InMemoryKarmaRepository
    ) -> None:
        with pytest.raises(KarmaAlreadyPersisted) as exc_info:
            await service.create_karma(KarmaPoint(KarmaType.work, "dup", id=42))
        assert exc_info.value.to_payload()["kind"] == "validation"
        assert repo.points == {}

    async def test_driver_fault_wrapped(self) -> None:
        repo = AsyncMock()
        repo.insert_karma = AsyncMock(side_effect=RepositoryError("disk I/O error"))
        service = KarmaService(repo)

        with pytest.raises(KarmaServiceError) as exc_info:
            await service.create_karma(KarmaPoint(KarmaType.work, "Deep work"))
        assert "disk I/O error" in str(exc_info.value)


class TestStatuses:
    async def test_record_and_get_latest(self, service: KarmaService) -> None:
        await service.create_karma(KarmaPoint(KarmaType.work, "Deep work"))
        await service.record_status("Deep work", State.active, 100)
        await service.record_status("Deep work", State.closed, 200, KarmaType.sleeping)

        latest = await service.get_status("Deep work")
        assert latest.state is State.closed
        assert latest.closed_with is KarmaType.sleeping
        assert latest.karma_id == 1

    async def test_history(self, service: KarmaService) -> None:
        await service.create_karma(KarmaPoint(KarmaType.work, "Deep work"))
        await service.record_status("Deep work", State.active, 100)
        await service.record_status("Deep work", State.closed, 200)
        assert [s.state for s in await service.history("Deep work")] == [
            State.active,
            State.closed,
        ]

    async def test_status_reads_resolve_name_once(
        self, service: KarmaService, repo: InMemoryKarmaRepository
    ) -> None:
        await service.create_karma(KarmaPoint(KarmaType.sport, "Run 5k"))
        await service.record_status("Run 5k", State.active, 100)

        repo.name_lookups = 0
        await service.get_status("Run 5k")
        assert repo.name_lookups == 1

        repo.name_lookups = 0
        await service.history("Run 5k")
        assert repo.name_lookups == 1

    async def test_unknown_point_wrapped(self, service: KarmaService) -> None:
        with pytest.raises(KarmaServiceError) as exc_info:
            await service.record_status("missing", State.active, 100)
        assert isinstance(exc_info.value.__cause__, NotFoundError)

    async def test_missing_status_wrapped(self, service: KarmaService) -> None:
        await service.create_karma(KarmaPoint(KarmaType.work, "Deep work"))
        with pytest.raises(KarmaServiceError):
            await service.get_status("Deep work")
