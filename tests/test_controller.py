"""Tests for the lazily initialized process-wide ApiController."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

import src.api.controller as controller_module
from src.api.controller import ApiController, get_controller, reset_controller
from src.config.settings import DatabaseSettings, Settings
from src.infra.errors import ApiControllerError, OpenConnectionError
from src.service.karma_service import KarmaService
from src.storage.database import DbManager


def _settings() -> Settings:
    return Settings(database=DatabaseSettings(path="unit.sqlite"))


def _fake_db() -> MagicMock:
    db = MagicMock()
    db.url.database = "unit.sqlite"
    return db


class TestLazyInit:
    async def test_concurrent_first_access_builds_once(self) -> None:
        async def slow_open(locator, *, echo=False):
            await asyncio.sleep(0.01)
            return _fake_db()

        open_mock = AsyncMock(side_effect=slow_open)
        with patch.object(DbManager, "open", new=open_mock):
            controllers = await asyncio.gather(
                *(get_controller(_settings()) for _ in range(50))
            )

        assert open_mock.await_count == 1
        assert all(c is controllers[0] for c in controllers)
        assert isinstance(controllers[0].karma_service, KarmaService)

    async def test_published_instance_skips_lock(self) -> None:
        with patch.object(DbManager, "open", new=AsyncMock(return_value=_fake_db())):
            first = await get_controller(_settings())

        # Any attempt to take the slow path would fail on this object.
        with patch.object(controller_module, "_init_lock", new=object()):
            assert await get_controller(_settings()) is first

    async def test_failure_not_cached(self) -> None:
        open_mock = AsyncMock(side_effect=[OpenConnectionError("disk full"), _fake_db()])
        with patch.object(DbManager, "open", new=open_mock):
            with pytest.raises(ApiControllerError) as exc_info:
                await get_controller(_settings())
            assert isinstance(exc_info.value.__cause__, OpenConnectionError)

            controller = await get_controller(_settings())

        assert isinstance(controller, ApiController)
        assert open_mock.await_count == 2

    async def test_reset_drops_instance(self) -> None:
        with patch.object(DbManager, "open", new=AsyncMock(side_effect=lambda *a, **k: _fake_db())):
            first = await get_controller(_settings())
            assert reset_controller() is first
            second = await get_controller(_settings())

        assert second is not first

    async def test_reset_refused_during_construction(self) -> None:
        release = asyncio.Event()

        async def blocked_open(locator, *, echo=False):
            await release.wait()
            return _fake_db()

        with patch.object(DbManager, "open", new=AsyncMock(side_effect=blocked_open)):
            pending = asyncio.create_task(get_controller(_settings()))
            await asyncio.sleep(0)
            assert controller_module._init_lock.locked()

            with pytest.raises(RuntimeError):
                reset_controller()

            release.set()
            controller = await pending

        assert reset_controller() is controller


async def test_create_uses_database_path() -> None:
    open_mock = AsyncMock(return_value=_fake_db())
    with patch.object(DbManager, "open", new=open_mock):
        await ApiController.create(_settings())
    open_mock.assert_awaited_once_with("unit.sqlite", echo=False)
