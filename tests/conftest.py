"""Shared pytest fixtures for karma tracker tests.

Integration tests get a fresh SQLite file under tmp_path per test, so no
cleanup between tests is needed beyond disposing the pool.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest
import pytest_asyncio

from src.api.controller import reset_controller, shutdown_controller
from src.storage.database import DbManager
from src.storage.karma_repository import SqlKarmaRepository
from src.storage.user_repository import SqlUserRepository


@pytest.fixture(autouse=True)
def _fresh_controller():
    """Every test starts and ends without a published controller."""
    reset_controller()
    yield
    reset_controller()


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "karma_test.sqlite"


@pytest.fixture
def controller_db(db_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the lazily built controller at a per-test store."""
    monkeypatch.setenv("DATABASE_PATH", str(db_path))
    return db_path


@pytest_asyncio.fixture
async def controller_cleanup(controller_db: Path) -> AsyncGenerator[Path, None]:
    """Like controller_db, and disposes whatever controller the test built."""
    yield controller_db
    await shutdown_controller()


@pytest_asyncio.fixture
async def db_manager(db_path: Path) -> AsyncGenerator[DbManager, None]:
    manager = await DbManager.open(str(db_path))
    yield manager
    await manager.dispose()


@pytest.fixture
def karma_repo(db_manager: DbManager) -> SqlKarmaRepository:
    return SqlKarmaRepository(db_manager)


@pytest.fixture
def user_repo(db_manager: DbManager) -> SqlUserRepository:
    return SqlUserRepository(db_manager)
