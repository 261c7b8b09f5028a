"""Process-wide ApiController: the lazily wired service graph.

The first get_controller() call opens the store and wires the services;
later calls return the published instance without touching the lock.
Concurrent first callers wait on the init lock and observe the same
instance. A failed construction is not cached, the next call retries.
"""

from __future__ import annotations

import asyncio

import structlog

from src.config.settings import Settings, get_settings
from src.infra.errors import ApiControllerError, StorageError
from src.service.accounts_service import AccountsService
from src.service.karma_service import KarmaService
from src.storage.database import DbManager
from src.storage.karma_repository import SqlKarmaRepository
from src.storage.user_repository import SqlUserRepository

logger = structlog.get_logger()

_controller: ApiController | None = None
_init_lock = asyncio.Lock()


class ApiController:
    def __init__(
        self,
        *,
        db: DbManager,
        karma_service: KarmaService,
        accounts_service: AccountsService,
    ) -> None:
        self.db = db
        self.karma_service = karma_service
        self.accounts_service = accounts_service

    @classmethod
    async def create(cls, settings: Settings) -> ApiController:
        """Open the backing store and wire the services over it."""
        try:
            db = await DbManager.open(settings.database.path, echo=settings.database.echo)
        except StorageError as e:
            raise ApiControllerError() from e

        return cls(
            db=db,
            karma_service=KarmaService(SqlKarmaRepository(db)),
            accounts_service=AccountsService(SqlUserRepository(db)),
        )


async def get_controller(settings: Settings | None = None) -> ApiController:
    """Return the shared controller, constructing it on first use.

    Raises ApiControllerError if the store cannot be opened.
    """
    global _controller

    # Unlocked fast path; a stale None only sends us to the locked path.
    controller = _controller
    if controller is not None:
        return controller

    async with _init_lock:
        if _controller is None:
            _controller = await ApiController.create(settings or get_settings())
            logger.info("api_controller_initialized", database=_controller.db.url.database)
        return _controller


def reset_controller() -> ApiController | None:
    """Drop the published controller and return it (test and shutdown hook).

    The caller owns disposing the returned controller's pool. Refuses to run
    while a get_controller() construction holds the init lock, since that
    construction would publish its instance after the reset.
    """
    global _controller, _init_lock
    if _init_lock.locked():
        raise RuntimeError("Cannot reset the controller while it is being constructed")
    previous, _controller = _controller, None
    _init_lock = asyncio.Lock()
    return previous


async def shutdown_controller() -> None:
    """Drop the published controller and release its pool, if one was built."""
    previous = reset_controller()
    if previous is not None:
        await previous.db.dispose()
