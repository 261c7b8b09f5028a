"""AccountsService: user registration and lookup.

Login and session handling are out of scope; accounts are only stored.
"""

from __future__ import annotations

import structlog

from src.infra.errors import AccountsServiceError, StorageError
from src.model.user import User
from src.storage.user_repository import UserRepository

logger = structlog.get_logger()


class AccountsService:
    def __init__(self, user_repository: UserRepository) -> None:
        self._repo = user_repository

    async def register_user(self, username: str, password: str) -> User:
        """Validate, hash and store a new user.

        Validation errors propagate unchanged and never reach the store.
        """
        user = User.new(username, password)
        try:
            stored = await self._repo.insert_user(user)
        except StorageError as e:
            raise AccountsServiceError(str(e)) from e
        logger.info("user_registered", username=stored.username.value)
        return stored

    async def get_user(self, username: str) -> User:
        try:
            return await self._repo.get_user(username)
        except StorageError as e:
            raise AccountsServiceError(str(e)) from e
