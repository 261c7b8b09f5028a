"""User repository. Accounts are stored but not yet used for login."""

from __future__ import annotations

from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from src.infra.errors import (
    ConstraintViolationError,
    DecodeError,
    NotFoundError,
    RepositoryError,
    UsernameError,
)
from src.model.user import User
from src.storage.database import DbManager
from src.storage.models import UserRecord


class UserRepository(Protocol):
    async def insert_user(self, user: User) -> User: ...

    async def get_user(self, username: str) -> User: ...


class SqlUserRepository:
    def __init__(self, db: DbManager) -> None:
        self._db = db.session_factory

    async def insert_user(self, user: User) -> User:
        record = UserRecord(username=user.username.value, password=user.hashed_password.hashed)
        try:
            async with self._db() as db_session:
                db_session.add(record)
                await db_session.commit()
        except IntegrityError as e:
            raise ConstraintViolationError(f"User violates a constraint: {e.orig}") from e
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to insert user: {e}") from e
        return user

    async def get_user(self, username: str) -> User:
        try:
            async with self._db() as db_session:
                result = await db_session.execute(
                    select(UserRecord.username, UserRecord.password).where(
                        UserRecord.username == username
                    )
                )
                row = result.one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to fetch user: {e}") from e

        if row is None:
            raise NotFoundError(f"No user named '{username}'")
        try:
            return User.from_storage(row.username, row.password)
        except UsernameError as e:
            raise DecodeError(f"Stored username fails validation: {e}") from e
