"""Karma point and karma status repositories over the SQLite pool."""

from __future__ import annotations

from typing import Protocol

import structlog
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, MultipleResultsFound, NoResultFound, SQLAlchemyError

from src.constants import CLOSED_WITH_ABSENT
from src.infra.errors import (
    AmbiguousResultError,
    ConstraintViolationError,
    DecodeError,
    InvalidNumericKarmaType,
    KarmaAlreadyPersisted,
    NotFoundError,
    RepositoryError,
)
from src.model.karma import KarmaPoint, KarmaStatus, KarmaType, State
from src.storage.database import DbManager
from src.storage.models import KarmaRecord, KarmaStatusRecord

logger = structlog.get_logger()


class KarmaRepository(Protocol):
    async def insert_karma(self, karma: KarmaPoint) -> KarmaPoint: ...

    async def get_karma_by_name(self, name: str) -> KarmaPoint: ...


class KarmaStatusRepository(Protocol):
    async def insert_status(self, status: KarmaStatus) -> KarmaStatus: ...

    async def get_status(self, karma: KarmaPoint) -> KarmaStatus: ...

    async def list_statuses(self, karma: KarmaPoint) -> list[KarmaStatus]: ...


def _to_point(record: KarmaRecord) -> KarmaPoint:
    try:
        purpose = KarmaType.from_code(record.purpose)
    except InvalidNumericKarmaType as e:
        raise DecodeError(f"Karma row {record.id} has invalid purpose: {e}") from e
    return KarmaPoint.with_id(record.id, purpose, record.name)


def _to_status(record: KarmaStatusRecord) -> KarmaStatus:
    closed_with: KarmaType | None = None
    if record.closed_with is not None and record.closed_with != CLOSED_WITH_ABSENT:
        try:
            closed_with = KarmaType.from_code(record.closed_with)
        except InvalidNumericKarmaType as e:
            raise DecodeError(f"Karma status row {record.id} has invalid closed_with: {e}") from e
    return KarmaStatus(
        karma_id=record.karma_id,
        state=State.parse(record.current_state),
        timestamp=record.timestamp,
        closed_with=closed_with,
    )


class SqlKarmaRepository:
    """KarmaRepository and KarmaStatusRepository backed by DbManager's pool."""

    def __init__(self, db: DbManager) -> None:
        self._db = db.session_factory

    async def insert_karma(self, karma: KarmaPoint) -> KarmaPoint:
        if karma.id is not None:
            raise KarmaAlreadyPersisted(karma.name, karma.id)

        record =KarmaRecord(purpose=int(karma.purpose), name=karma.name)
        try:
            async with self._db() as db_session:
                db_session.add(record)
                await db_session.commit()
        except IntegrityError as e:
            raise ConstraintViolationError(
                f"Karma point '{karma.name}' violates a constraint: {e.orig}"
            ) from e
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to insert karma point '{karma.name}': {e}") from e

        logger.debug("karma_inserted", karma_id=record.id, name=karma.name)
        return karma.persisted(record.id)

    async def get_karma_by_name(self, name: str) -> KarmaPoint:
        try:
            async with self._db() as db_session:
                result = await db_session.execute(
                    select(KarmaRecord).where(KarmaRecord.name == name)
                )
                record = result.scalar_one()
        except NoResultFound as e:
            raise NotFoundError(f"No karma point named '{name}'") from e
        except MultipleResultsFound as e:
            raise AmbiguousResultError(f"Several karma points named '{name}'") from e
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to fetch karma point '{name}': {e}") from e
        return _to_point(record)

    async def insert_status(self, status: KarmaStatus) -> KarmaStatus:
        closed_with = (
            int(status.closed_with) if status.closed_with is not None else CLOSED_WITH_ABSENT
        )
        record = KarmaStatusRecord(
            karma_id=status.karma_id,
            closed_with=closed_with,
            current_state=status.state.value,
            timestamp=status.timestamp,
        )
        try:
            async with self._db() as db_session:
                db_session.add(record)
                await db_session.commit()
        except IntegrityError as e:
            raise ConstraintViolationError(
                f"Status for karma id {status.karma_id} violates a constraint: {e.orig}"
            ) from e
        except SQLAlchemyError as e:
            raise RepositoryError(
                f"Failed to insert status for karma id {status.karma_id}: {e}"
            ) from e

        logger.debug("karma_status_inserted", karma_id=status.karma_id, state=status.state.value)
        return status

    async def get_status(self, karma: KarmaPoint) -> KarmaStatus:
        """Latest status of the point, re-resolved by name to its stored id."""
        stored = await self.get_karma_by_name(karma.name)
        try:
            async with self._db() as db_session:
                result = await db_session.execute(
                    select(KarmaStatusRecord)
                    .where(KarmaStatusRecord.karma_id == stored.id)
                    .order_by(KarmaStatusRecord.timestamp.desc(), KarmaStatusRecord.id.desc())
                    .limit(1)
                )
                record = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to fetch status of '{karma.name}': {e}") from e

        if record is None:
            raise NotFoundError(f"No status recorded for karma point '{karma.name}'")
        return _to_status(record)

    async def list_statuses(self, karma: KarmaPoint) -> list[KarmaStatus]:
        """Full status history of the point, oldest first."""
        stored = await self.get_karma_by_name(karma.name)
        try:
            async with self._db() as db_session:
                result = await db_session.execute(
                    select(KarmaStatusRecord)
                    .where(KarmaStatusRecord.karma_id == stored.id)
                    .order_by(KarmaStatusRecord.timestamp, KarmaStatusRecord.id)
                )
                records = result.scalars().all()
        except SQLAlchemyError as e:
            raise RepositoryError(f"Failed to fetch status history of '{karma.name}': {e}") from e
        return [_to_status(r) for r in records]
