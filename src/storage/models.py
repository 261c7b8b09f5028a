"""SQLAlchemy 2.0 models for the karma store."""

from __future__ import annotations

from sqlalchemy import Column, ForeignKey, Integer, String, Table
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# users has no surrogate key; username is UNIQUE NOT NULL and acts as the mapper identity.
users_table = Table(
    "users",
    Base.metadata,
    Column("username", String(250), nullable=False, unique=True),
    Column("password", String(250), nullable=False, unique=True),
)


class UserRecord(Base):
    __table__ = users_table
    __mapper_args__ = {"primary_key": [users_table.c.username]}


class KarmaRecord(Base):
    __tablename__ = "karma"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    purpose: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(50), nullable=False, unique=True)


class KarmaStatusRecord(Base):
    __tablename__ = "karma_status"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    karma_id: Mapped[int] = mapped_column(Integer, ForeignKey("karma.id"), nullable=False)
    closed_with: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_state: Mapped[str] = mapped_column(String(50), nullable=False)
    timestamp: Mapped[int] = mapped_column(Integer, nullable=False)


SCHEMA_TABLES: tuple[str, ...] = ("users", "karma", "karma_status")
