"""SQLAlchemy models for the paste metadata store."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import Column, Integer, Table, Text
from sqlalchemy.ext.asyncio import AsyncAttrs
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(AsyncAttrs, DeclarativeBase):
    """Base class for all smolpaste models."""

    pass


class Paste(Base):
    """Metadata for one stored blob."""

    __tablename__ = "pastes"

    # Canonical lowercase hyphenated UUID4
    id: Mapped[str] = mapped_column(Text, primary_key=True, nullable=False)

    size: Mapped[Optional[int]] = mapped_column(Integer)

    # "<id>" or "<id>.<ext>" inside the paste directory
    filename: Mapped[Optional[str]] = mapped_column(Text)

    # Seconds since the Unix epoch
    timestamp: Mapped[Optional[int]] = mapped_column(Integer)


# Bearer credentials, inserted out-of-band by an operator. No primary key,
# so this stays a Core table rather than a mapped class.
tokens_table = Table(
    "tokens",
    Base.metadata,
    Column("value", Text),
    Column("created_at", Integer),
)
