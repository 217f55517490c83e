"""
Database Models

SQLAlchemy ORM models for tables, fields, records, cells, table webhooks
and platform flags.
"""

import json
from typing import Any, List, Optional

from sqlalchemy import (
    JSON,
    ForeignKey,
    Index,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

# JSONB on PostgreSQL, plain JSON elsewhere
JSONType = JSON().with_variant(JSONB(), "postgresql")


def to_cell_value(value: Any) -> Optional[str]:
    """Cells store text; filters compare against the same representation."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


# =============================================================================
# Table Models
# =============================================================================


class Table(Base, TimestampMixin):
    """A user-defined table inside a project."""

    __tablename__ = "tables"

    project_id: Mapped[str] = mapped_column(String(36), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Relationships
    fields = relationship(
        "Field",
        back_populates="table",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    webhooks = relationship(
        "TableWebhook",
        back_populates="table",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        Index("ix_tables_project_id", "project_id"),
    )


class Field(Base, TimestampMixin):
    """A named column of a table."""

    __tablename__ = "fields"

    project_id: Mapped[str] = mapped_column(String(36), nullable=False)
    table_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("tables.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    # Relationships
    table = relationship("Table", back_populates="fields")

    __table_args__ = (
        UniqueConstraint(
            "table_id", "project_id", "name",
            name="uq_fields_table_project_name",
        ),
        Index("ix_fields_table_project", "table_id", "project_id"),
    )


# =============================================================================
# Record Models
# =============================================================================


class Record(Base, TimestampMixin):
    """A row of a table. Values live in cells."""

    __tablename__ = "records"

    project_id: Mapped[str] = mapped_column(String(36), nullable=False)
    table_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("tables.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Relationships
    cells: Mapped[List["Cell"]] = relationship(
        "Cell",
        back_populates="record",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Cell.created_at",
    )

    __table_args__ = (
        Index("ix_records_table_project", "table_id", "project_id"),
        Index("ix_records_project_id", "project_id"),
    )


class Cell(Base, TimestampMixin):
    """The value of one field on one record."""

    __tablename__ = "cells"

    project_id: Mapped[str] = mapped_column(String(36), nullable=False)
    record_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("records.id", ondelete="CASCADE"),
        nullable=False,
    )
    field_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("fields.id", ondelete="CASCADE"),
        nullable=False,
    )
    value: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Relationships
    record = relationship("Record", back_populates="cells")
    field = relationship("Field")

    __table_args__ = (
        # Upsert conflict target
        UniqueConstraint(
            "project_id", "field_id", "record_id",
            name="uq_cells_project_field_record",
        ),
        Index("ix_cells_record_id", "record_id"),
    )


# =============================================================================
# Webhook Models
# =============================================================================


class TableWebhook(Base, TimestampMixin):
    """A flow subscription to record events of a table."""

    __tablename__ = "table_webhooks"

    project_id: Mapped[str] = mapped_column(String(36), nullable=False)
    table_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("tables.id", ondelete="CASCADE"),
        nullable=False,
    )
    flow_id: Mapped[str] = mapped_column(String(64), nullable=False)
    events: Mapped[List[str]] = mapped_column(JSONType, nullable=False, default=list)

    # Relationships
    table = relationship("Table", back_populates="webhooks")

    __table_args__ = (
        Index("ix_table_webhooks_project_table", "project_id", "table_id"),
    )

    def matches(self, event_type: str) -> bool:
        """Check whether this subscription listens to an event type."""
        return event_type in (self.events or [])


# =============================================================================
# Flag Models
# =============================================================================


class Flag(Base, TimestampMixin):
    """Platform-wide key/value flag."""

    __tablename__ = "flags"

    id: Mapped[str] = mapped_column(String(100), primary_key=True)
    value: Mapped[Optional[Any]] = mapped_column(JSONType, nullable=True)


__all__ = [
    "Table",
    "Field",
    "Record",
    "Cell",
    "TableWebhook",
    "Flag",
    "to_cell_value",
]
