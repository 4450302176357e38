# File: /interface_engine/models/tables.py | Version: 1.0 | Title: User-defined tables, fields and JSON-backed rows
from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Dict
from typing import List as TList
from typing import Optional
from uuid import uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from interface_engine.db.base_class import Base


def gen_uuid() -> str:
    return str(uuid4())


class Table(Base):
    __tablename__ = "tables"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    fields: Mapped[TList["TableField"]] = relationship(
        back_populates="table", cascade="all, delete-orphan", order_by="TableField.order_index"
    )


class TableField(Base):
    __tablename__ = "table_fields"
    __table_args__ = (UniqueConstraint("table_id", "name", name="uq_table_field_name"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    table_id: Mapped[str] = mapped_column(ForeignKey("tables.id"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # 'text', 'number', 'date', 'single_select', 'multi_select', 'checkbox', 'link_to_table', ...
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="text")
    options: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON)
    order_index: Mapped[int] = mapped_column(Integer, default=0)

    table: Mapped["Table"] = relationship(back_populates="fields")


class TableRow(Base):
    __tablename__ = "table_rows"
    __table_args__ = (Index("ix_table_rows_table", "table_id"),)

    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    table_id: Mapped[str] = mapped_column(ForeignKey("tables.id"), nullable=False)
    data: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )
