# File: /interface_engine/models/view.py | Version: 2.0 | Title: Views with their filter groups, filters and sorts
from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Dict
from typing import List as TList
from typing import Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from interface_engine.db.base_class import Base
from interface_engine.models.tables import gen_uuid


class View(Base):
    __tablename__ = "views"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    table_id: Mapped[str] = mapped_column(ForeignKey("tables.id"), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    # 'grid' | 'kanban' | 'gallery' | 'calendar' | 'timeline' | 'form'
    type: Mapped[str] = mapped_column(String(30), nullable=False, default="grid")
    config: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    filter_groups: Mapped[TList["ViewFilterGroup"]] = relationship(
        back_populates="view", cascade="all, delete-orphan"
    )
    filters: Mapped[TList["ViewFilter"]] = relationship(
        back_populates="view", cascade="all, delete-orphan"
    )
    sorts: Mapped[TList["ViewSort"]] = relationship(
        back_populates="view", cascade="all, delete-orphan", order_by="ViewSort.order_index"
    )

    __table_args__ = (Index("ix_views_table", "table_id"),)


class ViewFilterGroup(Base):
    __tablename__ = "view_filter_groups"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    view_id: Mapped[str] = mapped_column(ForeignKey("views.id"), index=True, nullable=False)
    condition_type: Mapped[str] = mapped_column(String(3), nullable=False, default="AND")
    order_index: Mapped[int] = mapped_column(Integer, default=0)

    view: Mapped["View"] = relationship(back_populates="filter_groups")


class ViewFilter(Base):
    __tablename__ = "view_filters"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    view_id: Mapped[str] = mapped_column(ForeignKey("views.id"), index=True, nullable=False)
    field_name: Mapped[str] = mapped_column(String(200), nullable=False)
    operator: Mapped[str] = mapped_column(String(50), nullable=False)
    value: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    value2: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    # No FK: a dangling group id degrades to "ungrouped" instead of failing the load
    filter_group_id: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0)

    view: Mapped["View"] = relationship(back_populates="filters")


class ViewSort(Base):
    __tablename__ = "view_sorts"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    view_id: Mapped[str] = mapped_column(ForeignKey("views.id"), index=True, nullable=False)
    field_name: Mapped[str] = mapped_column(String(200), nullable=False)
    direction: Mapped[str] = mapped_column(String(4), nullable=False, default="asc")
    order_index: Mapped[int] = mapped_column(Integer, default=0)

    view: Mapped["View"] = relationship(back_populates="sorts")
