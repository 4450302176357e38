# File: /interface_engine/models/interface.py | Version: 1.0 | Title: Interface pages and their blocks
from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Dict
from typing import List as TList
from typing import Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from interface_engine.db.base_class import Base
from interface_engine.models.tables import gen_uuid


class InterfacePage(Base):
    __tablename__ = "interface_pages"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    page_type: Mapped[str] = mapped_column(String(30), nullable=False, default="content")
    base_table: Mapped[Optional[str]] = mapped_column(ForeignKey("tables.id"), nullable=True)
    config: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )

    blocks: Mapped[TList["PageBlock"]] = relationship(
        back_populates="page", cascade="all, delete-orphan", order_by="PageBlock.order_index"
    )


class PageBlock(Base):
    __tablename__ = "page_blocks"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    page_id: Mapped[str] = mapped_column(
        ForeignKey("interface_pages.id"), index=True, nullable=False
    )
    type: Mapped[str] = mapped_column(String(30), nullable=False)
    config: Mapped[Optional[Dict[str, Any]]] = mapped_column(JSON, nullable=True)
    # All four null = never placed; some null = corrupted
    position_x: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    position_y: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    order_index: Mapped[int] = mapped_column(Integer, default=0)

    page: Mapped["InterfacePage"] = relationship(back_populates="blocks")
