"""ORM table definitions."""

from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    pass


class MigrationRow(Base):
    __tablename__ = "migrations"

    id: Mapped[str] = mapped_column(String(32), primary_key=True)
    shopify_store: Mapped[str] = mapped_column(String(255), nullable=False)
    data_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")

    total_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    processed_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    failed_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
    started_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)
    completed_at: Mapped[Optional[datetime]] = mapped_column(DateTime, nullable=True)

    logs: Mapped[List["MigrationLogRow"]] = relationship(
        back_populates="migration",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class MigrationLogRow(Base):
    __tablename__ = "migration_logs"
    __table_args__ = (
        Index("ix_migration_logs_migration_created", "migration_id", "created_at"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    migration_id: Mapped[str] = mapped_column(
        String(32), ForeignKey("migrations.id", ondelete="CASCADE"), nullable=False
    )
    item_id: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    shopify_data: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    wcart_data: Mapped[Optional[dict]] = mapped_column(JSON, nullable=True)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)

    migration: Mapped[MigrationRow] = relationship(back_populates="logs")


class FieldMappingRow(Base):
    __tablename__ = "field_mappings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    data_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    shopify_field: Mapped[str] = mapped_column(String(255), nullable=False)
    wcart_field: Mapped[str] = mapped_column(String(255), nullable=False)
    transformation: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)
    is_required: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


class ShopifyCacheRow(Base):
    __tablename__ = "shopify_data_cache"
    __table_args__ = (
        UniqueConstraint("data_type", "shopify_id", name="uq_shopify_cache_item"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    data_type: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    shopify_id: Mapped[str] = mapped_column(String(64), nullable=False)
    data: Mapped[str] = mapped_column(Text, nullable=False)
    fetched_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=datetime.utcnow)
