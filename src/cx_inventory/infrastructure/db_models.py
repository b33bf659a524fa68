"""SQLAlchemy ORM models for cx_inventory.

These map to existing tables created by Alembic migrations.
DO NOT add/remove columns here without a corresponding migration.
"""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Integer, SmallInteger, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.cx_common.database import Base


class CreditListingORM(Base):
    __tablename__ = "credit_listings"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    project_id: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    project_name: Mapped[str] = mapped_column(String(200), nullable=False)
    project_type: Mapped[str] = mapped_column(String(30), nullable=False)
    country: Mapped[str] = mapped_column(String(100), nullable=False)
    vintage_year: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    unit_price_cents: Mapped[int] = mapped_column(Integer, nullable=False)
    integrity_score: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    additionality_score: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    permanence_score: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    mrv_score: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    corresponding_adjustment: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    available_tons: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )


class InventorySettlementORM(Base):
    __tablename__ = "inventory_settlements"

    portfolio_item_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    listing_id: Mapped[str] = mapped_column(String(64), nullable=False)
    tons: Mapped[int] = mapped_column(Integer, nullable=False)
    settled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    # NOTE: No updated_at, settlements are insert-only
