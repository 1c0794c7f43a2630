from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import (
    DateTime,
    Index,
    Integer,
    Numeric,
    String,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base

# Name of the unique constraint guarding product_token.  The store matches
# on it (and on the column name) when classifying integrity errors.
PRODUCT_TOKEN_CONSTRAINT = "uq_products_product_token"


# ---------------------------------------------------------------------------
# Product
# ---------------------------------------------------------------------------
class ProductRow(Base):
    __tablename__ = "products"

    __table_args__ = (
        UniqueConstraint("product_token", name=PRODUCT_TOKEN_CONSTRAINT),
        # Without AUTOINCREMENT SQLite hands a deleted max rowid out again.
        {"sqlite_autoincrement": True},
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    product_token: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(8, 2, asdecimal=True), nullable=False)
    stock: Mapped[int] = mapped_column(Integer, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )


# Backs the fixed listing order: newest first, id as tie-break.
Index("ix_products_created_at_id", ProductRow.created_at.desc(), ProductRow.id.asc())
