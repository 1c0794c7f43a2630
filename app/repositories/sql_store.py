"""
SQLAlchemy implementation of ``ProductStore``.

Design notes
------------
- ``find_page`` carries ``COUNT(*) OVER ()`` on every row of the window so
  the total and the rows come back in one statement.  Only a page that
  lands past the last row needs a second ``COUNT`` (there is no row to
  carry the window total).
- Integrity errors are classified by constraint/column name in the driver
  message; PostgreSQL reports the constraint name, SQLite the
  ``table.column`` pair.  Anything not recognised is re-raised untouched.
- A failed flush leaves the session's transaction unusable; the caller's
  session scope (``get_db``) is responsible for rolling it back.
"""
from __future__ import annotations

import logging
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.domain import NewProduct, Product
from app.exceptions import UniqueConstraintViolation
from app.models import PRODUCT_TOKEN_CONSTRAINT, ProductRow
from app.repositories.base import ProductStore

logger = logging.getLogger(__name__)

# Driver message fragments identifying a unique violation per column.
_UNIQUE_MARKERS: dict[str, tuple[str, ...]] = {
    "product_token": (
        PRODUCT_TOKEN_CONSTRAINT,
        "UNIQUE constraint failed: products.product_token",
    ),
}

_LIST_ORDER = (ProductRow.created_at.desc(), ProductRow.id.asc())


def _unique_violation_field(exc: IntegrityError) -> str | None:
    message = str(exc.orig)
    for field, markers in _UNIQUE_MARKERS.items():
        if any(marker in message for marker in markers):
            return field
    return None


def _as_utc(value: datetime) -> datetime:
    # SQLite drops the offset on the way back; every stored timestamp is UTC.
    return value if value.tzinfo is not None else value.replace(tzinfo=timezone.utc)


def _to_domain(row: ProductRow) -> Product:
    return Product(
        id=row.id,
        product_token=row.product_token,
        name=row.name,
        price=row.price,
        stock=row.stock,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


class SqlAlchemyProductStore(ProductStore):

    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def insert(self, fields: NewProduct) -> Product:
        row = ProductRow(**asdict(fields))
        self._db.add(row)
        try:
            await self._db.flush()
        except IntegrityError as exc:
            field = _unique_violation_field(exc)
            if field is None:
                raise
            logger.debug("Unique violation on %s for %r", field, getattr(fields, field))
            raise UniqueConstraintViolation(field, getattr(fields, field)) from exc
        return _to_domain(row)

    async def find_by_id(self, product_id: int) -> Product | None:
        row = await self._db.get(ProductRow, product_id)
        return _to_domain(row) if row is not None else None

    async def find_page(self, limit: int, offset: int) -> tuple[Sequence[Product], int]:
        q = (
            select(ProductRow, func.count().over().label("total_count"))
            .order_by(*_LIST_ORDER)
            .offset(offset)
            .limit(limit)
        )
        rows = (await self._db.execute(q)).all()
        if rows:
            return [_to_domain(row[0]) for row in rows], rows[0][1]
        if offset == 0:
            return [], 0
        return [], await self.count()

    async def update_stock(
        self, product_id: int, stock: int, updated_at: datetime
    ) -> Product | None:
        row = await self._db.get(ProductRow, product_id)
        if row is None:
            return None
        row.stock = stock
        row.updated_at = updated_at
        await self._db.flush()
        return _to_domain(row)

    async def delete_by_id(self, product_id: int) -> bool:
        result = await self._db.execute(delete(ProductRow).where(ProductRow.id == product_id))
        return result.rowcount > 0

    async def count(self) -> int:
        q = select(func.count()).select_from(ProductRow)
        return (await self._db.execute(q)).scalar_one()

    async def total_stock(self) -> int:
        q = select(func.coalesce(func.sum(ProductRow.stock), 0))
        return int((await self._db.execute(q)).scalar_one())
