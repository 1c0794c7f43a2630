"""
Product service: business rules for the Product resource.

Design notes
------------
- The store is injected through the constructor; the service never
  reaches for a session or a global registry.
- Uniqueness of ``product_token`` is left entirely to the store's
  constraint.  There is no check-then-insert: concurrent duplicate
  creates resolve to one success and ``ConflictError`` for the rest.
- ``update`` is last-writer-wins; there is no version column.
- ``find_one`` is the single existence gate for ``update``.  ``remove``
  deliberately bypasses it so deleting a missing id is a no-op.
"""
from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from app.domain import NewProduct, Page, PaginationRequest, Product
from app.exceptions import NotFoundError, UniqueConstraintViolation, translate_storage_error
from app.pagination import paginate
from app.repositories.base import ProductStore
from app.schemas import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProductService:

    def __init__(self, store: ProductStore, clock: Callable[[], datetime] = utcnow) -> None:
        self._store = store
        self._clock = clock

    async def create(self, data: ProductCreate) -> Product:
        """
        Insert a new product stamped with ``created_at == updated_at == now``.

        Raises ``ConflictError`` when the token is already taken; every other
        storage failure propagates unchanged.
        """
        now = self._clock()
        fields = NewProduct(
            product_token=data.product_token,
            name=data.name,
            price=data.price,
            stock=data.stock,
            created_at=now,
            updated_at=now,
        )
        try:
            product = await self._store.insert(fields)
        except UniqueConstraintViolation as exc:
            translated = translate_storage_error(exc, data.product_token)
            if translated is exc:
                raise
            logger.warning("Rejected duplicate product token %r", data.product_token)
            raise translated from exc

        logger.info("Created product id=%s token=%r", product.id, product.product_token)
        return product

    async def find_all(self, request: PaginationRequest) -> Page[Product]:
        rows, total = await self._store.find_page(request.limit, request.offset)
        return paginate(rows, request, total)

    async def find_one(self, product_id: int) -> Product:
        product = await self._store.find_by_id(product_id)
        if product is None:
            raise NotFoundError(product_id)
        return product

    async def update(self, product_id: int, data: ProductUpdate) -> Product:
        """
        Set the stock of an existing product and refresh ``updated_at``.

        Only ``data.stock`` is read; token, name, price and ``created_at``
        are never written.  Raises ``NotFoundError`` for a missing id.
        """
        await self.find_one(product_id)
        updated = await self._store.update_stock(product_id, data.stock, self._clock())
        if updated is None:
            # Deleted between the lookup and the write.
            raise NotFoundError(product_id)

        logger.info("Updated product id=%s stock=%s", product_id, updated.stock)
        return updated

    async def remove(self, product_id: int) -> None:
        """Delete the product if present.  A missing id is not an error."""
        product = await self._store.find_by_id(product_id)
        if product is None:
            logger.debug("Remove skipped, product id=%s does not exist", product_id)
            return

        await self._store.delete_by_id(product_id)
        logger.info("Removed product id=%s", product_id)
