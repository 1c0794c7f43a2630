"""
Read-through Redis cache around a ``ProductStore``.

Point lookups and listing pages are served from Redis when present;
every successful write drops the listing pages and the affected detail
entry.  When the store is bound to a session, the drop is queued on
``session.info`` and only applied after that session commits (see
``get_db``); dropping at flush time would let a concurrent reader re-cache
the pre-commit row.  The wrapped store stays the only source of truth: uniqueness
violations and storage errors come straight from it.
"""
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Sequence

from app.cache import CacheManager, defer_invalidation, detail_key, list_key
from app.config import settings
from app.domain import NewProduct, Product
from app.repositories.base import ProductStore


def product_to_dict(product: Product) -> dict:
    return {
        "id": product.id,
        "product_token": product.product_token,
        "name": product.name,
        "price": str(product.price),
        "stock": product.stock,
        "created_at": product.created_at.isoformat(),
        "updated_at": product.updated_at.isoformat(),
    }


def product_from_dict(data: dict) -> Product:
    return Product(
        id=data["id"],
        product_token=data["product_token"],
        name=data["name"],
        price=Decimal(data["price"]),
        stock=data["stock"],
        created_at=datetime.fromisoformat(data["created_at"]),
        updated_at=datetime.fromisoformat(data["updated_at"]),
    )


class CachingProductStore(ProductStore):

    def __init__(
        self, inner: ProductStore, cache: CacheManager, session_info: dict | None = None
    ) -> None:
        self._inner = inner
        self._cache = cache
        self._session_info = session_info

    async def _invalidate(self, product_id: int | None = None) -> None:
        if self._session_info is not None:
            defer_invalidation(self._session_info, product_id)
        else:
            await self._cache.invalidate_product(product_id)

    async def insert(self, fields: NewProduct) -> Product:
        product = await self._inner.insert(fields)
        await self._invalidate()
        return product

    async def find_by_id(self, product_id: int) -> Product | None:
        key = detail_key(product_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return product_from_dict(cached)

        product = await self._inner.find_by_id(product_id)
        if product is not None:
            await self._cache.set(key, product_to_dict(product), ttl=settings.CACHE_TTL_DETAIL)
        return product

    async def find_page(self, limit: int, offset: int) -> tuple[Sequence[Product], int]:
        key = list_key(limit, offset)
        cached = await self._cache.get(key)
        if cached is not None:
            return [product_from_dict(item) for item in cached["items"]], cached["total"]

        rows, total = await self._inner.find_page(limit, offset)
        await self._cache.set(
            key,
            {"items": [product_to_dict(p) for p in rows], "total": total},
            ttl=settings.CACHE_TTL_LIST,
        )
        return rows, total

    async def update_stock(
        self, product_id: int, stock: int, updated_at: datetime
    ) -> Product | None:
        product = await self._inner.update_stock(product_id, stock, updated_at)
        if product is not None:
            await self._invalidate(product_id)
        return product

    async def delete_by_id(self, product_id: int) -> bool:
        deleted = await self._inner.delete_by_id(product_id)
        if deleted:
            await self._invalidate(product_id)
        return deleted

    async def count(self) -> int:
        return await self._inner.count()

    async def total_stock(self) -> int:
        return await self._inner.total_stock()
