"""Abstract store for the Product resource."""
from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Sequence

from app.domain import NewProduct, Product


class ProductStore(ABC):

    @abstractmethod
    async def insert(self, fields: NewProduct) -> Product:
        """
        Persist a new product and return it with its assigned id.

        Raises ``UniqueConstraintViolation`` when the storage constraint on
        ``product_token`` rejects the row.  Implementations must rely on the
        constraint itself, never on a prior existence check.
        """

    @abstractmethod
    async def find_by_id(self, product_id: int) -> Product | None:
        """Return the product with *product_id*, or None if absent."""

    @abstractmethod
    async def find_page(self, limit: int, offset: int) -> tuple[Sequence[Product], int]:
        """
        Return one window of products plus the total row count.

        Rows are ordered by ``created_at`` descending with ``id`` ascending
        as tie-break.  The count and the window should come from a single
        round trip where the backend allows it; this is best-effort
        consistency, not a snapshot guarantee.
        """

    @abstractmethod
    async def update_stock(
        self, product_id: int, stock: int, updated_at: datetime
    ) -> Product | None:
        """Overwrite stock and updated_at only.  None if the row is gone."""

    @abstractmethod
    async def delete_by_id(self, product_id: int) -> bool:
        """Delete the product; True if a row existed and was removed."""

    @abstractmethod
    async def count(self) -> int:
        """Total number of live products."""

    @abstractmethod
    async def total_stock(self) -> int:
        """Sum of stock across all live products."""
