"""
Plain value types shared by the service, the stores and the routers.

None of these carry behaviour beyond simple derived properties; ORM rows
are mapped onto them by the store so nothing above the repository layer
ever touches a live SQLAlchemy instance.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Generic, Sequence, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class Product:
    id: int
    product_token: str
    name: str
    price: Decimal
    stock: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class NewProduct:
    """Fields handed to ``ProductStore.insert``; timestamps already stamped."""

    product_token: str
    name: str
    price: Decimal
    stock: int
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True, slots=True)
class PaginationRequest:
    page: int = 1
    limit: int = 10

    @property
    def offset(self) -> int:
        """Zero-based row skip count for the requested page."""
        return (self.page - 1) * self.limit


@dataclass(frozen=True, slots=True)
class PaginationMeta:
    current_page: int
    items_per_page: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


@dataclass(frozen=True, slots=True)
class Page(Generic[T]):
    data: Sequence[T]
    meta: PaginationMeta
