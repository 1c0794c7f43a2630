from fastapi import Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.cache import cache
from app.config import settings
from app.database import get_db
from app.domain import PaginationRequest
from app.repositories import CachingProductStore, ProductStore, SqlAlchemyProductStore
from app.services.product_service import ProductService


class PaginationParams:
    """
    Reusable FastAPI dependency that parses and validates pagination
    query parameters.

    Usage in a router::

        @router.get("/products")
        async def list_products(pagination: PaginationParams = Depends()):
            ...

    Attributes
    ----------
    page:
        1-based page number (minimum 1).
    limit:
        Number of items per page, 1 to ``settings.MAX_PAGE_SIZE``.
    """

    def __init__(
        self,
        page: int = Query(
            1,
            ge=1,
            description="Page number (1-based).",
        ),
        limit: int = Query(
            settings.DEFAULT_PAGE_SIZE,
            ge=1,
            le=100,
            description="Number of items returned per page (max 100).",
        ),
    ) -> None:
        self.page = page
        # Respect the application-level ceiling even though the query schema
        # already caps at 100, so lowering it is a settings-only change.
        self.limit = min(limit, settings.MAX_PAGE_SIZE)

    def to_request(self) -> PaginationRequest:
        return PaginationRequest(page=self.page, limit=self.limit)


def get_product_store(db: AsyncSession = Depends(get_db)) -> ProductStore:
    return CachingProductStore(SqlAlchemyProductStore(db), cache, session_info=db.info)


def get_product_service(store: ProductStore = Depends(get_product_store)) -> ProductService:
    return ProductService(store)
