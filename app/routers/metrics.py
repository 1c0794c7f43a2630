from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from app.database import get_db
from app.repositories import SqlAlchemyProductStore
from app.schemas import MetricsResponse
from app.cache import cache

router = APIRouter(prefix="/api/v1/metrics", tags=["metrics"])

@router.get("", response_model=MetricsResponse)
async def get_metrics(db: AsyncSession = Depends(get_db)):
    store = SqlAlchemyProductStore(db)

    return MetricsResponse(
        total_products=await store.count(),
        total_stock=await store.total_stock(),
        cache_info=cache.stats,
    )
