"""Database seeder: fills the products table with sample inventory."""
import asyncio
import argparse
import random
import time
from datetime import datetime, timezone, timedelta
from decimal import Decimal

from sqlalchemy import func, insert, select

from app.cache import cache
from app.database import engine, async_session, Base
from app.models import ProductRow

ADJECTIVES = ["Compact", "Deluxe", "Classic", "Portable", "Wireless", "Smart",
              "Ergonomic", "Rugged", "Slim", "Premium"]
NOUNS = ["Keyboard", "Monitor", "Lamp", "Backpack", "Speaker", "Chair",
         "Headset", "Charger", "Router", "Camera"]


def _product_rows(start: int, end: int) -> list[dict]:
    rows = []
    for i in range(start, end):
        created = datetime.now(timezone.utc) - timedelta(minutes=random.randint(0, 525_600))
        rows.append({
            "product_token": f"SEED{i:07d}",
            "name": f"{random.choice(ADJECTIVES)} {random.choice(NOUNS)} {i}",
            "price": Decimal(random.randint(100, 99_999_99)) / 100,
            "stock": random.randint(0, 5000),
            "created_at": created,
            "updated_at": created,
        })
    return rows


async def next_seed_index(session) -> int:
    """
    First token number that cannot collide with an earlier run.

    Ids never go backwards and every seeded token number is below its
    row's id, so numbering from the highest live id is always fresh.
    """
    return await session.scalar(select(func.coalesce(func.max(ProductRow.id), 0)))


async def seed(count: int, reset: bool = False):
    print(f"Seeding {count} products")
    start = time.perf_counter()

    if reset:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        first = await next_seed_index(session)
        last = first + count
        batch_size = 1000
        for batch_start in range(first, last, batch_size):
            batch_end = min(batch_start + batch_size, last)
            await session.execute(insert(ProductRow), _product_rows(batch_start, batch_end))
            print(f"  Batch {batch_start}-{batch_end}: products inserted")
        await session.commit()

    # Inserts bypass the store, so cached listing pages are dropped by hand.
    await cache.connect()
    await cache.invalidate_product()
    await cache.disconnect()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")


def main():
    parser = argparse.ArgumentParser(description="Seed the products database")
    parser.add_argument("--count", type=int, default=1000, help="Number of products to insert")
    parser.add_argument("--reset", action="store_true", help="Drop and recreate the schema first")
    args = parser.parse_args()
    asyncio.run(seed(args.count, reset=args.reset))


if __name__ == "__main__":
    main()
