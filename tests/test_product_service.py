"""
ProductService unit tests against the in-memory store.

These pin the orchestration rules (timestamp stamping, error
translation, the update/remove asymmetry) without any database.
"""
import asyncio
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from types import SimpleNamespace

import pytest
from sqlalchemy.exc import OperationalError

from app.domain import PaginationRequest
from app.exceptions import ConflictError, NotFoundError, UniqueConstraintViolation
from app.schemas import ProductCreate, ProductUpdate
from app.services.product_service import ProductService
from tests.fakes import FakeProductStore, StepClock

T0 = datetime(2025, 11, 25, 12, 0, tzinfo=timezone.utc)


def _payload(token: str = "TEST123", **overrides) -> ProductCreate:
    data = {"product_token": token, "name": "Test Product", "price": "29.99", "stock": 100}
    data.update(overrides)
    return ProductCreate(**data)


@pytest.fixture
def store() -> FakeProductStore:
    return FakeProductStore()


@pytest.fixture
def clock() -> StepClock:
    return StepClock(start=T0, step=timedelta(minutes=1))


@pytest.fixture
def service(store: FakeProductStore, clock: StepClock) -> ProductService:
    return ProductService(store, clock=clock)


# ---------------------------------------------------------------------------
# create
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_create_stamps_both_timestamps_with_one_instant(service: ProductService):
    product = await service.create(_payload())
    assert product.id == 1
    assert product.product_token == "TEST123"
    assert product.price == Decimal("29.99")
    assert product.created_at == product.updated_at == T0


@pytest.mark.asyncio
async def test_create_never_checks_existence_first(service: ProductService, store: FakeProductStore):
    await service.create(_payload())
    assert store.calls == ["insert"]


@pytest.mark.asyncio
async def test_duplicate_token_raises_conflict(service: ProductService):
    await service.create(_payload("DUP1"))
    with pytest.raises(ConflictError) as excinfo:
        await service.create(_payload("DUP1", name="Other Product"))
    assert excinfo.value.message == "Product token 'DUP1' already exists"
    assert isinstance(excinfo.value.__cause__, UniqueConstraintViolation)


@pytest.mark.asyncio
async def test_duplicate_token_always_fails(service: ProductService):
    await service.create(_payload("SAME"))
    for _ in range(3):
        with pytest.raises(ConflictError):
            await service.create(_payload("SAME"))


@pytest.mark.asyncio
async def test_concurrent_creates_with_one_token_yield_one_product(service: ProductService):
    results = await asyncio.gather(
        *(service.create(_payload("RACE", name=f"Racer {i}")) for i in range(5)),
        return_exceptions=True,
    )
    created = [r for r in results if not isinstance(r, Exception)]
    conflicts = [r for r in results if isinstance(r, ConflictError)]
    assert len(created) == 1
    assert len(conflicts) == 4
    assert created[0].product_token == "RACE"


@pytest.mark.asyncio
async def test_unique_violation_on_other_field_passes_through(
    service: ProductService, store: FakeProductStore
):
    violation = UniqueConstraintViolation("name", "Test Product")
    store.insert_error = violation
    with pytest.raises(UniqueConstraintViolation) as excinfo:
        await service.create(_payload())
    assert excinfo.value is violation


@pytest.mark.asyncio
async def test_storage_failure_passes_through(service: ProductService, store: FakeProductStore):
    failure = OperationalError("INSERT INTO products ...", {}, Exception("connection lost"))
    store.insert_error = failure
    with pytest.raises(OperationalError) as excinfo:
        await service.create(_payload())
    assert excinfo.value is failure


# ---------------------------------------------------------------------------
# find_all / find_one
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_find_all_empty(service: ProductService):
    page = await service.find_all(PaginationRequest(page=1, limit=10))
    assert page.data == []
    assert page.meta.total_items == 0
    assert page.meta.total_pages == 0
    assert page.meta.has_next_page is False
    assert page.meta.has_previous_page is False


@pytest.mark.asyncio
async def test_find_all_newest_first(service: ProductService):
    for i in range(3):
        await service.create(_payload(f"TOK{i}"))
    page = await service.find_all(PaginationRequest(page=1, limit=10))
    assert [p.product_token for p in page.data] == ["TOK2", "TOK1", "TOK0"]


@pytest.mark.asyncio
async def test_find_all_equal_timestamps_ascending_id(store: FakeProductStore):
    service = ProductService(store, clock=StepClock(start=T0))
    for i in range(4):
        await service.create(_payload(f"TOK{i}"))
    first = await service.find_all(PaginationRequest(page=1, limit=10))
    second = await service.find_all(PaginationRequest(page=1, limit=10))
    assert [p.id for p in first.data] == [1, 2, 3, 4]
    assert first.data == second.data


@pytest.mark.asyncio
async def test_find_all_pages_do_not_overlap(service: ProductService):
    for i in range(25):
        await service.create(_payload(f"TOK{i}"))
    seen: list[int] = []
    for page_no in (1, 2, 3):
        page = await service.find_all(PaginationRequest(page=page_no, limit=10))
        seen.extend(p.id for p in page.data)
    assert len(seen) == len(set(seen)) == 25

    last = await service.find_all(PaginationRequest(page=3, limit=10))
    assert len(last.data) == 5
    assert last.meta.total_pages == 3
    assert last.meta.has_next_page is False
    assert last.meta.has_previous_page is True


@pytest.mark.asyncio
async def test_find_one(service: ProductService):
    created = await service.create(_payload())
    assert await service.find_one(created.id) == created


@pytest.mark.asyncio
async def test_find_one_missing_raises(service: ProductService):
    with pytest.raises(NotFoundError) as excinfo:
        await service.find_one(42)
    assert excinfo.value.product_id == 42


# ---------------------------------------------------------------------------
# update
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_update_changes_only_stock_and_updated_at(service: ProductService):
    created = await service.create(_payload())
    updated = await service.update(created.id, ProductUpdate(stock=7))

    assert updated.stock == 7
    assert updated.updated_at > created.updated_at
    assert updated.product_token == created.product_token
    assert updated.name == created.name
    assert updated.price == created.price
    assert updated.created_at == created.created_at


@pytest.mark.asyncio
async def test_update_ignores_extra_attributes(service: ProductService):
    created = await service.create(_payload())
    data = SimpleNamespace(stock=3, name="Hijacked", price=Decimal("1.00"), product_token="NEW")
    updated = await service.update(created.id, data)
    assert updated.stock == 3
    assert updated.name == "Test Product"
    assert updated.price == Decimal("29.99")
    assert updated.product_token == "TEST123"


@pytest.mark.asyncio
async def test_update_missing_raises_not_found(service: ProductService, store: FakeProductStore):
    with pytest.raises(NotFoundError):
        await service.update(999, ProductUpdate(stock=5))
    assert "update_stock" not in store.calls


@pytest.mark.asyncio
async def test_update_row_vanished_after_lookup(service: ProductService, store: FakeProductStore):
    created = await service.create(_payload())

    async def _gone(product_id, stock, updated_at):
        return None

    store.update_stock = _gone
    with pytest.raises(NotFoundError):
        await service.update(created.id, ProductUpdate(stock=1))


# ---------------------------------------------------------------------------
# remove
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_remove_deletes(service: ProductService):
    created = await service.create(_payload())
    await service.remove(created.id)
    with pytest.raises(NotFoundError):
        await service.find_one(created.id)


@pytest.mark.asyncio
async def test_remove_is_idempotent(service: ProductService):
    created = await service.create(_payload())
    await service.remove(created.id)
    await service.remove(created.id)
    await service.remove(12345)


@pytest.mark.asyncio
async def test_remove_missing_skips_delete(service: ProductService, store: FakeProductStore):
    await service.remove(999)
    assert store.calls == ["find_by_id"]


@pytest.mark.asyncio
async def test_token_reusable_after_remove(service: ProductService):
    created = await service.create(_payload("REUSE"))
    await service.remove(created.id)
    again = await service.create(_payload("REUSE"))
    assert again.id != created.id
