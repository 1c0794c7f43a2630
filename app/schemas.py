from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer

# Letters (including common Latin accented ones), digits, whitespace, "-" and "_".
PRODUCT_NAME_PATTERN = r"^[a-zA-Z0-9àáâãäåçèéêëìíîïñòóôõöùúûüýÿ\s_-]+$"
PRODUCT_TOKEN_PATTERN = r"^[a-zA-Z0-9]+$"

MAX_PRICE = Decimal("999999.99")
MAX_STOCK = 999_999

# Prices travel as JSON numbers; Decimal is kept everywhere else.
JsonPrice = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]


# --- Product ---

class ProductCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    product_token: str = Field(min_length=3, max_length=50, pattern=PRODUCT_TOKEN_PATTERN)
    name: str = Field(min_length=3, max_length=100, pattern=PRODUCT_NAME_PATTERN)
    price: Decimal = Field(gt=0, le=MAX_PRICE, max_digits=8, decimal_places=2)
    stock: int = Field(ge=0, le=MAX_STOCK)


class ProductUpdate(BaseModel):
    """Only stock is mutable after creation; any other key is rejected."""

    model_config = ConfigDict(extra="forbid")

    stock: int = Field(ge=0, le=MAX_STOCK)


class ProductResponse(BaseModel):
    id: int
    product_token: str
    name: str
    price: JsonPrice
    stock: int
    created_at: datetime
    updated_at: datetime
    model_config = ConfigDict(from_attributes=True)


# --- Pagination ---

class PaginationMetaResponse(BaseModel):
    current_page: int
    items_per_page: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool
    model_config = ConfigDict(from_attributes=True)


class PaginatedProductResponse(BaseModel):
    data: list[ProductResponse]
    meta: PaginationMetaResponse
    model_config = ConfigDict(from_attributes=True)


# --- Metrics ---

class MetricsResponse(BaseModel):
    total_products: int
    total_stock: int
    cache_info: dict = {}
