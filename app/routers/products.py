from fastapi import APIRouter, Depends, HTTPException

from app.dependencies import PaginationParams, get_product_service
from app.exceptions import ConflictError, NotFoundError
from app.schemas import PaginatedProductResponse, ProductCreate, ProductResponse, ProductUpdate
from app.services.product_service import ProductService

router = APIRouter(prefix="/api/v1/products", tags=["products"])

@router.post("", status_code=201, response_model=ProductResponse)
async def create_product(data: ProductCreate, service: ProductService = Depends(get_product_service)):
    try:
        return await service.create(data)
    except ConflictError as exc:
        raise HTTPException(status_code=409, detail=exc.message) from exc

@router.get("", response_model=PaginatedProductResponse)
async def list_products(
    pagination: PaginationParams = Depends(),
    service: ProductService = Depends(get_product_service),
):
    return await service.find_all(pagination.to_request())

@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, service: ProductService = Depends(get_product_service)):
    try:
        return await service.find_one(product_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc

@router.patch("/{product_id}", response_model=ProductResponse)
async def update_product(
    product_id: int,
    data: ProductUpdate,
    service: ProductService = Depends(get_product_service),
):
    try:
        return await service.update(product_id, data)
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=exc.message) from exc

@router.delete("/{product_id}", status_code=204)
async def delete_product(product_id: int, service: ProductService = Depends(get_product_service)):
    await service.remove(product_id)
