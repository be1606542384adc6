# storefront/api/routers/products.py
from typing import Annotated, List

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_product_service
from storefront.domain.errors import ValidationFailedError
from storefront.domain.schemas import (
    ApiResponse,
    CategoryOut,
    PagedResponse,
    Pagination,
    ProductCreate,
    ProductOut,
    ProductQuery,
    ProductWrite,
    SearchResponse,
    StockUpdate,
)
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=PagedResponse[List[ProductOut]])
def get_products(
    query: Annotated[ProductQuery, Query()],
    svc: ProductService = Depends(get_product_service),
):
    result = svc.get_products(query)
    return PagedResponse[List[ProductOut]](
        data=result["products"],
        pagination=Pagination(**result["pagination"]),
        message="Products retrieved successfully",
    )


@router.get("/categories", response_model=ApiResponse[List[CategoryOut]])
def get_categories(svc: ProductService = Depends(get_product_service)):
    return ApiResponse[List[CategoryOut]](data=svc.get_categories(), message="Categories retrieved successfully")


@router.get("/featured", response_model=ApiResponse[List[ProductOut]])
def get_featured_products(
    limit: int = Query(10, ge=1, le=100),
    svc: ProductService = Depends(get_product_service),
):
    return ApiResponse[List[ProductOut]](
        data=svc.get_featured_products(limit),
        message="Featured products retrieved successfully",
    )


@router.get("/search", response_model=SearchResponse[List[ProductOut]])
def search_products(
    q: str | None = Query(None),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    svc: ProductService = Depends(get_product_service),
):
    if not q or not q.strip():
        raise ValidationFailedError("Please provide a search query")

    result = svc.search_products(q.strip(), limit=limit, offset=offset)
    return SearchResponse[List[ProductOut]](
        data=result["products"],
        pagination=Pagination(total=result["total"], limit=limit, offset=offset),
        query=result["query"],
        message="Products searched successfully",
    )


@router.get("/{product_id}", response_model=ApiResponse[ProductOut])
def get_product(product_id: int, svc: ProductService = Depends(get_product_service)):
    return ApiResponse[ProductOut](data=svc.get_product_by_id(product_id), message="Product retrieved successfully")


@router.post("", response_model=ApiResponse[ProductOut], status_code=201)
def create_product(payload: ProductCreate, svc: ProductService = Depends(get_product_service)):
    product = svc.create_product(payload.model_dump(exclude_unset=True))
    return ApiResponse[ProductOut](data=product, message="Product created successfully")


@router.put("/{product_id}", response_model=ApiResponse[ProductOut])
def update_product(product_id: int, payload: ProductWrite, svc: ProductService = Depends(get_product_service)):
    product = svc.update_product(product_id, payload.model_dump(exclude_unset=True))
    return ApiResponse[ProductOut](data=product, message="Product updated successfully")


@router.delete("/{product_id}", response_model=ApiResponse[ProductOut])
def delete_product(product_id: int, svc: ProductService = Depends(get_product_service)):
    return ApiResponse[ProductOut](data=svc.delete_product(product_id), message="Product deleted successfully")


@router.put("/{product_id}/stock", response_model=ApiResponse[ProductOut])
def update_stock(product_id: int, payload: StockUpdate, svc: ProductService = Depends(get_product_service)):
    product = svc.update_stock(product_id, payload.quantity, payload.operation)
    return ApiResponse[ProductOut](data=product, message="Product stock updated successfully")
