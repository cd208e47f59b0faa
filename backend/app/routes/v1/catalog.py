# backend/app/routes/v1/catalog.py
"""
Catalog routes - read-only product lookup for booking forms.

Endpoints under /api/v1/catalog:
    GET /categories                   → Registered product types
    GET /products                     → Available products across every type
    GET /{product_type}/products      → Available products of one type
"""

import asyncio
import logging

from fastapi import APIRouter, Depends
from fastapi.params import Path

from ...api.dependencies.services import get_catalog_service
from ...core.exceptions import DomainException
from ...schemas.catalog import CategoryListResponse, ProductListResponse, ProductResponse
from ...services.catalog_service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["catalog-v1"])


@router.get("/categories", response_model=CategoryListResponse)
async def list_categories(
    service: CatalogService = Depends(get_catalog_service),
) -> CategoryListResponse:
    """All registered product types, sorted."""
    try:
        names = await asyncio.to_thread(service.list_categories)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return CategoryListResponse(categories=sorted(names))


@router.get("/products", response_model=ProductListResponse)
async def list_all_products(
    service: CatalogService = Depends(get_catalog_service),
) -> ProductListResponse:
    """Every product currently open for booking."""
    try:
        products = await asyncio.to_thread(service.list_all_available)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return ProductListResponse(
        products=[ProductResponse.model_validate(product) for product in products]
    )


@router.get("/{product_type}/products", response_model=ProductListResponse)
async def list_products(
    product_type: str = Path(..., max_length=100),
    service: CatalogService = Depends(get_catalog_service),
) -> ProductListResponse:
    """Products of one type that are open for booking; 404 for an unknown type."""
    try:
        products = await asyncio.to_thread(service.list_available, product_type)
    except DomainException as exc:
        raise exc.to_http_exception() from exc
    return ProductListResponse(
        product_type=product_type,
        products=[ProductResponse.model_validate(product) for product in products],
    )
