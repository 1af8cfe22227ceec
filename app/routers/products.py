# app/routers/products.py
from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from app.core.i18n import Language, get_language
from app.database import get_session
from app.repositories.catalog_repo import CatalogRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.common import ApiResponse, PaginatedResponse, Pagination
from app.schemas.product import (
    ProductDetail,
    ProductFilters,
    ProductRead,
    ReviewRead,
    SortField,
    SortOrder,
)
from app.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo, CatalogRepository(), OrderRepository())


@router.get("", response_model=PaginatedResponse[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    lang: Language = Depends(get_language),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    category: str | None = None,
    brand: str | None = None,
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    in_stock: bool = False,
    featured: bool = False,
    search: str | None = None,
    sort_by: SortField = "created_at",
    sort_order: SortOrder = "desc",
):
    """
    List active products.

    - Public endpoint.
    - Filters are optional and combine with AND.
    - `search` matches the localized name/description or the sku.
    """
    filters = ProductFilters(
        category=category,
        brand=brand,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        featured=featured,
        search=search.strip() if search else None,
    )
    products, total = service.list_products(
        session,
        filters,
        sort_by=sort_by,
        sort_order=sort_order,
        skip=(page - 1) * limit,
        limit=limit,
        lang=lang,
    )
    return PaginatedResponse[ProductRead](
        data=products,
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/featured", response_model=ApiResponse[list[ProductRead]])
def list_featured_products(
    session: Session = Depends(get_session),
    lang: Language = Depends(get_language),
    limit: int = Query(8, ge=1, le=50),
):
    """
    Featured products for the home page, newest first.
    """
    return ApiResponse[list[ProductRead]](
        data=service.list_featured(session, limit, lang),
    )


@router.get("/{product_id}", response_model=ApiResponse[ProductDetail])
def get_product(
    product_id: int,
    session: Session = Depends(get_session),
    lang: Language = Depends(get_language),
):
    """
    Get a single active product with images, variants, category and brand.

    - Public endpoint.
    """
    return ApiResponse[ProductDetail](
        data=service.get_product_detail(session, product_id, lang),
    )


@router.get("/{product_id}/reviews", response_model=PaginatedResponse[ReviewRead])
def list_product_reviews(
    product_id: int,
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    """
    Published reviews for a product, newest first.
    """
    reviews, total = service.list_reviews(
        session, product_id, skip=(page - 1) * limit, limit=limit
    )
    return PaginatedResponse[ReviewRead](
        data=reviews,
        pagination=Pagination.build(page, limit, total),
    )
