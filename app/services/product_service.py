# app/services/product_service.py
import json
import logging
from datetime import datetime, timezone
from typing import Any

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.i18n import Language, localized
from app.models.product import Brand, Category, Product, ProductImage, ProductVariant
from app.repositories.catalog_repo import CatalogRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.product import (
    AdminProductRead,
    ProductCreate,
    ProductDetail,
    ProductFilters,
    ProductImageRead,
    ProductRead,
    ProductUpdate,
    ProductVariantRead,
    ReviewRead,
    SortField,
    SortOrder,
)

logger = logging.getLogger(__name__)


def parse_specifications(raw: str | None) -> dict[str, Any]:
    """
    Decode the stored specifications JSON; anything that is not a JSON
    object reads as empty.
    """
    if not raw:
        return {}
    try:
        value = json.loads(raw)
    except ValueError:
        logger.warning("Ignoring malformed specifications JSON")
        return {}
    return value if isinstance(value, dict) else {}


class ProductService:
    """
    Business logic for the product catalog.

    Responsibilities:
      - storefront listing / featured / detail / reviews (active only)
      - localization of names and descriptions
      - admin CRUD with sku uniqueness and reference checks
      - admin-only operations (enforced at router via require_admin)
    """

    def __init__(
        self,
        repo: ProductRepository,
        catalog_repo: CatalogRepository,
        order_repo: OrderRepository,
    ):
        self.repo = repo
        self.catalog_repo = catalog_repo
        self.order_repo = order_repo

    # ----- Helpers -----

    @staticmethod
    def _to_read(
        product: Product,
        category: Category | None,
        brand: Brand | None,
        primary_image: str | None,
        lang: Language,
    ) -> ProductRead:
        return ProductRead(
            id=product.id,
            sku=product.sku,
            name=localized(product, "name", lang),
            name_en=product.name_en,
            name_jp=product.name_jp,
            short_description=localized(product, "short_description", lang),
            price=product.price,
            compare_price=product.compare_price,
            inventory_quantity=product.inventory_quantity,
            in_stock=product.inventory_quantity > 0,
            is_featured=product.is_featured,
            status=product.status,
            category_id=product.category_id,
            category_name=localized(category, "name", lang) if category else None,
            category_slug=category.slug if category else None,
            brand_id=product.brand_id,
            brand_name=brand.name if brand else None,
            primary_image=primary_image,
            created_at=product.created_at,
        )

    def _to_reads(
        self,
        session: Session,
        rows: list[tuple[Product, Category | None, Brand | None]],
        lang: Language,
    ) -> list[ProductRead]:
        images = self.repo.primary_images(session, [p.id for p, _, _ in rows])
        return [
            self._to_read(product, category, brand, images.get(product.id), lang)
            for product, category, brand in rows
        ]

    @staticmethod
    def _variant_read(variant: ProductVariant, lang: Language) -> ProductVariantRead:
        return ProductVariantRead(
            id=variant.id,
            sku=variant.sku,
            name=localized(variant, "name", lang),
            name_en=variant.name_en,
            name_jp=variant.name_jp,
            price=variant.price,
            compare_price=variant.compare_price,
            inventory_quantity=variant.inventory_quantity,
            image_url=variant.image_url,
            sort_order=variant.sort_order,
        )

    @staticmethod
    def _image_read(image: ProductImage, lang: Language) -> ProductImageRead:
        return ProductImageRead(
            id=image.id,
            image_url=image.image_url,
            alt_text=localized(image, "alt_text", lang),
            sort_order=image.sort_order,
            is_primary=image.is_primary,
        )

    @staticmethod
    def _admin_read(product: Product, total_orders: int, total_sold: int) -> AdminProductRead:
        return AdminProductRead.model_validate(
            product,
            update={
                "specifications": parse_specifications(product.specifications_json),
                "total_orders": int(total_orders or 0),
                "total_sold": int(total_sold or 0),
            },
        )

    def _ensure_references(
        self,
        session: Session,
        category_id: int | None,
        brand_id: int | None,
    ) -> None:
        if category_id is not None and not self.catalog_repo.get_category(session, category_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Category not found",
            )
        if brand_id is not None and not self.catalog_repo.get_brand(session, brand_id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Brand not found",
            )

    def _ensure_unique_sku(
        self,
        session: Session,
        sku: str,
        exclude_id: int | None = None,
    ) -> None:
        existing = self.repo.get_by_sku(session, sku)
        if existing and existing.id != exclude_id:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="SKU already exists",
            )

    # ----- Storefront -----

    def list_products(
        self,
        session: Session,
        filters: ProductFilters,
        sort_by: SortField = "created_at",
        sort_order: SortOrder = "desc",
        skip: int = 0,
        limit: int = 20,
        lang: Language = "en",
    ) -> tuple[list[ProductRead], int]:
        rows, total = self.repo.search(
            session,
            filters,
            sort_by=sort_by,
            sort_order=sort_order,
            skip=skip,
            limit=limit,
            lang=lang,
        )
        return self._to_reads(session, rows, lang), total

    def list_featured(
        self,
        session: Session,
        limit: int = 8,
        lang: Language = "en",
    ) -> list[ProductRead]:
        rows = self.repo.list_featured(session, limit)
        return self._to_reads(session, rows, lang)

    def get_product_detail(
        self,
        session: Session,
        product_id: int,
        lang: Language = "en",
    ) -> ProductDetail:
        """
        Active product with category, brand, gallery and active variants.
        """
        row = self.repo.get_active_with_relations(session, product_id)
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        product, category, brand = row

        images = self.repo.list_images_for_product(session, product.id)
        variants = self.repo.list_active_variants(session, product.id)
        primary = next((img.image_url for img in images if img.is_primary), None)

        base = self._to_read(product, category, brand, primary, lang)
        return ProductDetail(
            **base.model_dump(),
            description=localized(product, "description", lang),
            specifications=parse_specifications(product.specifications_json),
            weight=product.weight,
            images=[self._image_read(img, lang) for img in images],
            variants=[self._variant_read(v, lang) for v in variants],
        )

    def list_reviews(
        self,
        session: Session,
        product_id: int,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[ReviewRead], int]:
        if not self.repo.get_active_with_relations(session, product_id):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )

        rows, total = self.repo.list_published_reviews(session, product_id, skip, limit)
        reads = [
            ReviewRead.model_validate(
                review,
                update={
                    "first_name": user.first_name if user else None,
                    "last_name": user.last_name if user else None,
                },
            )
            for review, user in rows
        ]
        return reads, total

    # ----- Admin -----

    def list_admin_products(
        self,
        session: Session,
        search: str | None = None,
        category_id: int | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[AdminProductRead], int]:
        rows, total = self.repo.list_with_sales(session, search, category_id, skip, limit)
        return [self._admin_read(p, orders, sold) for p, orders, sold in rows], total

    def get_product(self, session: Session, product_id: int) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def get_admin_product(self, session: Session, product_id: int) -> AdminProductRead:
        product = self.get_product(session, product_id)
        total_orders, total_sold = self.repo.sales_counters(session, product.id)
        return self._admin_read(product, total_orders, total_sold)

    def create_product(
        self,
        session: Session,
        payload: ProductCreate,
    ) -> AdminProductRead:
        """
        Create a new product.

        - sku must be unique
        - category (and brand, if given) must exist
        - specifications are stored as a JSON string
        """
        self._ensure_unique_sku(session, payload.sku)
        self._ensure_references(session, payload.category_id, payload.brand_id)

        data = payload.model_dump(exclude={"specifications"})
        product = Product(
            **data,
            specifications_json=(
                json.dumps(payload.specifications, ensure_ascii=False)
                if payload.specifications is not None
                else None
            ),
        )
        product = self.repo.create(session, product)
        logger.info("Product created id=%s sku=%s", product.id, product.sku)
        return self._admin_read(product, 0, 0)

    def update_product(
        self,
        session: Session,
        product_id: int,
        payload: ProductUpdate,
    ) -> AdminProductRead:
        """
        Partial update of a product. Only fields present in the payload
        are touched.
        """
        product = self.get_product(session, product_id)
        changes = payload.model_dump(exclude_unset=True)

        if "sku" in changes and changes["sku"] != product.sku:
            self._ensure_unique_sku(session, changes["sku"], exclude_id=product.id)
        self._ensure_references(
            session,
            changes.get("category_id"),
            changes.get("brand_id"),
        )

        if "specifications" in changes:
            specs = changes.pop("specifications")
            product.specifications_json = (
                json.dumps(specs, ensure_ascii=False) if specs is not None else None
            )

        for field, value in changes.items():
            if value is None and field in ("sku", "name_en", "name_jp", "price", "category_id"):
                continue
            setattr(product, field, value)

        product.updated_at = datetime.now(timezone.utc)
        product = self.repo.update(session, product)
        logger.info("Product updated id=%s", product.id)

        total_orders, total_sold = self.repo.sales_counters(session, product.id)
        return self._admin_read(product, total_orders, total_sold)

    def delete_product(
        self,
        session: Session,
        product_id: int,
    ) -> None:
        """
        Delete a product with its images and variants.

        Products referenced by any order line are kept (400) so that order
        history stays intact; archive them instead.
        """
        product = self.get_product(session, product_id)
        if self.order_repo.product_has_orders(session, product.id):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot delete product that has been ordered",
            )

        self.repo.delete(session, product)
        logger.info("Product deleted id=%s", product_id)
