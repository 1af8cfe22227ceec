# app/services/catalog_service.py
from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.i18n import Language, localized
from app.models.product import Category
from app.repositories.catalog_repo import CatalogRepository
from app.schemas.product import BrandRead, CategoryRead


class CatalogService:
    """Categories and brands for navigation menus."""

    def __init__(self, repo: CatalogRepository):
        self.repo = repo

    @staticmethod
    def _category_read(category: Category, product_count: int, lang: Language) -> CategoryRead:
        return CategoryRead(
            id=category.id,
            slug=category.slug,
            name=localized(category, "name", lang),
            name_en=category.name_en,
            name_jp=category.name_jp,
            description=localized(category, "description", lang),
            image_url=category.image_url,
            parent_id=category.parent_id,
            sort_order=category.sort_order,
            product_count=int(product_count or 0),
        )

    def list_categories(self, session: Session, lang: Language = "en") -> list[CategoryRead]:
        return [
            self._category_read(category, count, lang)
            for category, count in self.repo.list_active_categories(session)
        ]

    def get_category(self, session: Session, slug: str, lang: Language = "en") -> CategoryRead:
        category = self.repo.get_active_category_by_slug(session, slug)
        if not category:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Category not found",
            )
        count = self.repo.count_active_products_in_category(session, category.id)
        return self._category_read(category, count, lang)

    def list_brands(self, session: Session, lang: Language = "en") -> list[BrandRead]:
        return [
            BrandRead(
                id=brand.id,
                name=brand.name,
                logo_url=brand.logo_url,
                website_url=brand.website_url,
                description=localized(brand, "description", lang),
                product_count=int(count or 0),
            )
            for brand, count in self.repo.list_active_brands(session)
        ]
