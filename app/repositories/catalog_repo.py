from sqlalchemy import func
from sqlmodel import Session, select

from app.models.product import Brand, Category, Product


class CatalogRepository:
    """
    Read-only taxonomy queries (categories, brands) with active product counts.
    """

    def list_active_categories(self, session: Session) -> list[tuple[Category, int]]:
        product_count = (
            select(func.count(Product.id))
            .where(Product.category_id == Category.id, Product.status == "active")
            .correlate(Category)
            .scalar_subquery()
        )
        stmt = (
            select(Category, product_count)
            .where(Category.is_active == True)  # noqa: E712
            .order_by(Category.sort_order, Category.id)
        )
        return list(session.exec(stmt).all())

    def get_active_category_by_slug(self, session: Session, slug: str) -> Category | None:
        stmt = select(Category).where(
            Category.slug == slug,
            Category.is_active == True,  # noqa: E712
        )
        return session.exec(stmt).first()

    def count_active_products_in_category(self, session: Session, category_id: int) -> int:
        stmt = select(func.count(Product.id)).where(
            Product.category_id == category_id,
            Product.status == "active",
        )
        return int(session.exec(stmt).one() or 0)

    def list_active_brands(self, session: Session) -> list[tuple[Brand, int]]:
        product_count = (
            select(func.count(Product.id))
            .where(Product.brand_id == Brand.id, Product.status == "active")
            .correlate(Brand)
            .scalar_subquery()
        )
        stmt = (
            select(Brand, product_count)
            .where(Brand.is_active == True)  # noqa: E712
            .order_by(Brand.name)
        )
        return list(session.exec(stmt).all())

    def get_category(self, session: Session, category_id: int) -> Category | None:
        return session.get(Category, category_id)

    def get_brand(self, session: Session, brand_id: int) -> Brand | None:
        return session.get(Brand, brand_id)
