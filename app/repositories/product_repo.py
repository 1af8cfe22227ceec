from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.core.i18n import Language
from app.models.cart import CartItem
from app.models.order import OrderItem
from app.models.product import Brand, Category, Product, ProductImage, ProductVariant
from app.models.review import Review
from app.models.user import User
from app.schemas.product import ProductFilters, SortField, SortOrder


class ProductRepository:
    """
    Data access layer for Product, ProductImage, ProductVariant and Review.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    - Storefront queries only see status='active' products.
    """

    # ----- Helpers -----

    @staticmethod
    def _name_column(lang: Language):
        return Product.name_jp if lang == "jp" else Product.name_en

    @staticmethod
    def _description_column(lang: Language):
        return Product.description_jp if lang == "jp" else Product.description_en

    def _storefront_query(self, filters: ProductFilters, lang: Language):
        """
        Base SELECT for the storefront listing; each provided filter adds a
        parameterized WHERE clause.
        """
        stmt = (
            select(Product, Category, Brand)
            .join(Category, Category.id == Product.category_id, isouter=True)
            .join(Brand, Brand.id == Product.brand_id, isouter=True)
            .where(Product.status == "active")
        )

        if filters.category:
            stmt = stmt.where(Category.slug == filters.category)
        if filters.brand:
            stmt = stmt.where(Brand.name == filters.brand)
        if filters.min_price is not None:
            stmt = stmt.where(Product.price >= filters.min_price)
        if filters.max_price is not None:
            stmt = stmt.where(Product.price <= filters.max_price)
        if filters.in_stock:
            stmt = stmt.where(Product.inventory_quantity > 0)
        if filters.featured:
            stmt = stmt.where(Product.is_featured == True)  # noqa: E712
        if filters.search:
            term = f"%{filters.search}%"
            stmt = stmt.where(
                or_(
                    self._name_column(lang).like(term),
                    self._description_column(lang).like(term),
                    Product.sku.like(term),
                )
            )
        return stmt

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return session.get(Product, product_id)

    def get_by_sku(self, session: Session, sku: str) -> Product | None:
        stmt = select(Product).where(Product.sku == sku)
        return session.exec(stmt).first()

    def get_active_with_relations(
        self,
        session: Session,
        product_id: int,
    ) -> tuple[Product, Category | None, Brand | None] | None:
        stmt = (
            select(Product, Category, Brand)
            .join(Category, Category.id == Product.category_id, isouter=True)
            .join(Brand, Brand.id == Product.brand_id, isouter=True)
            .where(Product.id == product_id, Product.status == "active")
        )
        return session.exec(stmt).first()

    def search(
        self,
        session: Session,
        filters: ProductFilters,
        sort_by: SortField = "created_at",
        sort_order: SortOrder = "desc",
        skip: int = 0,
        limit: int = 20,
        lang: Language = "en",
    ) -> tuple[list[tuple[Product, Category | None, Brand | None]], int]:
        """
        Filtered, sorted, paginated storefront listing.

        Returns:
            (rows for the requested page, total matching rows)
        """
        stmt = self._storefront_query(filters, lang)

        count_stmt = select(func.count()).select_from(stmt.subquery())
        total = int(session.exec(count_stmt).one() or 0)

        sort_columns = {
            "price": Product.price,
            "name": self._name_column(lang),
            "created_at": Product.created_at,
            "inventory_quantity": Product.inventory_quantity,
        }
        column = sort_columns[sort_by]
        ordering = column.asc() if sort_order == "asc" else column.desc()
        stmt = stmt.order_by(ordering, Product.id.asc()).offset(skip).limit(limit)

        return list(session.exec(stmt).all()), total

    def list_featured(
        self,
        session: Session,
        limit: int = 8,
    ) -> list[tuple[Product, Category | None, Brand | None]]:
        stmt = (
            select(Product, Category, Brand)
            .join(Category, Category.id == Product.category_id, isouter=True)
            .join(Brand, Brand.id == Product.brand_id, isouter=True)
            .where(Product.status == "active", Product.is_featured == True)  # noqa: E712
            .order_by(Product.created_at.desc(), Product.id.desc())
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def create(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def update(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        # every row referencing the product goes first
        for item in session.exec(select(CartItem).where(CartItem.product_id == product.id)).all():
            session.delete(item)
        for review in session.exec(select(Review).where(Review.product_id == product.id)).all():
            session.delete(review)
        for image in self.list_images_for_product(session, product.id):
            session.delete(image)
        for variant in session.exec(
            select(ProductVariant).where(ProductVariant.product_id == product.id)
        ).all():
            session.delete(variant)
        session.flush()
        session.delete(product)
        session.commit()

    # ----- Admin listing -----

    def list_with_sales(
        self,
        session: Session,
        search: str | None = None,
        category_id: int | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[tuple[Product, int, int]], int]:
        """
        All products (any status) with order-line counters:
          (product, total_orders, total_sold)
        """
        conditions = []
        if search:
            term = f"%{search}%"
            conditions.append(
                or_(
                    Product.name_en.like(term),
                    Product.name_jp.like(term),
                    Product.description_en.like(term),
                    Product.sku.like(term),
                )
            )
        if category_id is not None:
            conditions.append(Product.category_id == category_id)

        total = int(
            session.exec(select(func.count(Product.id)).where(*conditions)).one() or 0
        )

        stmt = (
            select(
                Product,
                func.count(OrderItem.id),
                func.coalesce(func.sum(OrderItem.quantity), 0),
            )
            .join(OrderItem, OrderItem.product_id == Product.id, isouter=True)
            .where(*conditions)
            .group_by(Product.id)
            .order_by(Product.created_at.desc(), Product.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all()), total

    def sales_counters(self, session: Session, product_id: int) -> tuple[int, int]:
        stmt = select(
            func.count(OrderItem.id),
            func.coalesce(func.sum(OrderItem.quantity), 0),
        ).where(OrderItem.product_id == product_id)
        total_orders, total_sold = session.exec(stmt).one()
        return int(total_orders or 0), int(total_sold or 0)

    # ----- Product images -----

    def list_images_for_product(
        self,
        session: Session,
        product_id: int,
    ) -> list[ProductImage]:
        stmt = (
            select(ProductImage)
            .where(ProductImage.product_id == product_id)
            .order_by(ProductImage.sort_order)
        )
        return list(session.exec(stmt).all())

    def primary_images(
        self,
        session: Session,
        product_ids: list[int],
    ) -> dict[int, str]:
        """
        Map product_id -> primary image url for the given products.
        """
        if not product_ids:
            return {}
        stmt = (
            select(ProductImage)
            .where(
                ProductImage.product_id.in_(product_ids),
                ProductImage.is_primary == True,  # noqa: E712
            )
            .order_by(ProductImage.sort_order)
        )
        result: dict[int, str] = {}
        for image in session.exec(stmt).all():
            result.setdefault(image.product_id, image.image_url)
        return result

    # ----- Variants -----

    def get_variant(self, session: Session, variant_id: int) -> ProductVariant | None:
        return session.get(ProductVariant, variant_id)

    def list_active_variants(
        self,
        session: Session,
        product_id: int,
    ) -> list[ProductVariant]:
        stmt = (
            select(ProductVariant)
            .where(
                ProductVariant.product_id == product_id,
                ProductVariant.is_active == True,  # noqa: E712
            )
            .order_by(ProductVariant.sort_order)
        )
        return list(session.exec(stmt).all())

    # ----- Reviews -----

    def list_published_reviews(
        self,
        session: Session,
        product_id: int,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[tuple[Review, User | None]], int]:
        where = (Review.product_id == product_id, Review.is_published == True)  # noqa: E712

        total = int(
            session.exec(select(func.count(Review.id)).where(*where)).one() or 0
        )
        stmt = (
            select(Review, User)
            .join(User, User.id == Review.user_id, isouter=True)
            .where(*where)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all()), total
