from datetime import datetime

from sqlmodel import Session, select

from app.models.cart import CartItem, ShoppingSession
from app.models.product import Product, ProductVariant


class CartRepository:
    """
    Data access for shopping sessions and their cart lines.

    Expiry is enforced here: "active" lookups compare expires_at against
    the caller-supplied `now`.
    """

    # ---- Sessions ----

    def get_active_session(
        self,
        session: Session,
        token: str,
        now: datetime,
    ) -> ShoppingSession | None:
        stmt = select(ShoppingSession).where(
            ShoppingSession.session_token == token,
            ShoppingSession.expires_at > now,
        )
        return session.exec(stmt).first()

    def get_session_by_token(self, session: Session, token: str) -> ShoppingSession | None:
        stmt = select(ShoppingSession).where(ShoppingSession.session_token == token)
        return session.exec(stmt).first()

    def create_session(
        self,
        session: Session,
        shopping_session: ShoppingSession,
    ) -> ShoppingSession:
        session.add(shopping_session)
        session.commit()
        session.refresh(shopping_session)
        return shopping_session

    # ---- Lines ----

    def list_lines(
        self,
        session: Session,
        session_id: int,
    ) -> list[tuple[CartItem, Product, ProductVariant | None]]:
        """
        Cart lines with their product (and variant) for display, newest first.
        """
        stmt = (
            select(CartItem, Product, ProductVariant)
            .join(Product, Product.id == CartItem.product_id)
            .join(
                ProductVariant,
                ProductVariant.id == CartItem.product_variant_id,
                isouter=True,
            )
            .where(CartItem.session_id == session_id)
            .order_by(CartItem.created_at.desc(), CartItem.id.desc())
        )
        return list(session.exec(stmt).all())

    def list_items(self, session: Session, session_id: int) -> list[CartItem]:
        stmt = select(CartItem).where(CartItem.session_id == session_id)
        return list(session.exec(stmt).all())

    def get_line(
        self,
        session: Session,
        session_id: int,
        product_id: int,
        variant_id: int | None,
    ) -> CartItem | None:
        """
        Existing line for the same (product, variant) pair in this session.
        """
        stmt = select(CartItem).where(
            CartItem.session_id == session_id,
            CartItem.product_id == product_id,
        )
        if variant_id is None:
            stmt = stmt.where(CartItem.product_variant_id.is_(None))
        else:
            stmt = stmt.where(CartItem.product_variant_id == variant_id)
        return session.exec(stmt).first()

    def get_item(
        self,
        session: Session,
        session_id: int,
        item_id: int,
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.id == item_id,
            CartItem.session_id == session_id,
        )
        return session.exec(stmt).first()

    # CRUD
    def create(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def update(self, session: Session, item: CartItem) -> CartItem:
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def delete(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.commit()

    def clear(self, session: Session, session_id: int, commit: bool = True) -> None:
        for row in self.list_items(session, session_id):
            session.delete(row)
        if commit:
            session.commit()
