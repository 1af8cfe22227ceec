# app/services/cart_service.py
import logging
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.config import get_settings
from app.core.i18n import Language, localized
from app.core.security import generate_session_token
from app.models.cart import CartItem, ShoppingSession
from app.models.product import Product, ProductVariant
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import (
    CartItemCreate,
    CartItemUpdate,
    CartItemRead,
    CartSummary,
)
from app.services.pricing import compute_totals

logger = logging.getLogger(__name__)

settings = get_settings()


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - session lifecycle: lazily create on first write, ignore expired
        sessions, supersede an expired token with a fresh one
      - validate product / variant existence and availability
      - capture the unit price at add time (variant price wins)
      - merge repeated adds of the same (product, variant) into one line
      - compute totals on every read/write
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def _get_valid_product(self, session: Session, product_id: int) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        if product.status != "active":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Product is not available",
            )
        return product

    def _get_valid_variant(
        self,
        session: Session,
        product: Product,
        variant_id: int,
    ) -> ProductVariant:
        variant = self.product_repo.get_variant(session, variant_id)
        if not variant or variant.product_id != product.id or not variant.is_active:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Variant not found",
            )
        return variant

    def _active_session(
        self,
        session: Session,
        token: str | None,
    ) -> ShoppingSession | None:
        if not token:
            return None
        return self.cart_repo.get_active_session(session, token, self._now())

    def _get_or_create_session(
        self,
        session: Session,
        token: str | None,
        user_id: int | None,
    ) -> ShoppingSession:
        """
        Return the active session for `token`, creating one if needed.

        A token whose session has expired is not reused; a fresh token is
        issued and the old row is left to age out.
        """
        active = self._active_session(session, token)
        if active:
            return active

        if token and self.cart_repo.get_session_by_token(session, token) is not None:
            logger.info("Shopping session expired; issuing a new token")
            token = None

        now = self._now()
        shopping_session = ShoppingSession(
            session_token=token or generate_session_token(),
            user_id=user_id,
            expires_at=now + timedelta(days=settings.SESSION_TTL_DAYS),
            created_at=now,
        )
        shopping_session = self.cart_repo.create_session(session, shopping_session)
        logger.info(
            "Created shopping session id=%s user_id=%s",
            shopping_session.id,
            user_id,
        )
        return shopping_session

    def _build_summary(
        self,
        session: Session,
        session_id: int | None,
        lang: Language,
    ) -> CartSummary:
        rows = self.cart_repo.list_lines(session, session_id) if session_id else []
        images = self.product_repo.primary_images(
            session, list({product.id for _, product, _ in rows})
        )

        item_reads: list[CartItemRead] = []
        for item, product, variant in rows:
            item_reads.append(
                CartItemRead(
                    id=item.id,
                    product_id=item.product_id,
                    product_variant_id=item.product_variant_id,
                    quantity=item.quantity,
                    price=item.price,
                    line_total=item.price * item.quantity,
                    sku=variant.sku if variant else product.sku,
                    name=localized(product, "name", lang),
                    name_en=product.name_en,
                    name_jp=product.name_jp,
                    variant_name=localized(variant, "name", lang) if variant else None,
                    image_url=(variant.image_url if variant else None)
                    or images.get(product.id),
                    inventory_quantity=(
                        variant.inventory_quantity if variant else product.inventory_quantity
                    ),
                    created_at=item.created_at,
                )
            )

        totals = compute_totals(item for item, _, _ in rows)
        return CartSummary(
            items=item_reads,
            subtotal=totals.subtotal,
            tax=totals.tax,
            shipping=totals.shipping,
            discount=totals.discount,
            total=totals.total,
            item_count=totals.item_count,
        )

    # ---- public operations ----

    def get_cart(
        self,
        session: Session,
        token: str | None,
        lang: Language = "en",
    ) -> tuple[CartSummary, str]:
        """
        Return (cart summary, session token).

        Reads never create a session: an unknown or expired token yields an
        empty cart, and a missing token gets a fresh (unpersisted) one.
        """
        active = self._active_session(session, token)
        if active is None:
            return self._build_summary(session, None, lang), token or generate_session_token()
        return self._build_summary(session, active.id, lang), active.session_token

    def add_item(
        self,
        session: Session,
        token: str | None,
        payload: CartItemCreate,
        user_id: int | None = None,
        lang: Language = "en",
    ) -> tuple[CartSummary, str]:
        """
        Add a product (optionally a variant) to the cart.

        Rules:
          - product must exist and be active; variant must belong to it
          - requested quantity <= available inventory
          - price is captured from the variant, else the product
          - same (product, variant) increments the existing line
        """
        product = self._get_valid_product(session, payload.product_id)
        variant = (
            self._get_valid_variant(session, product, payload.variant_id)
            if payload.variant_id is not None
            else None
        )

        available = variant.inventory_quantity if variant else product.inventory_quantity
        if available < payload.quantity:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Insufficient inventory",
            )

        shopping_session = self._get_or_create_session(session, token, user_id)

        existing = self.cart_repo.get_line(
            session,
            shopping_session.id,
            product.id,
            variant.id if variant else None,
        )
        if existing:
            existing.quantity += payload.quantity
            existing.updated_at = self._now()
            self.cart_repo.update(session, existing)
        else:
            item = CartItem(
                session_id=shopping_session.id,
                product_id=product.id,
                product_variant_id=variant.id if variant else None,
                quantity=payload.quantity,
                price=variant.price if variant else product.price,
            )
            self.cart_repo.create(session, item)

        summary = self._build_summary(session, shopping_session.id, lang)
        return summary, shopping_session.session_token

    def update_item(
        self,
        session: Session,
        token: str | None,
        item_id: int,
        payload: CartItemUpdate,
        lang: Language = "en",
    ) -> tuple[CartSummary, str]:
        """
        Set the quantity of a line; quantity 0 removes it.
        """
        active = self._active_session(session, token)
        item = self.cart_repo.get_item(session, active.id, item_id) if active else None
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not in cart",
            )

        if payload.quantity == 0:
            self.cart_repo.delete(session, item)
        else:
            item.quantity = payload.quantity
            item.updated_at = self._now()
            self.cart_repo.update(session, item)

        return self._build_summary(session, active.id, lang), active.session_token

    def remove_item(
        self,
        session: Session,
        token: str | None,
        item_id: int,
        lang: Language = "en",
    ) -> tuple[CartSummary, str]:
        """
        Remove a line from the cart and return the updated summary.
        """
        active = self._active_session(session, token)
        item = self.cart_repo.get_item(session, active.id, item_id) if active else None
        if not item:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not in cart",
            )

        self.cart_repo.delete(session, item)
        return self._build_summary(session, active.id, lang), active.session_token

    def clear_cart(
        self,
        session: Session,
        token: str | None,
        lang: Language = "en",
    ) -> tuple[CartSummary, str]:
        """
        Clear all items from the cart and return an empty summary.
        """
        active = self._active_session(session, token)
        if active:
            self.cart_repo.clear(session, active.id)
            return self._build_summary(session, active.id, lang), active.session_token
        return self._build_summary(session, None, lang), token or generate_session_token()

    def get_active_session(
        self,
        session: Session,
        token: str | None,
    ) -> ShoppingSession | None:
        """Active session for `token` (used by checkout)."""
        return self._active_session(session, token)
