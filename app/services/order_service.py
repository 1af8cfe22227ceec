# app/services/order_service.py
import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.auth import STAFF_ROLES
from app.core.security import generate_order_number
from app.models.order import Order, OrderItem
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.schemas.order import (
    Address,
    AdminOrderRead,
    OrderCreate,
    OrderDetail,
    OrderItemRead,
    OrderProgressUpdate,
    OrderRead,
    OrderStatusUpdate,
)
from app.services.pricing import compute_totals

logger = logging.getLogger(__name__)

# Manual progression, one step per call
NEXT_STATUS: dict[str, str] = {
    "pending": "confirmed",
    "confirmed": "processing",
    "processing": "shipped",
    "shipped": "delivered",
}

PAYMENT_STATUS_BY_METHOD: dict[str, str] = {
    "cod": "cod_pending",
    # Demo card payments are treated as captured immediately
    "credit_card": "completed",
}

ADDRESS_FIELDS = (
    "first_name",
    "last_name",
    "company",
    "address1",
    "address2",
    "city",
    "province",
    "country",
    "zip",
    "phone",
)


def _address_columns(prefix: str, address: Address) -> dict[str, str | None]:
    return {f"{prefix}_{name}": getattr(address, name) for name in ADDRESS_FIELDS}


def _address_from_order(order: Order, prefix: str) -> Address | None:
    if getattr(order, f"{prefix}_address1") is None:
        return None
    return Address(**{name: getattr(order, f"{prefix}_{name}") for name in ADDRESS_FIELDS})


class OrderService:
    """
    Business logic for orders.

    Responsibilities:
      - Create order from the shopping-session cart (guest or user)
      - Snapshot lines, addresses and totals
      - Clear cart after success (same transaction)
      - Manual status progression (owner or staff)
      - Admin listing and status override
    """

    def __init__(
        self,
        order_repo: OrderRepository,
        cart_repo: CartRepository,
    ):
        self.order_repo = order_repo
        self.cart_repo = cart_repo

    # -------- Checkout --------

    def create_order_from_cart(
        self,
        session: Session,
        user_id: int | None,
        session_token: str | None,
        payload: OrderCreate,
    ) -> OrderDetail:
        """
        Convert the cart behind `session_token` into an Order.

        Steps:
          1. Resolve the active shopping session; error if cart is empty.
          2. Compute totals from the cart lines.
          3. Create Order row (status='pending', payment status by method).
          4. Create OrderItem rows as frozen copies of the cart lines.
          5. Clear cart.
          6. Commit everything at once and return the full order.
        """
        now = datetime.now(timezone.utc)
        token = payload.session_token or session_token

        # 1) Load cart
        shopping_session = (
            self.cart_repo.get_active_session(session, token, now) if token else None
        )
        rows = (
            self.cart_repo.list_lines(session, shopping_session.id)
            if shopping_session
            else []
        )
        if not rows:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cart is empty",
            )

        # 2) Totals
        totals = compute_totals(item for item, _, _ in rows)

        # 3) Order row
        billing = payload.billing or payload.shipping
        order = Order(
            order_number=generate_order_number(),
            user_id=user_id,
            email=payload.email,
            status="pending",
            payment_status=PAYMENT_STATUS_BY_METHOD[payload.payment_method],
            payment_method=payload.payment_method,
            shipping_status="pending",
            subtotal=totals.subtotal,
            tax_amount=totals.tax,
            shipping_amount=totals.shipping,
            discount_amount=totals.discount,
            total_amount=totals.total,
            currency="JPY",
            notes=payload.notes,
            created_at=now,
            updated_at=now,
            **_address_columns("shipping", payload.shipping),
            **_address_columns("billing", billing),
        )
        order = self.order_repo.create_order(session, order)

        # 4) Snapshot lines
        order_items: list[OrderItem] = []
        for item, product, variant in rows:
            name = product.name_en
            if variant:
                name = f"{name} - {variant.name_en}"
            order_items.append(
                OrderItem(
                    order_id=order.id,
                    product_id=product.id,
                    product_variant_id=variant.id if variant else None,
                    sku=variant.sku if variant else product.sku,
                    name=name,
                    quantity=item.quantity,
                    price=item.price,
                    total=item.price * item.quantity,
                )
            )
        order_items = self.order_repo.create_items(session, order_items)

        # 5) Clear cart
        self.cart_repo.clear(session, shopping_session.id, commit=False)

        # 6) Commit transaction
        session.commit()
        session.refresh(order)

        logger.info(
            "Order created id=%s number=%s user_id=%s total=%s",
            order.id,
            order.order_number,
            user_id,
            order.total_amount,
        )
        return self._build_order_detail(order, order_items)

    # -------- User-facing reads --------

    def list_user_orders(
        self,
        session: Session,
        user_id: int,
        skip: int = 0,
        limit: int = 10,
    ) -> tuple[list[OrderRead], int]:
        """
        List orders for the given user (without items), newest first.
        """
        orders = self.order_repo.list_for_user(session, user_id, skip, limit)
        total = self.order_repo.count_for_user(session, user_id)
        counts = self.order_repo.count_items(session, [o.id for o in orders])
        reads = [
            OrderRead.model_validate(o, update={"item_count": counts.get(o.id, 0)})
            for o in orders
        ]
        return reads, total

    def get_user_order(
        self,
        session: Session,
        user_id: int,
        order_id: int,
    ) -> OrderDetail:
        """
        Get a single order for the user, including items.

        - 404 if order not found or does not belong to this user.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or order.user_id != user_id:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_detail(order, items)

    # -------- Progress simulation --------

    def advance_status(
        self,
        session: Session,
        user: User,
        order_id: int,
        payload: OrderProgressUpdate | None = None,
    ) -> OrderRead:
        """
        Move an order one step along

          pending -> confirmed -> processing -> shipped -> delivered

        The caller must own the order or be staff. A requested status, if
        given, must be exactly the next step. Delivered and cancelled
        orders cannot move.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order or (order.user_id != user.id and user.role not in STAFF_ROLES):
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

        current = order.status
        # delivered and cancelled have no next step
        if current not in NEXT_STATUS:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Order status cannot be advanced from {current}",
            )

        new = NEXT_STATUS[current]
        if payload is not None and payload.status is not None and payload.status != new:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status transition: {current} -> {payload.status}",
            )

        self._apply_status(order, new)
        order = self.order_repo.update_order(session, order)
        logger.info("Order %s advanced %s -> %s by user %s", order.id, current, new, user.id)
        return self._build_order_read(session, order)

    # -------- Admin operations --------

    def list_all_orders(
        self,
        session: Session,
        status_filter: str | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[AdminOrderRead], int]:
        """
        List all orders (admin only), optionally filtered.
        """
        rows, total = self.order_repo.list_all(session, status_filter, search, skip, limit)
        counts = self.order_repo.count_items(session, [o.id for o, _ in rows])
        reads = [
            AdminOrderRead.model_validate(
                order,
                update={
                    "item_count": counts.get(order.id, 0),
                    "customer_first_name": customer.first_name if customer else None,
                    "customer_last_name": customer.last_name if customer else None,
                },
            )
            for order, customer in rows
        ]
        return reads, total

    def get_order_admin(
        self,
        session: Session,
        order_id: int,
    ) -> OrderDetail:
        """
        Get any order with items (admin only).
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )
        items = self.order_repo.list_items_for_order(session, order.id)
        return self._build_order_detail(order, items)

    def update_status(
        self,
        session: Session,
        order_id: int,
        payload: OrderStatusUpdate,
    ) -> OrderRead:
        """
        Admin status override.

        Any status may be set, including 'cancelled'; a cancelled order
        stays cancelled.
        """
        order = self.order_repo.get_by_id(session, order_id)
        if not order:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Order not found",
            )

        current = order.status
        new = payload.status

        if current == new:
            return self._build_order_read(session, order)

        if current == "cancelled":
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"Invalid status transition: {current} -> {new}",
            )

        self._apply_status(order, new)
        order = self.order_repo.update_order(session, order)
        logger.info("Order %s status set %s -> %s by admin", order.id, current, new)
        return self._build_order_read(session, order)

    # -------- Helpers --------

    @staticmethod
    def _apply_status(order: Order, new: str) -> None:
        now = datetime.now(timezone.utc)
        order.status = new
        order.updated_at = now
        if new == "shipped":
            order.shipping_status = "shipped"
            order.shipped_at = now
        elif new == "delivered":
            order.shipping_status = "delivered"
            order.delivered_at = now
        elif new == "cancelled":
            order.cancelled_at = now

    def _build_order_read(self, session: Session, order: Order) -> OrderRead:
        counts = self.order_repo.count_items(session, [order.id])
        return OrderRead.model_validate(order, update={"item_count": counts.get(order.id, 0)})

    def _build_order_detail(
        self,
        order: Order,
        items: list[OrderItem],
    ) -> OrderDetail:
        """
        Compose OrderDetail from ORM models.
        """
        item_dtos = [OrderItemRead.model_validate(it) for it in items]
        return OrderDetail.model_validate(
            order,
            update={
                "item_count": len(item_dtos),
                "items": item_dtos,
                "shipping_address": _address_from_order(order, "shipping"),
                "billing_address": _address_from_order(order, "billing"),
            },
        )
