from sqlalchemy import func, or_
from sqlmodel import Session, select

from app.models.order import Order, OrderItem
from app.models.user import User


class OrderRepository:
    """
    Data access layer for orders and order_items.

    NOTE:
      - No commits in the create helpers; order creation is a multi-step
        transaction and the service is responsible for session.commit().
    """

    # ---- Orders ----

    def list_for_user(
        self,
        session: Session,
        user_id: int,
        skip: int = 0,
        limit: int = 20,
    ) -> list[Order]:
        stmt = (
            select(Order)
            .where(Order.user_id == user_id)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all())

    def count_for_user(self, session: Session, user_id: int) -> int:
        stmt = select(func.count(Order.id)).where(Order.user_id == user_id)
        return int(session.exec(stmt).one() or 0)

    def list_all(
        self,
        session: Session,
        status: str | None = None,
        search: str | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[tuple[Order, User | None]], int]:
        """
        Admin listing; `search` matches the customer's email or name.
        """
        conditions = []
        if status:
            conditions.append(Order.status == status)
        if search:
            term = f"%{search}%"
            conditions.append(
                or_(
                    User.email.like(term),
                    User.first_name.like(term),
                    User.last_name.like(term),
                    Order.email.like(term),
                )
            )

        count_stmt = (
            select(func.count(Order.id))
            .select_from(Order)
            .join(User, User.id == Order.user_id, isouter=True)
            .where(*conditions)
        )
        total = int(session.exec(count_stmt).one() or 0)

        stmt = (
            select(Order, User)
            .join(User, User.id == Order.user_id, isouter=True)
            .where(*conditions)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all()), total

    def get_by_id(self, session: Session, order_id: int) -> Order | None:
        return session.get(Order, order_id)

    def create_order(self, session: Session, order: Order) -> Order:
        """
        Insert an Order without committing, but ensure id is populated.
        """
        session.add(order)
        session.flush()  # Assign PK
        session.refresh(order)
        return order

    def update_order(self, session: Session, order: Order) -> Order:
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

    # ---- Order items ----

    def list_items_for_order(
        self,
        session: Session,
        order_id: int,
    ) -> list[OrderItem]:
        stmt = (
            select(OrderItem)
            .where(OrderItem.order_id == order_id)
            .order_by(OrderItem.id)
        )
        return list(session.exec(stmt).all())

    def count_items(self, session: Session, order_ids: list[int]) -> dict[int, int]:
        """Map order_id -> number of lines."""
        if not order_ids:
            return {}
        stmt = (
            select(OrderItem.order_id, func.count(OrderItem.id))
            .where(OrderItem.order_id.in_(order_ids))
            .group_by(OrderItem.order_id)
        )
        return {order_id: int(count) for order_id, count in session.exec(stmt).all()}

    def create_items(
        self,
        session: Session,
        items: list[OrderItem],
    ) -> list[OrderItem]:
        session.add_all(items)
        session.flush()
        for item in items:
            session.refresh(item)
        return items

    def product_has_orders(self, session: Session, product_id: int) -> bool:
        stmt = select(func.count(OrderItem.id)).where(OrderItem.product_id == product_id)
        return int(session.exec(stmt).one() or 0) > 0
