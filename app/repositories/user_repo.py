from datetime import datetime

from sqlalchemy import distinct, func, or_
from sqlmodel import Session, select

from app.models.order import Order
from app.models.user import User

# (user, order_count, total_spent, last_order_date)
UserWithStats = tuple[User, int, float, datetime | None]


class UserRepository:
    """
    Data access layer for User.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    # ----- Basic CRUD -----

    def get_by_id(self, session: Session, user_id: int) -> User | None:
        """Return a User by primary key, or None if not found."""
        return session.get(User, user_id)

    def get_active_by_id(self, session: Session, user_id: int) -> User | None:
        """Return an active User by primary key, or None."""
        stmt = select(User).where(User.id == user_id, User.is_active == True)  # noqa: E712
        return session.exec(stmt).first()

    def get_by_email(self, session: Session, email: str) -> User | None:
        """Return a User by unique email, or None if not found."""
        stmt = select(User).where(User.email == email)
        return session.exec(stmt).first()

    def create(self, session: Session, user: User) -> User:
        """Insert a new User and return the persisted row."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    # ----- Admin queries -----

    def _with_stats(self):
        return (
            select(
                User,
                func.count(distinct(Order.id)),
                func.coalesce(func.sum(Order.total_amount), 0.0),
                func.max(Order.created_at),
            )
            .join(Order, Order.user_id == User.id, isouter=True)
            .group_by(User.id)
        )

    def list_with_stats(
        self,
        session: Session,
        search: str | None = None,
        role: str | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[UserWithStats], int]:
        """
        Paginated user listing with order aggregates.

        Args:
            search: substring of email / first name / last name
            role: exact role filter

        Returns:
            (rows, total matching users)
        """
        conditions = []
        if search:
            term = f"%{search}%"
            conditions.append(
                or_(
                    User.email.like(term),
                    User.first_name.like(term),
                    User.last_name.like(term),
                )
            )
        if role:
            conditions.append(User.role == role)

        total = int(
            session.exec(select(func.count(User.id)).where(*conditions)).one() or 0
        )
        stmt = (
            self._with_stats()
            .where(*conditions)
            .order_by(User.created_at.desc(), User.id.desc())
            .offset(skip)
            .limit(limit)
        )
        return list(session.exec(stmt).all()), total

    def get_with_stats(self, session: Session, user_id: int) -> UserWithStats | None:
        stmt = self._with_stats().where(User.id == user_id)
        return session.exec(stmt).first()
