# app/services/user_service.py
import logging
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlmodel import Session

from app.core.auth import STAFF_ROLES
from app.core.security import create_access_token, hash_password, verify_password
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.repositories.user_repo import UserRepository, UserWithStats
from app.schemas.order import OrderRead
from app.schemas.user import (
    AdminLogin,
    AdminUserDetail,
    AdminUserRead,
    AuthResult,
    AuthUser,
    GoogleLogin,
    UserLogin,
    UserRegister,
    UserStatusUpdate,
)

logger = logging.getLogger(__name__)

RECENT_ORDERS_LIMIT = 5


class UserService:
    """
    Business logic for User.

    Responsibilities:
      - registration / login (password and Google) and token issuance
      - account activation rules
      - admin listing with order aggregates
      - map domain errors to HTTP errors
    """

    def __init__(self, repo: UserRepository, order_repo: OrderRepository):
        self.repo = repo
        self.order_repo = order_repo

    # ----- Helpers -----

    @staticmethod
    def to_auth_user(user: User, avatar: str | None = None) -> AuthUser:
        return AuthUser(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            role=user.role,
            language_preference=user.language_preference,
            avatar=avatar,
        )

    def _issue(self, session: Session, user: User, avatar: str | None = None) -> AuthResult:
        """Stamp last_login_at and sign a token for `user`."""
        user.last_login_at = datetime.now(timezone.utc)
        user = self.repo.update(session, user)
        token = create_access_token(user.id, user.email, user.role)
        return AuthResult(user=self.to_auth_user(user, avatar), token=token)

    def _check_credentials(self, session: Session, email: str, password: str) -> User:
        user = self.repo.get_by_email(session, email.lower())
        if not user or not verify_password(password, user.password_hash):
            logger.info("Failed login for %s", email)
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid email or password",
            )
        if not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is deactivated",
            )
        return user

    # ----- Customer auth -----

    def register(self, session: Session, payload: UserRegister) -> AuthResult:
        """
        Create a customer account and log it in.

        Raises:
            HTTPException(400): if the email is already registered.
        """
        email = payload.email.lower()
        if self.repo.get_by_email(session, email):
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="User already exists",
            )

        user = User(
            email=email,
            password_hash=hash_password(payload.password),
            first_name=payload.first_name,
            last_name=payload.last_name,
            phone=payload.phone,
            role="customer",
            language_preference=payload.language_preference,
        )
        user = self.repo.create(session, user)
        logger.info("User registered id=%s", user.id)

        token = create_access_token(user.id, user.email, user.role)
        return AuthResult(user=self.to_auth_user(user), token=token)

    def login(self, session: Session, payload: UserLogin) -> AuthResult:
        user = self._check_credentials(session, payload.email, payload.password)
        logger.info("User logged in id=%s", user.id)
        return self._issue(session, user)

    def google_login(self, session: Session, payload: GoogleLogin) -> AuthResult:
        """
        Sign in with the profile forwarded by the Google client.

        The Google token itself is not verified server-side; the profile is
        trusted as sent. Unknown emails get a new customer account with an
        empty password hash.
        """
        info = payload.user_info
        email = info.email.lower()

        user = self.repo.get_by_email(session, email)
        if user is None:
            first_name = info.given_name
            last_name = info.family_name
            if not first_name and info.name:
                first_name, _, last_name = info.name.partition(" ")
            user = User(
                email=email,
                password_hash="",
                first_name=first_name or None,
                last_name=last_name or None,
                role="customer",
                email_verified=True,
            )
            user = self.repo.create(session, user)
            logger.info("User created from Google sign-in id=%s", user.id)
        elif not user.is_active:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Account is deactivated",
            )

        logger.info("User logged in with Google id=%s", user.id)
        return self._issue(session, user, avatar=info.picture)

    # ----- Admin auth -----

    def admin_login(self, session: Session, payload: AdminLogin) -> AuthResult:
        user = self._check_credentials(session, payload.email, payload.password)
        if user.role not in STAFF_ROLES:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )
        logger.info("Admin logged in id=%s role=%s", user.id, user.role)
        return self._issue(session, user)

    def ensure_admin(self, session: Session, email: str, password: str) -> User:
        """
        Create the bootstrap admin account if it does not exist yet.
        An existing account with that email is left untouched.
        """
        email = email.lower()
        user = self.repo.get_by_email(session, email)
        if user:
            return user

        user = User(
            email=email,
            password_hash=hash_password(password),
            first_name="Admin",
            role="admin",
            email_verified=True,
        )
        user = self.repo.create(session, user)
        logger.info("Bootstrap admin created id=%s", user.id)
        return user

    # ----- Admin operations -----

    @staticmethod
    def _admin_read(row: UserWithStats) -> AdminUserRead:
        user, order_count, total_spent, last_order_date = row
        return AdminUserRead.model_validate(
            user,
            update={
                "order_count": int(order_count or 0),
                "total_spent": float(total_spent or 0),
                "last_order_date": last_order_date,
            },
        )

    def list_users(
        self,
        session: Session,
        search: str | None = None,
        role: str | None = None,
        skip: int = 0,
        limit: int = 20,
    ) -> tuple[list[AdminUserRead], int]:
        """List users with order aggregates (admin only)."""
        rows, total = self.repo.list_with_stats(session, search, role, skip, limit)
        return [self._admin_read(row) for row in rows], total

    def get_user(self, session: Session, user_id: int) -> AdminUserDetail:
        """
        Get a user with aggregates and their most recent orders (admin only).

        Raises:
            HTTPException(404): if not found.
        """
        row = self.repo.get_with_stats(session, user_id)
        if not row:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )

        orders = self.order_repo.list_for_user(session, user_id, 0, RECENT_ORDERS_LIMIT)
        counts = self.order_repo.count_items(session, [o.id for o in orders])
        recent = [
            OrderRead.model_validate(o, update={"item_count": counts.get(o.id, 0)})
            for o in orders
        ]
        return AdminUserDetail(
            **self._admin_read(row).model_dump(),
            recent_orders=recent,
        )

    def set_status(
        self,
        session: Session,
        user_id: int,
        payload: UserStatusUpdate,
        acting_user: User,
    ) -> AdminUserRead:
        """
        Activate / deactivate an account. Staff cannot deactivate themselves.
        """
        user = self.repo.get_by_id(session, user_id)
        if not user:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="User not found",
            )
        if user.id == acting_user.id and not payload.is_active:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Cannot deactivate your own account",
            )

        user.is_active = payload.is_active
        user.updated_at = datetime.now(timezone.utc)
        self.repo.update(session, user)
        logger.info("User %s is_active=%s set by %s", user.id, user.is_active, acting_user.id)

        return self._admin_read(self.repo.get_with_stats(session, user_id))
