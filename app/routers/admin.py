# app/routers/admin.py
from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from app.core.auth import require_admin
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.catalog_repo import CatalogRepository
from app.repositories.order_repo import OrderRepository
from app.repositories.product_repo import ProductRepository
from app.repositories.user_repo import UserRepository
from app.schemas.common import ApiResponse, MessageResponse, PaginatedResponse, Pagination
from app.schemas.order import AdminOrderRead, OrderDetail, OrderRead, OrderStatus, OrderStatusUpdate
from app.schemas.product import AdminProductRead, ProductCreate, ProductUpdate
from app.schemas.user import (
    AdminLogin,
    AdminUserDetail,
    AdminUserRead,
    AuthResult,
    Role,
    UserStatusUpdate,
)
from app.services.order_service import OrderService
from app.services.product_service import ProductService
from app.services.user_service import UserService

router = APIRouter(prefix="/admin", tags=["Admin"])

order_repo = OrderRepository()
product_service = ProductService(ProductRepository(), CatalogRepository(), order_repo)
order_service = OrderService(order_repo, CartRepository())
user_service = UserService(UserRepository(), order_repo)


# -------- Auth --------


@router.post("/login", response_model=ApiResponse[AuthResult])
def admin_login(
    payload: AdminLogin,
    session: Session = Depends(get_session),
):
    """
    Staff login. Customers get 403 even with valid credentials.
    """
    return ApiResponse[AuthResult](
        data=user_service.admin_login(session, payload),
        message="Login successful",
    )


# -------- Products --------


@router.get(
    "/products",
    response_model=PaginatedResponse[AdminProductRead],
    dependencies=[Depends(require_admin)],
)
def list_products(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = None,
    category_id: int | None = None,
):
    """
    All products (any status) with order counters.
    """
    products, total = product_service.list_admin_products(
        session, search, category_id, skip=(page - 1) * limit, limit=limit
    )
    return PaginatedResponse[AdminProductRead](
        data=products,
        pagination=Pagination.build(page, limit, total),
    )


@router.post(
    "/products",
    response_model=ApiResponse[AdminProductRead],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    return ApiResponse[AdminProductRead](
        data=product_service.create_product(session, payload),
        message="Product created successfully",
    )


@router.get(
    "/products/{product_id}",
    response_model=ApiResponse[AdminProductRead],
    dependencies=[Depends(require_admin)],
)
def get_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    return ApiResponse[AdminProductRead](
        data=product_service.get_admin_product(session, product_id),
    )


@router.put(
    "/products/{product_id}",
    response_model=ApiResponse[AdminProductRead],
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: int,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    """
    Partial update; only the listed fields are accepted.
    """
    return ApiResponse[AdminProductRead](
        data=product_service.update_product(session, product_id, payload),
        message="Product updated successfully",
    )


@router.delete(
    "/products/{product_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
)
def delete_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    """
    Delete a product. Products that appear in any order cannot be deleted.
    """
    product_service.delete_product(session, product_id)
    return MessageResponse(message="Product deleted successfully")


# -------- Orders --------


@router.get(
    "/orders",
    response_model=PaginatedResponse[AdminOrderRead],
    dependencies=[Depends(require_admin)],
)
def list_orders(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    status_filter: OrderStatus | None = Query(None, alias="status"),
    search: str | None = None,
):
    """
    All orders, newest first. `search` matches customer name or email.
    """
    orders, total = order_service.list_all_orders(
        session, status_filter, search, skip=(page - 1) * limit, limit=limit
    )
    return PaginatedResponse[AdminOrderRead](
        data=orders,
        pagination=Pagination.build(page, limit, total),
    )


@router.get(
    "/orders/{order_id}",
    response_model=ApiResponse[OrderDetail],
    dependencies=[Depends(require_admin)],
)
def get_order(
    order_id: int,
    session: Session = Depends(get_session),
):
    return ApiResponse[OrderDetail](data=order_service.get_order_admin(session, order_id))


@router.put(
    "/orders/{order_id}/status",
    response_model=ApiResponse[OrderRead],
    dependencies=[Depends(require_admin)],
)
def update_order_status(
    order_id: int,
    payload: OrderStatusUpdate,
    session: Session = Depends(get_session),
):
    """
    Set any status, including 'cancelled'. Cancelled orders stay cancelled.
    """
    return ApiResponse[OrderRead](
        data=order_service.update_status(session, order_id, payload),
        message="Order status updated successfully",
    )


# -------- Users --------


@router.get(
    "/users",
    response_model=PaginatedResponse[AdminUserRead],
    dependencies=[Depends(require_admin)],
)
def list_users(
    session: Session = Depends(get_session),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    search: str | None = None,
    role: Role | None = None,
):
    users, total = user_service.list_users(
        session, search, role, skip=(page - 1) * limit, limit=limit
    )
    return PaginatedResponse[AdminUserRead](
        data=users,
        pagination=Pagination.build(page, limit, total),
    )


@router.get(
    "/users/{user_id}",
    response_model=ApiResponse[AdminUserDetail],
    dependencies=[Depends(require_admin)],
)
def get_user(
    user_id: int,
    session: Session = Depends(get_session),
):
    """
    A user with order aggregates and their most recent orders.
    """
    return ApiResponse[AdminUserDetail](data=user_service.get_user(session, user_id))


@router.put("/users/{user_id}/status", response_model=ApiResponse[AdminUserRead])
def update_user_status(
    user_id: int,
    payload: UserStatusUpdate,
    session: Session = Depends(get_session),
    admin: User = Depends(require_admin),
):
    """
    Activate or deactivate an account (never hard-deleted).
    """
    return ApiResponse[AdminUserRead](
        data=user_service.set_status(session, user_id, payload, admin),
        message="User status updated successfully",
    )
