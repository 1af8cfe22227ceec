# app/routers/orders.py
from fastapi import APIRouter, Body, Depends, Query, status
from sqlmodel import Session

from app.core.auth import get_current_user, get_session_token, require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.order_repo import OrderRepository
from app.schemas.common import ApiResponse, PaginatedResponse, Pagination
from app.schemas.order import (
    OrderCreate,
    OrderDetail,
    OrderProgressUpdate,
    OrderRead,
)
from app.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["Orders"])

order_repo = OrderRepository()
cart_repo = CartRepository()
service = OrderService(order_repo, cart_repo)


@router.post(
    "",
    response_model=ApiResponse[OrderDetail],
    status_code=status.HTTP_201_CREATED,
)
def create_order(
    payload: OrderCreate,
    session: Session = Depends(get_session),
    token: str | None = Depends(get_session_token),
    current_user: User | None = Depends(get_current_user),
):
    """
    Create an order from the cart behind the session token.

    Auth:
      - Guests may check out; a logged-in user is recorded on the order.
    """
    order = service.create_order_from_cart(
        session,
        current_user.id if current_user else None,
        token,
        payload,
    )
    return ApiResponse[OrderDetail](data=order, message="Order created successfully")


@router.get("", response_model=PaginatedResponse[OrderRead])
def list_my_orders(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
):
    """
    List the authenticated user's orders (without items), newest first.
    """
    orders, total = service.list_user_orders(
        session, current_user.id, skip=(page - 1) * limit, limit=limit
    )
    return PaginatedResponse[OrderRead](
        data=orders,
        pagination=Pagination.build(page, limit, total),
    )


@router.get("/{order_id}", response_model=ApiResponse[OrderDetail])
def get_my_order(
    order_id: int,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Get a single order (with items) belonging to the current user.
    """
    return ApiResponse[OrderDetail](
        data=service.get_user_order(session, current_user.id, order_id),
    )


@router.put("/{order_id}/status", response_model=ApiResponse[OrderRead])
def advance_order_status(
    order_id: int,
    payload: OrderProgressUpdate | None = Body(default=None),
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Simulate fulfilment progress by one step:

      pending -> confirmed -> processing -> shipped -> delivered

    The body is optional; if `status` is sent it must be the next step.
    """
    order = service.advance_status(session, current_user, order_id, payload)
    return ApiResponse[OrderRead](data=order, message=f"Order status updated to {order.status}")
