# app/routers/cart.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from app.core.auth import get_current_user, get_session_token
from app.core.i18n import Language, get_language
from app.database import get_session
from app.models.user import User
from app.repositories.cart_repo import CartRepository
from app.repositories.product_repo import ProductRepository
from app.schemas.cart import CartItemCreate, CartItemUpdate, CartResponse
from app.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo)


@router.get("", response_model=CartResponse)
def get_cart(
    session: Session = Depends(get_session),
    token: str | None = Depends(get_session_token),
    lang: Language = Depends(get_language),
):
    """
    Get the cart behind the session token.

    Guests and users alike; the (possibly new) token is echoed back as
    `sessionToken`.
    """
    summary, token = service.get_cart(session, token, lang)
    return CartResponse(data=summary, sessionToken=token)


@router.post("", response_model=CartResponse)
@router.post("/items", response_model=CartResponse)
def add_to_cart(
    payload: CartItemCreate,
    session: Session = Depends(get_session),
    token: str | None = Depends(get_session_token),
    current_user: User | None = Depends(get_current_user),
    lang: Language = Depends(get_language),
):
    """
    Add a product (optionally a variant) to the cart.

    The first add creates the shopping session.
    """
    summary, token = service.add_item(
        session,
        token,
        payload,
        user_id=current_user.id if current_user else None,
        lang=lang,
    )
    return CartResponse(data=summary, sessionToken=token, message="Item added to cart")


@router.put("/items/{item_id}", response_model=CartResponse)
def update_cart_item(
    item_id: int,
    payload: CartItemUpdate,
    session: Session = Depends(get_session),
    token: str | None = Depends(get_session_token),
    lang: Language = Depends(get_language),
):
    """
    Set the quantity of a cart line; quantity 0 removes it.
    """
    summary, token = service.update_item(session, token, item_id, payload, lang)
    return CartResponse(data=summary, sessionToken=token, message="Cart updated")


@router.delete("/items/{item_id}", response_model=CartResponse)
def remove_cart_item(
    item_id: int,
    session: Session = Depends(get_session),
    token: str | None = Depends(get_session_token),
    lang: Language = Depends(get_language),
):
    """
    Remove a line from the cart.
    """
    summary, token = service.remove_item(session, token, item_id, lang)
    return CartResponse(data=summary, sessionToken=token, message="Item removed from cart")


@router.delete("", response_model=CartResponse)
def clear_cart(
    session: Session = Depends(get_session),
    token: str | None = Depends(get_session_token),
    lang: Language = Depends(get_language),
):
    """
    Clear all items from the cart.
    """
    summary, token = service.clear_cart(session, token, lang)
    return CartResponse(data=summary, sessionToken=token, message="Cart cleared")
