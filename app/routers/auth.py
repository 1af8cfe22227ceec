# app/routers/auth.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from app.core.auth import require_auth
from app.database import get_session
from app.models.user import User
from app.repositories.order_repo import OrderRepository
from app.repositories.user_repo import UserRepository
from app.schemas.common import ApiResponse, MessageResponse
from app.schemas.user import (
    AuthResult,
    AuthUser,
    GoogleLogin,
    UserLogin,
    UserRegister,
)
from app.services.user_service import UserService

router = APIRouter(prefix="/auth", tags=["Auth"])

repo = UserRepository()
service = UserService(repo, OrderRepository())


@router.post(
    "/register",
    response_model=ApiResponse[AuthResult],
    status_code=status.HTTP_201_CREATED,
)
def register(
    payload: UserRegister,
    session: Session = Depends(get_session),
):
    """
    Register a customer account. Returns the user and a bearer token.
    """
    return ApiResponse[AuthResult](
        data=service.register(session, payload),
        message="User registered successfully",
    )


@router.post("/login", response_model=ApiResponse[AuthResult])
def login(
    payload: UserLogin,
    session: Session = Depends(get_session),
):
    return ApiResponse[AuthResult](
        data=service.login(session, payload),
        message="Login successful",
    )


@router.post("/google", response_model=ApiResponse[AuthResult])
def google_login(
    payload: GoogleLogin,
    session: Session = Depends(get_session),
):
    """
    Sign in with a Google profile; creates the account on first use.
    """
    return ApiResponse[AuthResult](
        data=service.google_login(session, payload),
        message="Google login successful",
    )


@router.get("/me", response_model=ApiResponse[AuthUser])
def read_me(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.
    """
    return ApiResponse[AuthUser](data=service.to_auth_user(current_user))


@router.post("/logout", response_model=MessageResponse)
def logout():
    """
    Tokens are stateless; the client simply discards its token.
    """
    return MessageResponse(message="Logout successful")
