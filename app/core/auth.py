# app/core/auth.py
from fastapi import Depends, Header, HTTPException, Query, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlmodel import Session

from app.core.security import verify_access_token
from app.database import get_session
from app.models.user import User
from app.repositories.user_repo import UserRepository

# Bearer scheme with auto_error=False: a missing header resolves to a guest
bearer_scheme = HTTPBearer(auto_error=False)

STAFF_ROLES = frozenset({"admin", "manager"})

user_repo = UserRepository()


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    session: Session = Depends(get_session),
) -> User | None:
    """
    Resolve the current user from our own HS256 access token.

    Flow:
      1. If no Authorization header => guest => return None.
      2. Verify signature and exp; a bad token is also treated as guest.
      3. Load the user by the `userId` claim; inactive accounts => guest.

    Returns:
        User instance if authenticated, else None for guests.
    """
    if credentials is None:
        return None  # guest mode

    payload = verify_access_token(credentials.credentials)
    if payload is None:
        return None

    return user_repo.get_active_by_id(session, payload.userId)


def require_auth(user: User | None = Depends(get_current_user)) -> User:
    """
    401 for guests (no token, bad or expired token, deactivated account).
    """
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
        )
    return user


def require_admin(user: User = Depends(require_auth)) -> User:
    """
    Staff gate for /admin routes: admin and manager pass, customers get 403.
    """
    if user.role not in STAFF_ROLES:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Insufficient permissions",
        )
    return user


def get_session_token(
    x_session_token: str | None = Header(default=None),
    session_token: str | None = Query(default=None, alias="sessionToken"),
) -> str | None:
    """
    Shopping-session token from the X-Session-Token header, else the
    `sessionToken` query parameter.
    """
    return x_session_token or session_token
