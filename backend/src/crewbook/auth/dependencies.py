"""FastAPI dependencies for authentication and authorization.

This module provides dependency injection functions for:
- Extracting the session token from the Authorization header or cookie
- Loading the current authenticated user and session
- Enforcing the system administrator role

Usage:
    @router.get("/protected")
    def protected_endpoint(user: CurrentUser):
        return {"message": f"Hello {user.name}"}

    @router.get("/admin-only")
    def admin_endpoint(admin: User = Depends(require_system_admin)):
        ...
"""

from typing import Annotated, Optional, Tuple

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..errors import ForbiddenError, UnauthorizedError
from ..models.session import UserSession
from ..models.user import User
from .roles import SystemRole
from .service import AuthService

# auto_error=False so the session cookie can be used when no header is sent
security = HTTPBearer(auto_error=False)


def get_session_token(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Session token from ``Authorization: Bearer`` or the session cookie.

    The header wins when both are present.

    Raises:
        UnauthorizedError: If no token was sent
    """
    if credentials and credentials.credentials:
        return credentials.credentials

    cookie_token = request.cookies.get(get_settings().SESSION_COOKIE_NAME)
    if cookie_token:
        return cookie_token

    raise UnauthorizedError("Authentication required")


def get_current_session(
    token: str = Depends(get_session_token),
    db: Session = Depends(get_db),
) -> Tuple[User, UserSession]:
    """Resolve the request's token to (user, session).

    Raises:
        UnauthorizedError: If token is invalid, expired, revoked, or user not found
    """
    return AuthService(db).resolve_session(token)


def get_current_user(
    current: Tuple[User, UserSession] = Depends(get_current_session),
) -> User:
    """The authenticated user.

    Example:
        @router.get("/me")
        def get_profile(user: User = Depends(get_current_user)):
            return {"id": user.id, "email": user.email}
    """
    return current[0]


def require_system_admin(current_user: User = Depends(get_current_user)) -> User:
    """Allow only system administrators (user.role == "admin").

    Raises:
        ForbiddenError: If the user is not a system administrator
    """
    if current_user.role != SystemRole.ADMIN.value:
        raise ForbiddenError("Admin access required")
    return current_user


# Type aliases for dependency injection
CurrentUser = Annotated[User, Depends(get_current_user)]
SystemAdmin = Annotated[User, Depends(require_system_admin)]
