"""Authentication endpoints

Email/password sign-up and sign-in issue a server-side session. The signed
session token is returned in the body and as an HttpOnly cookie.
"""

from typing import Annotated, Tuple

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..models.session import UserSession
from ..models.user import User
from .dependencies import get_current_session
from .rate_limit import check_rate_limit, rate_limiter
from .schemas import (
    AuthResponse,
    MeResponse,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
    UserResponse,
)
from .service import AuthService, IssuedSession

router = APIRouter(prefix="/auth", tags=["Authentication"])


def _set_session_cookie(response: Response, issued: IssuedSession) -> None:
    settings = get_settings()
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=issued.token,
        max_age=settings.SESSION_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        path="/",
    )


def _auth_response(issued: IssuedSession) -> AuthResponse:
    return AuthResponse(
        token=issued.token,
        expires_at=issued.expires_at,
        user=UserResponse.model_validate(issued.user),
    )


@router.post("/sign-up", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def sign_up(
    data: SignUpRequest,
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
):
    """Create an account and sign in.

    Member records created for this email before the account existed are
    linked to the new user, which makes the invited person a member of those
    organisations.

    Raises:
        HTTPException: 400 if the password violates the password policy
        HTTPException: 409 if the email is already registered
    """
    issued = AuthService(db).sign_up(data, request)
    _set_session_cookie(response, issued)
    return _auth_response(issued)


@router.post("/sign-in", response_model=AuthResponse)
def sign_in(
    data: SignInRequest,
    request: Request,
    response: Response,
    db: Annotated[Session, Depends(get_db)],
    _: None = Depends(check_rate_limit),
):
    """Authenticate with email and password.

    Security measures:
    - Rate limiting per client fingerprint (Redis sliding window)
    - Same error for unknown email and wrong password
    - Failed attempts are written to the audit log

    Raises:
        HTTPException: 401 if credentials are invalid
        HTTPException: 429 if rate limit exceeded
    """
    issued = AuthService(db).sign_in(data, request)
    rate_limiter.reset(request, "sign_in")
    _set_session_cookie(response, issued)
    return _auth_response(issued)


@router.post("/sign-out")
def sign_out(
    request: Request,
    response: Response,
    current: Annotated[Tuple[User, UserSession], Depends(get_current_session)],
    db: Annotated[Session, Depends(get_db)],
):
    """Revoke the current session and clear the cookie."""
    _, session = current
    AuthService(db).sign_out(session, request)
    response.delete_cookie(get_settings().SESSION_COOKIE_NAME, path="/")
    return {"ok": True}


@router.get("/me", response_model=MeResponse)
def get_me(current: Annotated[Tuple[User, UserSession], Depends(get_current_session)]):
    """Current user and the session the request was authenticated with."""
    user, session = current
    return MeResponse(
        user=UserResponse.model_validate(user),
        session=SessionResponse.model_validate(session),
    )
