"""Session token generation and validation

Session tokens are HS256-signed JWTs. The token alone is not enough to
authenticate: its ``sid`` claim must still reference a session row, so
signing out (deleting the row) revokes the token before it expires.

Token Claims:
- sub: User ID as UUID string
- sid: Session ID as UUID string
- email: User's email address (informational)
- iat: Unix timestamp when token was created
- exp: Unix timestamp when token expires (iat + SESSION_EXPIRE_MINUTES)

Example Token Payload:
{
  "sub": "550e8400-e29b-41d4-a716-446655440000",
  "sid": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
  "email": "ana@acme.io",
  "iat": 1704368400,
  "exp": 1704973200
}
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional, Tuple
from uuid import UUID

import jwt

from ..config import get_settings


def _get_secret() -> str:
    """Signing secret.

    Raises:
        ValueError: If SECRET_KEY is empty
    """
    secret = get_settings().SECRET_KEY
    if not secret:
        raise ValueError("SECRET_KEY is not configured")
    return secret


def get_session_ttl() -> timedelta:
    return timedelta(minutes=get_settings().SESSION_EXPIRE_MINUTES)


def create_session_token(
    user_id: UUID,
    session_id: UUID,
    email: str,
    issued_at: Optional[datetime] = None,
) -> Tuple[str, datetime]:
    """Create a signed session token.

    Args:
        user_id: User's UUID
        session_id: Session row UUID
        email: User's email address
        issued_at: Issue time (defaults to now, UTC)

    Returns:
        Tuple of (token, expires_at)

    Raises:
        ValueError: If SECRET_KEY is not set
    """
    settings = get_settings()
    now = issued_at or datetime.now(timezone.utc)
    expires_at = now + get_session_ttl()

    payload = {
        'sub': str(user_id),
        'sid': str(session_id),
        'email': email,
        'iat': int(now.timestamp()),
        'exp': int(expires_at.timestamp()),
    }

    token = jwt.encode(payload, _get_secret(), algorithm=settings.JWT_ALGORITHM)
    return token, expires_at


def decode_token(token: str) -> Dict[str, Any]:
    """Decode and validate a session token.

    Args:
        token: Token string

    Returns:
        dict: Decoded payload

    Raises:
        jwt.ExpiredSignatureError: If token has expired
        jwt.InvalidTokenError: If token is invalid, tampered or lacks claims
    """
    settings = get_settings()
    try:
        return jwt.decode(
            token,
            _get_secret(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["sub", "sid", "exp", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        raise jwt.ExpiredSignatureError("Token has expired")
    except jwt.InvalidTokenError as e:
        raise jwt.InvalidTokenError(f"Invalid token: {str(e)}")
