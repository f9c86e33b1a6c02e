"""Authentication service: sign-up, sign-in, sign-out and session resolution."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Tuple
from uuid import UUID, uuid4

import jwt
from fastapi import Request
from sqlalchemy.orm import Session

from ..audit.service import get_client_ip, get_user_agent, log_from_request
from ..errors import BadRequestError, ConflictError, UnauthorizedError
from ..members.repository import MemberRepository
from ..models.session import UserSession
from ..models.user import User
from ..observability.metrics import auth_attempts_total
from ..users.repository import UserRepository
from .jwt import create_session_token, decode_token
from .password import hash_password, needs_rehash, verify_password
from .password_policy import PasswordValidationError, check_password_strength
from .repository import SessionRepository
from .schemas import SignInRequest, SignUpRequest

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


@dataclass
class IssuedSession:
    """A freshly created session and its signed token."""
    user: User
    session: UserSession
    token: str
    expires_at: datetime


class AuthService:
    """Session based authentication.

    The service commits its own transactions: a session must be durable
    before its token is handed to the client.
    """

    def __init__(self, db: Session):
        self.db = db
        self.users = UserRepository(db)
        self.sessions = SessionRepository(db)
        self.members = MemberRepository(db)

    def _issue_session(self, user: User, request: Optional[Request]) -> IssuedSession:
        session_id = uuid4()
        token, expires_at = create_session_token(user.id, session_id, user.email)
        session = self.sessions.create(
            session_id=session_id,
            user_id=user.id,
            expires_at=expires_at,
            ip_address=get_client_ip(request) if request is not None else None,
            user_agent=get_user_agent(request) if request is not None else None,
        )
        return IssuedSession(user=user, session=session, token=token, expires_at=expires_at)

    def sign_up(self, data: SignUpRequest, request: Optional[Request] = None) -> IssuedSession:
        """Create an account, link pending member records and open a session.

        Raises:
            BadRequestError: Password violates the password policy
            ConflictError: Email already registered
        """
        email = data.email.lower()
        try:
            check_password_strength(
                data.password,
                user_context=[email.split("@")[0], data.name],
            )
        except PasswordValidationError as e:
            auth_attempts_total.labels(action="sign_up", result="failure").inc()
            raise BadRequestError(f"{e.message}: {'; '.join(e.errors)}")

        if self.users.get_by_email(email):
            auth_attempts_total.labels(action="sign_up", result="failure").inc()
            raise ConflictError("User with this email already exists")

        user = self.users.create(
            name=data.name,
            email=email,
            password_hash=hash_password(data.password),
            image=data.image,
        )

        linked = self.link_pending_members(user, request)

        log_from_request(
            db=self.db,
            request=request,
            action="SIGN_UP",
            actor_id=user.id,
            entity_type="user",
            entity_id=user.id,
            metadata={"email": email, "linked_members": linked},
        )

        issued = self._issue_session(user, request)
        self.db.commit()
        auth_attempts_total.labels(action="sign_up", result="success").inc()
        logger.info("User signed up", extra={"user_id": user.id})
        return issued

    def link_pending_members(self, user: User, request: Optional[Request] = None) -> int:
        """Attach member records invited under this email to the new account.

        Returns:
            int: Number of member records linked
        """
        pending = self.members.list_unlinked_by_email(user.email)
        for member in pending:
            member.user_id = user.id
            log_from_request(
                db=self.db,
                request=request,
                action="MEMBER_LINKED",
                org_id=member.org_id,
                actor_id=user.id,
                entity_type="member",
                entity_id=member.id,
                metadata={"email": user.email},
            )
        self.db.flush()
        return len(pending)

    def sign_in(self, data: SignInRequest, request: Optional[Request] = None) -> IssuedSession:
        """Verify credentials and open a session.

        Unknown email and wrong password produce the same error.

        Raises:
            UnauthorizedError: Invalid credentials
        """
        email = data.email.lower()
        user = self.users.get_by_email(email)
        if not user or not verify_password(data.password, user.password_hash):
            log_from_request(
                db=self.db,
                request=request,
                action="SIGN_IN_FAILED",
                actor_id=user.id if user else None,
                metadata={"email": email, "reason": "invalid_credentials"},
            )
            self.db.commit()
            auth_attempts_total.labels(action="sign_in", result="failure").inc()
            raise UnauthorizedError(INVALID_CREDENTIALS)

        if needs_rehash(user.password_hash):
            user.password_hash = hash_password(data.password)

        now = datetime.now(timezone.utc)
        self.sessions.delete_expired(now)

        issued = self._issue_session(user, request)
        log_from_request(
            db=self.db,
            request=request,
            action="SIGN_IN_SUCCESS",
            actor_id=user.id,
            entity_type="session",
            entity_id=issued.session.id,
            metadata={"email": email},
        )
        self.db.commit()
        auth_attempts_total.labels(action="sign_in", result="success").inc()
        return issued

    def sign_out(self, session: UserSession, request: Optional[Request] = None) -> None:
        """Revoke a session."""
        user_id = session.user_id
        session_id = session.id
        self.sessions.delete(session)
        log_from_request(
            db=self.db,
            request=request,
            action="SIGN_OUT",
            actor_id=user_id,
            entity_type="session",
            entity_id=session_id,
        )
        self.db.commit()

    def resolve_session(self, token: str) -> Tuple[User, UserSession]:
        """Resolve a token to its user and live session.

        Raises:
            UnauthorizedError: Token invalid or expired, session revoked, or user gone
        """
        try:
            payload = decode_token(token)
            user_id = UUID(payload["sub"])
            session_id = UUID(payload["sid"])
        except jwt.ExpiredSignatureError:
            raise UnauthorizedError("Session has expired")
        except jwt.InvalidTokenError:
            raise UnauthorizedError("Invalid session token")
        except (KeyError, ValueError):
            raise UnauthorizedError("Invalid session token claims")

        session = self.sessions.get(session_id)
        if session is None or session.user_id != user_id:
            raise UnauthorizedError("Session not found or revoked")

        user = self.users.get_by_id(user_id)
        if user is None:
            raise UnauthorizedError("User not found")

        return user, session
