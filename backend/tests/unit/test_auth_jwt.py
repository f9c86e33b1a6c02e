"""Unit tests for session token generation and validation

Tests cover:
- Token creation with session claims
- Token decoding and validation
- Expiration and tampering
"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import jwt
import pytest

from crewbook.auth.jwt import create_session_token, decode_token, get_session_ttl
from crewbook.config import get_settings


class TestCreateSessionToken:

    def test_token_has_three_parts(self):
        token, _ = create_session_token(uuid4(), uuid4(), "ana@acme.io")
        assert isinstance(token, str)
        assert len(token.split('.')) == 3

    def test_token_contains_session_claims(self):
        user_id = uuid4()
        session_id = uuid4()

        token, _ = create_session_token(user_id, session_id, "ana@acme.io")
        payload = decode_token(token)

        assert payload["sub"] == str(user_id)
        assert payload["sid"] == str(session_id)
        assert payload["email"] == "ana@acme.io"
        assert "iat" in payload
        assert "exp" in payload

    def test_expiry_matches_session_ttl(self):
        issued_at = datetime.now(timezone.utc).replace(microsecond=0)
        token, expires_at = create_session_token(uuid4(), uuid4(), "ana@acme.io", issued_at=issued_at)

        assert expires_at == issued_at + get_session_ttl()
        payload = decode_token(token)
        assert payload["exp"] - payload["iat"] == int(get_session_ttl().total_seconds())

    def test_default_ttl_is_seven_days(self):
        assert get_session_ttl() == timedelta(minutes=get_settings().SESSION_EXPIRE_MINUTES)


class TestDecodeToken:

    def test_expired_token_raises(self):
        issued_at = datetime.now(timezone.utc) - get_session_ttl() - timedelta(minutes=1)
        token, _ = create_session_token(uuid4(), uuid4(), "ana@acme.io", issued_at=issued_at)

        with pytest.raises(jwt.ExpiredSignatureError):
            decode_token(token)

    def test_wrong_signature_raises(self):
        now = datetime.now(timezone.utc)
        forged = jwt.encode(
            {
                "sub": str(uuid4()),
                "sid": str(uuid4()),
                "iat": int(now.timestamp()),
                "exp": int((now + timedelta(hours=1)).timestamp()),
            },
            "not-the-server-secret",
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidTokenError):
            decode_token(forged)

    def test_missing_session_claim_raises(self):
        now = datetime.now(timezone.utc)
        token = jwt.encode(
            {
                "sub": str(uuid4()),
                "iat": int(now.timestamp()),
                "exp": int((now + timedelta(hours=1)).timestamp()),
            },
            get_settings().SECRET_KEY,
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidTokenError):
            decode_token(token)

    def test_garbage_token_raises(self):
        with pytest.raises(jwt.InvalidTokenError):
            decode_token("not.a.token")
