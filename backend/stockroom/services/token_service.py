# Overview: Service-layer operations for bearer tokens; issue and decode signed session tokens.

"""
Bearer Token Service

Tokens are HS256-signed JWTs (python-jose) carrying the user's identity,
role and expiry. They are stateless: nothing is stored server side, so there
is no refresh or revocation. Deactivating a user still locks them out
because require_auth re-reads the user row on every request.

The optional demo token (AUTH_TEST_TOKEN) resolves to a fixed synthetic
identity and is honored only when AUTH_TEST_TOKEN_ENABLED is set.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta, timezone

from flask import current_app
from jose import JWTError, jwt

from ..time_utils import utcnow

ALGORITHM = "HS256"

TEST_USER_ID = 999
TEST_USERNAME = "test_user"
TEST_USER_ROLE = "USER"


@dataclass(frozen=True)
class TokenPayload:
    user_id: int
    username: str
    role: str
    is_test_identity: bool = False


def issue_token(user_id: int, username: str, role: str) -> str:
    """Sign a token that expires TOKEN_TTL_HOURS from now."""
    ttl = timedelta(hours=current_app.config.get("TOKEN_TTL_HOURS", 24))
    expires_at = utcnow().replace(tzinfo=timezone.utc) + ttl
    claims = {
        "sub": str(user_id),
        "username": username,
        "role": role,
        "exp": expires_at,
    }
    return jwt.encode(claims, current_app.config["SECRET_KEY"], algorithm=ALGORITHM)


def is_test_token(token: str) -> bool:
    config = current_app.config
    return bool(config.get("AUTH_TEST_TOKEN_ENABLED")) and token == config.get("AUTH_TEST_TOKEN")


def decode_token(token: str) -> TokenPayload | None:
    """
    Returns the token's identity, or None when the token is malformed,
    carries a bad signature, or has expired.
    """
    if not token:
        return None

    if is_test_token(token):
        return TokenPayload(
            user_id=TEST_USER_ID,
            username=TEST_USERNAME,
            role=TEST_USER_ROLE,
            is_test_identity=True,
        )

    try:
        claims = jwt.decode(token, current_app.config["SECRET_KEY"], algorithms=[ALGORITHM])
    except JWTError:
        return None

    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return None

    username = claims.get("username")
    role = claims.get("role")
    if not username or not role:
        return None

    return TokenPayload(user_id=user_id, username=username, role=role)


def extract_bearer_token(auth_header: str | None) -> str | None:
    if not auth_header or not auth_header.startswith("Bearer "):
        return None
    token = auth_header[len("Bearer "):].strip()
    return token or None
