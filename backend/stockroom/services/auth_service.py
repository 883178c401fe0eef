# Overview: Service-layer operations for auth; password hashing, role ranks, login and registration.

"""
Authentication Service

SECURITY NOTES:
- Passwords hashed with bcrypt (cost factor 12), salted per hash
- Minimum 6 characters required
- Roles form a strict hierarchy: USER < MANAGER < ADMIN
- Tokens are issued by token_service; this module never sees them
"""

from __future__ import annotations

import bcrypt
from sqlalchemy.exc import SQLAlchemyError

from ..errors import AuthenticationError, ValidationError, translate_db_error
from ..extensions import db
from ..models import User, ROLE_USER, VALID_ROLES
from ..validation import clean_str, enforce_max_lengths, optional_str, require_fields, validate_email
from .token_service import TEST_USER_ID, TEST_USERNAME, TEST_USER_ROLE

MIN_PASSWORD_LENGTH = 6

ROLE_RANK = {
    "USER": 1,
    "MANAGER": 2,
    "ADMIN": 3,
}

USER_UNIQUE_MESSAGES = {
    "username": "Username already exists",
    "email": "Email already exists",
}


def has_role(actual_role: str | None, required_role: str) -> bool:
    """True when actual_role ranks at or above required_role. Unknown roles rank 0."""
    return ROLE_RANK.get(actual_role or "", 0) >= ROLE_RANK.get(required_role, 0)


def validate_password(password) -> str:
    password = str(password)
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long",
            fields=["password"],
        )
    return password


def validate_role(role) -> str:
    if role not in VALID_ROLES:
        raise ValidationError("Invalid role", fields=["role"])
    return role


def hash_password(password: str) -> str:
    """
    Hash password using bcrypt with cost factor 12.

    The same password hashes differently every call; use verify_password to compare.
    """
    salt = bcrypt.gensalt(rounds=12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), salt)
    return hashed.decode('utf-8')  # Store as string in database


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    Returns False for a wrong password and for hashes that are not bcrypt.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except (ValueError, TypeError):
        return False


def build_test_user() -> User:
    """Transient synthetic identity for the demo token; never persisted."""
    return User(
        id=TEST_USER_ID,
        username=TEST_USERNAME,
        email="test@example.com",
        password_hash="",
        role=TEST_USER_ROLE,
        first_name="Test",
        last_name="User",
        is_active=True,
    )


def authenticate(username: str, password: str) -> User:
    """
    Check credentials and return the user.

    Raises AuthenticationError for unknown users, wrong passwords and
    deactivated accounts.
    """
    user = db.session.query(User).filter(User.username == clean_str(username)).first()

    if not user:
        raise AuthenticationError("Invalid username or password")

    if not user.is_active:
        raise AuthenticationError("Account is deactivated")

    if not verify_password(str(password), user.password_hash):
        raise AuthenticationError("Invalid username or password")

    return user


def create_user(data: dict, *, allow_role: bool) -> User:
    """
    Create a user from request data.

    allow_role=False is self-registration: the role is always USER.
    Raises ValidationError for bad input and ConflictError for a taken
    username or email.
    """
    require_fields(data, "username", "email", "password")

    email = validate_email(data["email"]).lower()
    password = validate_password(data["password"])

    role = ROLE_USER
    if allow_role and data.get("role") is not None:
        role = validate_role(data["role"])

    user = User(
        username=clean_str(data["username"]),
        email=email,
        password_hash=hash_password(password),
        role=role,
        first_name=optional_str(data.get("firstName")),
        last_name=optional_str(data.get("lastName")),
        is_active=True,
    )
    enforce_max_lengths(user)

    try:
        db.session.add(user)
        db.session.commit()
    except SQLAlchemyError as exc:
        db.session.rollback()
        raise translate_db_error(
            exc,
            resource="user",
            action="create",
            unique_messages=USER_UNIQUE_MESSAGES,
            unique_default="User already exists",
        )

    return user
