# Overview: Service-layer operations for auth; encapsulates business logic and database work.

"""
Authentication Service

WHY: Every change to inventory, vendors and lessons is attributed to a
user. Passwords are hashed with bcrypt; login is by email.

SECURITY NOTES:
- Passwords hashed with bcrypt (cost from BCRYPT_ROUNDS, default 12)
- Minimum 8 characters, upper + lower case and a digit
- Session tokens managed separately (see session_service.py)
- Deactivated users cannot log in (checked by the login route, which
  answers 403 rather than 401 so the dashboard can show the reason)
"""

import re

import bcrypt
from flask import current_app

from ..extensions import db
from ..models import User
from ..permissions import Role
from ..time_utils import utcnow
from ..validation import ConflictError, NotFoundError


class PasswordValidationError(Exception):
    """Raised when password doesn't meet strength requirements."""
    pass


class UserNotFoundError(NotFoundError):
    pass


def validate_password_strength(password: str) -> None:
    """
    Validate password meets strength requirements.

    Raises PasswordValidationError if requirements not met.
    """
    if not password or len(password) < 8:
        raise PasswordValidationError("Password must be at least 8 characters long")

    if not re.search(r'[A-Z]', password):
        raise PasswordValidationError("Password must contain at least one uppercase letter")

    if not re.search(r'[a-z]', password):
        raise PasswordValidationError("Password must contain at least one lowercase letter")

    if not re.search(r'\d', password):
        raise PasswordValidationError("Password must contain at least one digit")


def hash_password(password: str) -> str:
    """Hash password with bcrypt after checking its strength."""
    validate_password_strength(password)
    rounds = current_app.config.get("BCRYPT_ROUNDS", 12)
    hashed = bcrypt.hashpw(password.encode('utf-8'), bcrypt.gensalt(rounds=rounds))
    return hashed.decode('utf-8')


def verify_password(password: str, password_hash: str) -> bool:
    """
    Verify password against bcrypt hash.

    A malformed stored hash is treated as a mismatch.
    """
    try:
        return bcrypt.checkpw(password.encode('utf-8'), password_hash.encode('utf-8'))
    except ValueError:
        return False


def create_user(
    *,
    name: str,
    email: str,
    password: str,
    role: str = Role.STAFF.value,
    position: str | None = None,
    department: str | None = None,
    phone: str | None = None,
) -> User:
    """
    Create new user with bcrypt password hashing.

    Raises:
        ConflictError: email already registered
        PasswordValidationError: weak password
    """
    email = email.strip().lower()
    existing = db.session.query(User).filter(db.func.lower(User.email) == email).first()
    if existing:
        raise ConflictError("Email already registered")

    user = User(
        name=name.strip(),
        email=email,
        password_hash=hash_password(password),
        role=Role.parse(role).value,
        position=position,
        department=department,
        phone=phone,
        is_active=True,
    )
    db.session.add(user)
    db.session.commit()
    return user


def find_user_by_email(email: str) -> User | None:
    return db.session.query(User).filter(
        db.func.lower(User.email) == email.strip().lower()
    ).first()


def authenticate(email: str, password: str) -> User | None:
    """
    Check credentials. Returns the User (active or not) when the password
    matches, None otherwise. Updates last_login_at only for active users.
    """
    user = find_user_by_email(email)
    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    if user.is_active:
        user.last_login_at = utcnow()
        db.session.commit()
    return user


def get_user(user_id: int) -> User:
    user = db.session.get(User, user_id)
    if not user:
        raise UserNotFoundError(f"User {user_id} not found")
    return user


def list_users(include_inactive: bool = False) -> list[User]:
    query = db.session.query(User)
    if not include_inactive:
        query = query.filter(User.is_active.is_(True))
    return query.order_by(User.name.asc()).all()


def update_user(user_id: int, patch: dict) -> User:
    """
    Apply an already-validated patch. A new password is re-hashed and
    deactivation revokes every open session of the user.
    """
    from . import session_service

    user = get_user(user_id)

    if "email" in patch and patch["email"]:
        email = patch["email"].strip().lower()
        clash = db.session.query(User).filter(
            db.func.lower(User.email) == email, User.id != user_id
        ).first()
        if clash:
            raise ConflictError("Email already registered")
        user.email = email

    if patch.get("password"):
        user.password_hash = hash_password(patch["password"])

    if "role" in patch and patch["role"]:
        user.role = Role.parse(patch["role"]).value

    for attr in ("name", "position", "department", "phone"):
        if attr in patch:
            setattr(user, attr, patch[attr])

    if "is_active" in patch and patch["is_active"] is not None:
        user.is_active = patch["is_active"]

    db.session.commit()

    if not user.is_active:
        session_service.revoke_all_user_sessions(user.id, reason="User deactivated")
    return user
