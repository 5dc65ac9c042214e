"""
User Service — authentication and user provisioning.
"""

import logging
from datetime import datetime, timezone

from flask import current_app
from sqlalchemy import select

from welfare.models import db
from welfare.models.auth import User
from welfare.models.center import CenterDetail
from welfare.services.rbac_matrix import Role, coerce_role
from welfare.utils.crypto import hash_password, verify_password

logger = logging.getLogger(__name__)


class UserServiceError(Exception):
    """Authentication / provisioning failure carrying an HTTP status."""
    def __init__(self, message, status_code=400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def get_user_by_username(username: str) -> User | None:
    stmt = select(User).where(User.username == username)
    return db.session.execute(stmt).scalar_one_or_none()


def get_user_by_id(user_id) -> User | None:
    try:
        return db.session.get(User, int(user_id))
    except (TypeError, ValueError):
        return None


def create_user(
    username: str,
    password: str,
    user_type,
    center_id: int | None = None,
    full_name: str | None = None,
) -> User:
    """Create a user with exactly one role.

    Every role except the App Admin must be assigned to an existing center.
    """
    role = coerce_role(user_type)
    if role is None:
        raise UserServiceError(f"Unknown user_type: {user_type!r}")
    if not username or not password:
        raise UserServiceError("username and password are required")
    if get_user_by_username(username):
        raise UserServiceError(f"User {username} already exists", 409)

    if role is Role.APP_ADMIN:
        center_id = None
    elif center_id is None or db.session.get(CenterDetail, center_id) is None:
        raise UserServiceError("center_id must reference an existing center")

    user = User(
        username=username,
        password_hash=hash_password(password, rounds=current_app.config.get("BCRYPT_ROUNDS", 12)),
        full_name=full_name,
        user_type=int(role),
        center_id=center_id,
    )
    db.session.add(user)
    db.session.commit()
    logger.info("Created user %s (role=%s, center=%s)", username, int(role), center_id)
    return user


def authenticate_user(username: str, password: str) -> User:
    """Authenticate a user with username + password. Returns User on success."""
    user = get_user_by_username(username)
    if not user or not verify_password(password, user.password_hash):
        raise UserServiceError("Invalid username or password", 401)

    if not user.is_active:
        raise UserServiceError("Account is inactive", 403)

    user.last_login_at = datetime.now(timezone.utc)
    db.session.commit()
    return user
