import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from mhyasi.core.config import ADMIN_PASSWORD, ADMIN_SHOP_NAME, ADMIN_USERNAME
from mhyasi.core.errors import Conflict, Unauthorized, ValidationError
from mhyasi.core.security import (create_access_token, hash_password,
                                  validate_password, verify_password)
from mhyasi.models import User

logger = logging.getLogger(__name__)


def normalize_username(raw: Optional[str]) -> Optional[str]:
    if not raw:
        return None
    cleaned = raw.strip()
    return cleaned or None


def get_by_username(db: Session, username: str) -> Optional[User]:
    return db.execute(
        select(User).where(User.username == username)
    ).scalar_one_or_none()


def register(
    db: Session,
    username: Optional[str],
    password: Optional[str],
    shop_name: Optional[str] = "",
    shop_address: Optional[str] = "",
) -> User:
    normalized = normalize_username(username)
    if not normalized or not password:
        raise ValidationError("Missing fields")
    password_error = validate_password(password)
    if password_error:
        raise ValidationError(password_error)
    if get_by_username(db, normalized):
        raise Conflict("User exists")
    user = User(
        username=normalized,
        password_hash=hash_password(password),
        role="user",
        shop_name=shop_name or "",
        shop_address=shop_address or "",
    )
    db.add(user)
    db.commit()
    logger.info("Registered account %s", normalized)
    return user


def login(
    db: Session, username: Optional[str], password: Optional[str]
) -> tuple[str, User]:
    normalized = normalize_username(username)
    if not normalized or not password:
        raise ValidationError("Missing fields")
    user = get_by_username(db, normalized)
    if not user or not verify_password(password, user.password_hash):
        raise Unauthorized("Invalid credentials")
    token = create_access_token(user.id, user.username, user.role)
    return token, user


def update_profile(
    db: Session,
    user: User,
    shop_name: Optional[str],
    shop_address: Optional[str],
) -> User:
    user.shop_name = shop_name or ""
    user.shop_address = shop_address or ""
    db.commit()
    return user


def set_logo(db: Session, user: User, logo_path: str) -> Optional[str]:
    """Store the new logo path and return the one it replaced."""
    previous = user.logo_path
    user.logo_path = logo_path
    db.commit()
    return previous


def ensure_admin(db: Session) -> User:
    admin = get_by_username(db, ADMIN_USERNAME)
    if admin:
        return admin
    admin = User(
        username=ADMIN_USERNAME,
        password_hash=hash_password(ADMIN_PASSWORD),
        role="admin",
        shop_name=ADMIN_SHOP_NAME,
    )
    db.add(admin)
    db.commit()
    logger.info("Created default admin account %s", ADMIN_USERNAME)
    return admin


def account_to_dict(user: User) -> dict:
    return {
        "id": user.id,
        "username": user.username,
        "role": user.role,
        "shop_name": user.shop_name,
        "shop_address": user.shop_address,
        "logo_path": user.logo_path,
        "unlocked_until": user.unlocked_until,
    }
