from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from mhyasi.core.database import get_db
from mhyasi.core.errors import Forbidden, Unauthorized
from mhyasi.core.security import decode_access_token
from mhyasi.models import User

bearer_scheme = HTTPBearer(auto_error=False)


def authenticate(db: Session, token: Optional[str]) -> User:
    if not token:
        raise Unauthorized("Missing token")
    claims = decode_access_token(token)
    user = db.get(User, claims["sub"])
    if user is None or user.username != claims.get("username"):
        raise Unauthorized("Invalid token")
    return user


def require_admin(user: User) -> User:
    if not user.is_admin:
        raise Forbidden("Admin only")
    return user


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(
        bearer_scheme
    ),
    db: Session = Depends(get_db),
) -> User:
    token = credentials.credentials if credentials else None
    return authenticate(db, token)


def get_current_admin(user: User = Depends(get_current_user)) -> User:
    return require_admin(user)
