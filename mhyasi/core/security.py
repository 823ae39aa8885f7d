import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from passlib.context import CryptContext

from mhyasi.core.config import JWT_ALGORITHM, JWT_SECRET, TOKEN_EXPIRE_DAYS
from mhyasi.core.errors import Unauthorized

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")

_DEV_FALLBACK_SECRET = "dev-only-signing-key-set-JWT_SECRET-in-production"


def _load_signing_key() -> str:
    if JWT_SECRET:
        return JWT_SECRET
    logger.warning("JWT_SECRET is not set, using the development signing key")
    return _DEV_FALLBACK_SECRET


SIGNING_KEY = _load_signing_key()


def validate_password(password: str) -> Optional[str]:
    cleaned = password.strip()
    if not cleaned or len(cleaned) < 6:
        return "Password must be at least 6 characters"
    if len(cleaned) > 128:
        return "Password must be at most 128 characters"
    return None


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def create_access_token(
    user_id: int, username: str, role: str, expires_days: int = TOKEN_EXPIRE_DAYS
) -> str:
    expires_at = datetime.now(timezone.utc) + timedelta(days=expires_days)
    payload = {
        "sub": str(user_id),
        "username": username,
        "role": role,
        "exp": expires_at,
    }
    return jwt.encode(payload, SIGNING_KEY, algorithm=JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    """Verify signature and expiry; return the claims.

    Raises ``Unauthorized`` for anything that is not a valid, live token.
    """
    try:
        claims = jwt.decode(token, SIGNING_KEY, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError as exc:
        raise Unauthorized("Token expired") from exc
    except jwt.InvalidTokenError as exc:
        raise Unauthorized("Invalid token") from exc
    try:
        claims["sub"] = int(claims["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise Unauthorized("Invalid token") from exc
    return claims
