import logging
import secrets
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mhyasi.core.config import CODE_PREFIX, CODE_TOKEN_BYTES
from mhyasi.core.errors import (AlreadyUsed, Conflict, Expired, Forbidden,
                                NotFound, ShopError, ValidationError)
from mhyasi.core.time import ms_to_datetime, now_ms
from mhyasi.models import UnlockCode, User
from mhyasi.services import entitlement

logger = logging.getLogger(__name__)

MAX_ISSUE_ATTEMPTS = 5


def generate_code() -> str:
    return CODE_PREFIX + secrets.token_hex(CODE_TOKEN_BYTES).upper()


def get_code(db: Session, code: str) -> Optional[UnlockCode]:
    return db.execute(
        select(UnlockCode).where(UnlockCode.code == code)
    ).scalar_one_or_none()


def issue_code(
    db: Session,
    user: User,
    until_ms: int,
    request_id: Optional[int] = None,
) -> UnlockCode:
    """Add an unused code for ``user`` to the session without committing."""
    for _ in range(MAX_ISSUE_ATTEMPTS):
        token = generate_code()
        if get_code(db, token) is None:
            break
    else:
        raise Conflict("Could not allocate a unique unlock code")
    unlock_code = UnlockCode(
        code=token,
        for_user_id=user.id,
        for_username=user.username,
        request_id=request_id,
        until=until_ms,
        used=False,
    )
    db.add(unlock_code)
    db.flush()
    logger.info("Issued unlock code %s for %s", unlock_code.id, user.username)
    return unlock_code


def list_codes(db: Session) -> list[UnlockCode]:
    return list(
        db.execute(
            select(UnlockCode).order_by(UnlockCode.id.desc())
        ).scalars().all()
    )


def redeem_code(
    db: Session, user: User, code: str, now: Optional[int] = None
) -> UnlockCode:
    """Consume ``code`` and move the bound account's window to its ``until``.

    Checks run in a fixed order: unknown code, already used, expired,
    then ownership. Marking the code used and extending the entitlement
    commit together.
    """
    now = now_ms() if now is None else now
    cleaned = (code or "").strip()
    if not cleaned:
        raise ValidationError("Missing code")

    unlock_code = get_code(db, cleaned)
    if unlock_code is None:
        raise NotFound("Invalid code")
    if unlock_code.used:
        raise AlreadyUsed("Code already used")
    if unlock_code.until <= now:
        raise Expired("Code expired")
    if unlock_code.for_user_id != user.id:
        raise Forbidden("Code was issued for another account")

    try:
        result = db.execute(
            update(UnlockCode)
            .where(UnlockCode.id == unlock_code.id, UnlockCode.used.is_(False))
            .values(
                used=True,
                used_by=user.username,
                used_at=ms_to_datetime(now),
            )
            .execution_options(synchronize_session="fetch")
        )
        if result.rowcount == 0:
            raise AlreadyUsed("Code already used")
        entitlement.extend(db, unlock_code.for_user_id, unlock_code.until)
        db.commit()
    except ShopError:
        db.rollback()
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to redeem unlock code %s", unlock_code.id)
        raise

    logger.info(
        "Code %s redeemed by %s, unlocked until %s",
        unlock_code.id, user.username, unlock_code.until,
    )
    return unlock_code


def code_to_dict(unlock_code: UnlockCode) -> dict:
    return {
        "id": unlock_code.id,
        "code": unlock_code.code,
        "for_username": unlock_code.for_username,
        "for_user_id": unlock_code.for_user_id,
        "request_id": unlock_code.request_id,
        "created_at": unlock_code.created_at.isoformat()
        if unlock_code.created_at else None,
        "until": unlock_code.until,
        "used": bool(unlock_code.used),
        "used_by": unlock_code.used_by,
        "used_at": unlock_code.used_at.isoformat()
        if unlock_code.used_at else None,
    }
