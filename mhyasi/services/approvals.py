import logging
import math
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from mhyasi.core.config import DEFAULT_DURATIONS, DURATION_UNITS, MAX_EPOCH_MS
from mhyasi.core.errors import Conflict, NotFound, ShopError, ValidationError
from mhyasi.core.time import ms_to_datetime, now_ms
from mhyasi.models import UnlockCode, UnlockRequest, User
from mhyasi.services.codes import issue_code

logger = logging.getLogger(__name__)


def compute_until(
    now: int, duration: Optional[float], unit: Optional[str] = "days"
) -> int:
    """Return the end of an unlock window in epoch ms.

    Units are flat: a month is 30 days and a year is 365 days. The
    window starts at ``now`` truncated to whole seconds. A missing or
    zero duration falls back to the unit's default.
    """
    unit = unit or "days"
    if unit not in DURATION_UNITS:
        raise ValidationError(f"Unknown unit: {unit}")
    if duration is not None and not math.isfinite(duration):
        raise ValidationError("Duration must be a finite number")
    if not duration:
        duration = DEFAULT_DURATIONS[unit]
    if duration < 0:
        raise ValidationError("Duration must be positive")
    now_seconds = now // 1000
    until = (now_seconds + duration * DURATION_UNITS[unit]) * 1000
    if until > MAX_EPOCH_MS:
        raise ValidationError("Duration is too long")
    return int(until)


def submit_request(
    db: Session,
    user: User,
    amount: Optional[int] = None,
    details: Optional[str] = None,
    now: Optional[int] = None,
) -> UnlockRequest:
    now = now_ms() if now is None else now
    unlock_request = UnlockRequest(
        user_id=user.id,
        amount=amount or 0,
        details=details or "",
        status="pending",
        created_at=ms_to_datetime(now),
    )
    db.add(unlock_request)
    db.commit()
    logger.info(
        "Unlock request %s submitted by %s", unlock_request.id, user.username
    )
    return unlock_request


def list_requests(db: Session) -> list[UnlockRequest]:
    return list(
        db.execute(
            select(UnlockRequest)
            .options(joinedload(UnlockRequest.user))
            .order_by(UnlockRequest.created_at.desc(), UnlockRequest.id.desc())
        ).scalars().all()
    )


def _get_pending(db: Session, request_id: int) -> UnlockRequest:
    unlock_request = db.get(UnlockRequest, request_id)
    if unlock_request is None:
        raise NotFound("Request not found")
    if unlock_request.status != "pending":
        raise Conflict(f"Request already {unlock_request.status}")
    return unlock_request


def _set_status(db: Session, unlock_request: UnlockRequest, status: str) -> None:
    result = db.execute(
        update(UnlockRequest)
        .where(
            UnlockRequest.id == unlock_request.id,
            UnlockRequest.status == "pending",
        )
        .values(status=status)
        .execution_options(synchronize_session="fetch")
    )
    if result.rowcount == 0:
        raise Conflict("Request already decided")


def approve_request(
    db: Session,
    admin: User,
    request_id: int,
    duration: Optional[float] = None,
    unit: Optional[str] = "days",
    now: Optional[int] = None,
) -> UnlockCode:
    """Mark a pending request approved and mint its unlock code.

    Role checks are the caller's job. Deciding a request twice raises
    ``Conflict``.
    """
    now = now_ms() if now is None else now
    unlock_request = _get_pending(db, request_id)
    until = compute_until(now, duration, unit)
    try:
        _set_status(db, unlock_request, "approved")
        unlock_code = issue_code(
            db, unlock_request.user, until, request_id=unlock_request.id
        )
        db.commit()
    except ShopError:
        db.rollback()
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to approve request %s", request_id)
        raise
    logger.info(
        "Request %s approved by %s until %s",
        request_id, admin.username, until,
    )
    return unlock_code


def decline_request(db: Session, admin: User, request_id: int) -> UnlockRequest:
    unlock_request = _get_pending(db, request_id)
    try:
        _set_status(db, unlock_request, "declined")
        db.commit()
    except ShopError:
        db.rollback()
        raise
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to decline request %s", request_id)
        raise
    logger.info("Request %s declined by %s", request_id, admin.username)
    return unlock_request


def request_to_dict(unlock_request: UnlockRequest) -> dict:
    return {
        "id": unlock_request.id,
        "user_id": unlock_request.user_id,
        "username": unlock_request.user.username
        if unlock_request.user else None,
        "amount": unlock_request.amount,
        "details": unlock_request.details,
        "status": unlock_request.status,
        "created_at": unlock_request.created_at.isoformat()
        if unlock_request.created_at else None,
    }
