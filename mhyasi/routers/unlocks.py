from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from mhyasi.core.database import get_db
from mhyasi.integrations.telegram import (format_approval_message,
                                          format_request_message,
                                          notifications_enabled,
                                          send_telegram_message)
from mhyasi.models import User
from mhyasi.schemas.unlocks import (ApproveRequest, DeclineRequest,
                                    RedeemRequest, UnlockRequestCreate)
from mhyasi.services import approvals, codes
from mhyasi.services.auth import get_current_admin, get_current_user

router = APIRouter(prefix="/api")


@router.post("/request")
def submit_request(
    payload: UnlockRequestCreate,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    unlock_request = approvals.submit_request(
        db, user, payload.amount, payload.details
    )
    if notifications_enabled():
        background_tasks.add_task(
            send_telegram_message,
            format_request_message(
                user.username, unlock_request.amount, unlock_request.details
            ),
        )
    return {"ok": True, "request": approvals.request_to_dict(unlock_request)}


@router.get("/requests")
def list_requests(
    admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> dict:
    rows = approvals.list_requests(db)
    return {"ok": True, "requests": [approvals.request_to_dict(r) for r in rows]}


@router.post("/approve")
def approve(
    payload: ApproveRequest,
    background_tasks: BackgroundTasks,
    admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> dict:
    unlock_code = approvals.approve_request(
        db, admin, payload.request_id, payload.duration, payload.unit
    )
    if notifications_enabled():
        background_tasks.add_task(
            send_telegram_message,
            format_approval_message(
                unlock_code.for_username, unlock_code.code, unlock_code.until
            ),
        )
    return {
        "ok": True,
        "code": unlock_code.code,
        "for": unlock_code.for_username,
        "until": unlock_code.until,
    }


@router.post("/decline")
def decline(
    payload: DeclineRequest,
    admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> dict:
    approvals.decline_request(db, admin, payload.request_id)
    return {"ok": True}


@router.get("/codes")
def list_codes(
    admin: User = Depends(get_current_admin),
    db: Session = Depends(get_db),
) -> dict:
    rows = codes.list_codes(db)
    return {"ok": True, "codes": [codes.code_to_dict(c) for c in rows]}


@router.post("/redeem")
def redeem(
    payload: RedeemRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    unlock_code = codes.redeem_code(db, user, payload.code)
    return {
        "ok": True,
        "msg": "Account unlocked",
        "unlocked_until": unlock_code.until,
    }
