from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from mhyasi.core.database import get_db
from mhyasi.models import User
from mhyasi.schemas.auth import LoginRequest, ProfileUpdate, RegisterRequest
from mhyasi.services import accounts
from mhyasi.services.auth import get_current_user
from mhyasi.services.uploads import delete_logo_file, save_logo_upload

router = APIRouter()


@router.get("/")
def root() -> dict:
    return {"ok": True, "msg": "Mhyasi Store API"}


@router.post("/api/register")
def register(payload: RegisterRequest, db: Session = Depends(get_db)) -> dict:
    accounts.register(
        db,
        payload.username,
        payload.password,
        payload.shop_name,
        payload.shop_address,
    )
    return {"ok": True}


@router.post("/api/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)) -> dict:
    token, user = accounts.login(db, payload.username, payload.password)
    return {"ok": True, "token": token, "user": accounts.account_to_dict(user)}


@router.get("/api/me")
def me(user: User = Depends(get_current_user)) -> dict:
    return {"ok": True, "user": accounts.account_to_dict(user)}


@router.post("/api/profile")
def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    accounts.update_profile(db, user, payload.shop_name, payload.shop_address)
    return {"ok": True}


@router.post("/api/profile/logo")
def upload_logo(
    logo: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    logo_path = save_logo_upload(logo)
    previous = accounts.set_logo(db, user, logo_path)
    if previous and previous != logo_path:
        delete_logo_file(previous)
    return {"ok": True, "logo_path": logo_path}
