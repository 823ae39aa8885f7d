from fastapi import APIRouter, Depends

from mhyasi.models import User
from mhyasi.services.auth import get_current_user

router = APIRouter()


@router.post("/api/verify-paystack")
def verify_paystack(user: User = Depends(get_current_user)) -> dict:
    # Payment verification is not wired to a gateway.
    return {"ok": False, "error": "Not configured"}
