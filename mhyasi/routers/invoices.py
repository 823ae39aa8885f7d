from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mhyasi.core.database import get_db
from mhyasi.models import User
from mhyasi.schemas.invoices import InvoiceCreate
from mhyasi.services import invoices
from mhyasi.services.auth import get_current_user

router = APIRouter(prefix="/api/invoices")


@router.post("")
def create_invoice(
    payload: InvoiceCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    invoice = invoices.create_invoice(
        db,
        user,
        payload.invoice_id,
        payload.customer,
        payload.items,
        payload.total,
    )
    return {"ok": True, "invoice": invoices.invoice_to_dict(invoice)}


@router.get("")
def list_invoices(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    rows = invoices.list_invoices(db, user)
    return {"ok": True, "invoices": [invoices.invoice_to_dict(i) for i in rows]}
