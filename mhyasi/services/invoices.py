import json
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mhyasi.core.errors import AccountLocked, ValidationError
from mhyasi.core.time import ms_to_datetime, now_ms
from mhyasi.models import Invoice, User
from mhyasi.services.entitlement import is_entitled
from mhyasi.services.products import decrement_stock

logger = logging.getLogger(__name__)


def encode_items(items: list[dict]) -> str:
    return json.dumps(items, ensure_ascii=False)


def decode_items(raw: Optional[str]) -> list[dict]:
    return json.loads(raw or "[]")


def _validate_items(items: Optional[list]) -> list[dict]:
    items = list(items or [])
    for item in items:
        if not isinstance(item, dict):
            raise ValidationError("Invoice items must be objects")
        product_id = item.get("product_id")
        qty = item.get("qty")
        if not isinstance(product_id, int) or isinstance(product_id, bool):
            raise ValidationError("Invoice item is missing product_id")
        if not isinstance(qty, int) or isinstance(qty, bool) or qty <= 0:
            raise ValidationError("Invoice item qty must be a positive integer")
    return items


def create_invoice(
    db: Session,
    user: User,
    invoice_id: Optional[str],
    customer: Optional[str] = None,
    items: Optional[list[dict]] = None,
    total: Optional[float] = None,
    now: Optional[int] = None,
) -> Invoice:
    """Record a sale and take its quantities off the owner's stock.

    The entitlement gate runs before anything is written. Line items
    pointing at a missing or foreign product are kept on the invoice
    but move no stock. The invoice and all decrements commit together.
    """
    now = now_ms() if now is None else now
    if not is_entitled(user, now):
        logger.warning("Invoice rejected, account %s is locked", user.username)
        raise AccountLocked("Account locked. Request unlock")

    cleaned_id = (invoice_id or "").strip()
    if not cleaned_id:
        raise ValidationError("Missing invoice_id")
    items = _validate_items(items)

    invoice = Invoice(
        user_id=user.id,
        invoice_id=cleaned_id,
        customer=customer or "",
        items=encode_items(items),
        total=total or 0,
        created_at=ms_to_datetime(now),
    )
    try:
        db.add(invoice)
        for item in items:
            if not decrement_stock(db, user.id, item["product_id"], item["qty"]):
                logger.info(
                    "Invoice %s: product %s not found for %s, stock unchanged",
                    cleaned_id, item["product_id"], user.username,
                )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("Failed to record invoice %s", cleaned_id)
        raise

    logger.info(
        "Invoice %s recorded for %s with %s items",
        cleaned_id, user.username, len(items),
    )
    return invoice


def list_invoices(db: Session, user: User) -> list[Invoice]:
    return list(
        db.execute(
            select(Invoice)
            .where(Invoice.user_id == user.id)
            .order_by(Invoice.id.desc())
        ).scalars().all()
    )


def invoice_to_dict(invoice: Invoice) -> dict:
    return {
        "id": invoice.id,
        "invoice_id": invoice.invoice_id,
        "customer": invoice.customer,
        "items": decode_items(invoice.items),
        "total": invoice.total,
        "created_at": invoice.created_at.isoformat()
        if invoice.created_at else None,
    }
