from typing import Optional

from sqlalchemy import case, select, update
from sqlalchemy.orm import Session

from mhyasi.core.config import MAX_ROW_ID, MAX_STOCK_QTY
from mhyasi.core.errors import NotFound, ValidationError
from mhyasi.models import Product, User


def _clean_fields(
    name: Optional[str], price: Optional[float], qty: Optional[int]
) -> tuple[str, float, int]:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("Missing name")
    qty = qty or 0
    if qty < 0:
        raise ValidationError("Quantity cannot be negative")
    if qty > MAX_STOCK_QTY:
        raise ValidationError("Quantity is too large")
    return cleaned, price or 0, qty


def create_product(
    db: Session,
    user: User,
    name: Optional[str],
    price: Optional[float] = 0,
    qty: Optional[int] = 0,
) -> Product:
    cleaned, price, qty = _clean_fields(name, price, qty)
    product = Product(user_id=user.id, name=cleaned, price=price, qty=qty)
    db.add(product)
    db.commit()
    return product


def list_products(db: Session, user: User) -> list[Product]:
    return list(
        db.execute(
            select(Product)
            .where(Product.user_id == user.id)
            .order_by(Product.id.desc())
        ).scalars().all()
    )


def get_owned_product(db: Session, user: User, product_id: int) -> Product:
    if not 0 < product_id <= MAX_ROW_ID:
        raise NotFound("Product not found")
    product = db.execute(
        select(Product).where(
            Product.id == product_id, Product.user_id == user.id
        )
    ).scalar_one_or_none()
    if product is None:
        raise NotFound("Product not found")
    return product


def update_product(
    db: Session,
    user: User,
    product_id: int,
    name: Optional[str],
    price: Optional[float] = 0,
    qty: Optional[int] = 0,
) -> Product:
    product = get_owned_product(db, user, product_id)
    product.name, product.price, product.qty = _clean_fields(name, price, qty)
    db.commit()
    return product


def delete_product(db: Session, user: User, product_id: int) -> None:
    product = get_owned_product(db, user, product_id)
    db.delete(product)
    db.commit()


def decrement_stock(
    db: Session, user_id: int, product_id: int, qty: int
) -> bool:
    """Take ``qty`` units off a product owned by ``user_id``, stopping at zero.

    A single conditional UPDATE, so concurrent sales of the same product
    cannot lose each other's decrements. Returns False when the product
    does not exist or belongs to another account. Caller commits.
    """
    if not 0 < product_id <= MAX_ROW_ID:
        return False
    # Stock never exceeds MAX_STOCK_QTY, so a larger sale empties it all the same.
    qty = min(qty, MAX_STOCK_QTY)
    result = db.execute(
        update(Product)
        .where(Product.id == product_id, Product.user_id == user_id)
        .values(
            qty=case((Product.qty > qty, Product.qty - qty), else_=0)
        )
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount > 0


def product_to_dict(product: Product) -> dict:
    return {
        "id": product.id,
        "user_id": product.user_id,
        "name": product.name,
        "price": product.price,
        "qty": product.qty,
        "created_at": product.created_at.isoformat()
        if product.created_at else None,
    }
