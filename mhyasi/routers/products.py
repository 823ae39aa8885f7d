from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mhyasi.core.database import get_db
from mhyasi.models import User
from mhyasi.schemas.products import ProductIn
from mhyasi.services import products
from mhyasi.services.auth import get_current_user

router = APIRouter(prefix="/api/products")


@router.post("")
def create_product(
    payload: ProductIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    product = products.create_product(
        db, user, payload.name, payload.price, payload.qty
    )
    return {"ok": True, "product": products.product_to_dict(product)}


@router.get("")
def list_products(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    rows = products.list_products(db, user)
    return {"ok": True, "products": [products.product_to_dict(p) for p in rows]}


@router.put("/{product_id}")
def update_product(
    product_id: int,
    payload: ProductIn,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    product = products.update_product(
        db, user, product_id, payload.name, payload.price, payload.qty
    )
    return {"ok": True, "product": products.product_to_dict(product)}


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    products.delete_product(db, user, product_id)
    return {"ok": True}
