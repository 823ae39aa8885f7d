from typing import Optional

from pydantic import BaseModel


class ProductIn(BaseModel):
    name: Optional[str] = None
    price: float = 0
    qty: int = 0
