from datetime import datetime

from sqlalchemy import (CheckConstraint, DateTime, Float, ForeignKey, Integer,
                        String)
from sqlalchemy.orm import Mapped, mapped_column

from mhyasi.core.database import Base
from mhyasi.core.time import utc_now


class Product(Base):
    __tablename__ = "products"
    __table_args__ = (CheckConstraint("qty >= 0", name="ck_products_qty"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    name: Mapped[str] = mapped_column(String(200))
    price: Mapped[float] = mapped_column(Float, default=0)
    qty: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)
