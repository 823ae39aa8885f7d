from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mhyasi.core.database import Base
from mhyasi.core.time import utc_now


class Invoice(Base):
    __tablename__ = "invoices"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id"), index=True)
    invoice_id: Mapped[str] = mapped_column(String(120))
    customer: Mapped[str] = mapped_column(String(200), default="")
    # JSON-encoded list of line items, see services.invoices.
    items: Mapped[str] = mapped_column(Text, default="[]")
    total: Mapped[float] = mapped_column(Float, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)
