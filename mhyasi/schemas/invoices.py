from typing import Any, Optional

from pydantic import BaseModel, Field


class InvoiceCreate(BaseModel):
    invoice_id: Optional[str] = None
    customer: Optional[str] = None
    # Line items are checked by services.invoices after the entitlement gate
    # and stored exactly as sent.
    items: list[Any] = []
    total: Optional[float] = Field(default=None, allow_inf_nan=False)
