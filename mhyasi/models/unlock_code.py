from datetime import datetime

from sqlalchemy import (BigInteger, Boolean, DateTime, ForeignKey, Integer,
                        String)
from sqlalchemy.orm import Mapped, mapped_column

from mhyasi.core.database import Base
from mhyasi.core.time import utc_now


class UnlockCode(Base):
    __tablename__ = "unlock_codes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    code: Mapped[str] = mapped_column(String(64), unique=True, index=True)
    for_user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id"), index=True
    )
    # Display only; redemption is keyed on for_user_id.
    for_username: Mapped[str] = mapped_column(String(64))
    request_id: Mapped[int | None] = mapped_column(
        ForeignKey("requests.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)
    until: Mapped[int] = mapped_column(BigInteger)
    used: Mapped[bool] = mapped_column(Boolean, default=False)
    used_by: Mapped[str | None] = mapped_column(String(64), nullable=True)
    used_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
