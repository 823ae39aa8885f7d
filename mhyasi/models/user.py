from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from mhyasi.core.database import Base
from mhyasi.core.time import utc_now


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    username: Mapped[str] = mapped_column(
        String(64), unique=True, index=True
    )
    password_hash: Mapped[str] = mapped_column(String(255))
    role: Mapped[str] = mapped_column(String(16), default="user")
    shop_name: Mapped[str] = mapped_column(String(200), default="")
    shop_address: Mapped[str] = mapped_column(String(500), default="")
    logo_path: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # Epoch milliseconds; end of the current sales window.
    unlocked_until: Mapped[int | None] = mapped_column(
        BigInteger, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=utc_now)

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"
