import os
from pathlib import Path

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/app.db")

JWT_SECRET = os.getenv("JWT_SECRET", "")
JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
TOKEN_EXPIRE_DAYS = int(os.getenv("TOKEN_EXPIRE_DAYS", "30"))

ADMIN_USERNAME = os.getenv("ADMIN_USERNAME", "admin")
ADMIN_PASSWORD = os.getenv("ADMIN_PASSWORD", "admin123")
ADMIN_SHOP_NAME = os.getenv("ADMIN_SHOP_NAME", "Mhyasi Admin")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", "uploads"))
ALLOWED_IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".webp", ".gif", ".avif"}

TG_BOT_TOKEN = os.getenv("TG_BOT_TOKEN")
TG_GROUP_CHAT_ID = os.getenv("TG_GROUP_CHAT_ID")

ROLES = ("user", "admin")
REQUEST_STATUSES = ("pending", "approved", "declined")

DAY_SECONDS = 24 * 60 * 60
DURATION_UNITS = {
    "days": DAY_SECONDS,
    "months": 30 * DAY_SECONDS,
    "years": 365 * DAY_SECONDS,
}
DEFAULT_DURATIONS = {"days": 30, "months": 1, "years": 1}

CODE_PREFIX = "UNLK-"
CODE_TOKEN_BYTES = 8

# Largest value the BIGINT epoch-ms columns can hold.
MAX_EPOCH_MS = 2**63 - 1
# Upper bound for a single stock movement; Product.qty is a 32-bit column.
MAX_STOCK_QTY = 2**31 - 1
MAX_ROW_ID = 2**63 - 1
