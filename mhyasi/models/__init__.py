from mhyasi.models.invoice import Invoice
from mhyasi.models.product import Product
from mhyasi.models.unlock_code import UnlockCode
from mhyasi.models.unlock_request import UnlockRequest
from mhyasi.models.user import User

__all__ = [
    "Invoice",
    "Product",
    "UnlockCode",
    "UnlockRequest",
    "User",
]
