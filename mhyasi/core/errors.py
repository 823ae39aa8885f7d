"""Request-scoped error types.

Services raise these; ``mhyasi.main`` renders them as
``{"ok": false, "message": ..., "code": ...}`` with ``status_code``.
"""
from typing import Optional


class ShopError(Exception):
    status_code = 400
    code = "error"

    def __init__(self, message: str, code: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        if code:
            self.code = code


class ValidationError(ShopError):
    status_code = 400
    code = "validation"


class Unauthorized(ShopError):
    status_code = 401
    code = "unauthorized"


class Forbidden(ShopError):
    status_code = 403
    code = "forbidden"


class NotFound(ShopError):
    status_code = 404
    code = "not-found"


class Conflict(ShopError):
    status_code = 409
    code = "conflict"


class AccountLocked(ShopError):
    status_code = 403
    code = "account-locked"


class AlreadyUsed(ShopError):
    status_code = 400
    code = "already-used"


class Expired(ShopError):
    status_code = 400
    code = "expired"
