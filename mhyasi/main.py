import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from mhyasi.core.database import SessionLocal, init_db
from mhyasi.core.errors import ShopError
from mhyasi.core.logging import configure_logging
from mhyasi.routers import auth, invoices, payments, products, unlocks
from mhyasi.services.accounts import ensure_admin

logger = logging.getLogger(__name__)

configure_logging()

app = FastAPI(title="Mhyasi Store API")

app.include_router(auth.router)
app.include_router(products.router)
app.include_router(invoices.router)
app.include_router(unlocks.router)
app.include_router(payments.router)


def error_response(
    message: str, status_code: int = 400, code: str | None = None
) -> JSONResponse:
    payload = {"ok": False, "message": message}
    if code:
        payload["code"] = code
    return JSONResponse(payload, status_code=status_code)


@app.exception_handler(ShopError)
def handle_shop_error(request: Request, exc: ShopError) -> JSONResponse:
    return error_response(exc.message, exc.status_code, exc.code)


@app.exception_handler(RequestValidationError)
def handle_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return error_response(message, 400, "validation")


@app.exception_handler(SQLAlchemyError)
def handle_db_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Database error on %s %s: %s", request.method, request.url.path, exc)
    return error_response("server error", 500)


@app.on_event("startup")
def on_startup() -> None:
    init_db()
    with SessionLocal() as db:
        ensure_admin(db)
