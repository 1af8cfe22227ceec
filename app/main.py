# app/main.py
from contextlib import asynccontextmanager
import logging

from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.core.i18n import detect_language
from app.database import create_db_and_tables, engine
from app.repositories.order_repo import OrderRepository
from app.repositories.user_repo import UserRepository
from app.services.user_service import UserService

# Import models so SQLModel metadata is populated before create_all()
from app.models import user as _user_models  # noqa: F401
from app.models import product as _product_models  # noqa: F401
from app.models import cart as _cart_models  # noqa: F401
from app.models import order as _order_models  # noqa: F401
from app.models import review as _review_models  # noqa: F401
from app.models import coupon as _coupon_models  # noqa: F401

# Routers
from app.routers.admin import router as admin_router
from app.routers.auth import router as auth_router
from app.routers.brands import router as brands_router
from app.routers.cart import router as cart_router
from app.routers.categories import router as categories_router
from app.routers.orders import router as orders_router
from app.routers.products import router as products_router

settings = get_settings()

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("uvicorn")

user_service = UserService(UserRepository(), OrderRepository())


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Startup:
      - Verify DB connectivity and create tables.
      - Create the bootstrap admin when ADMIN_EMAIL / ADMIN_PASSWORD are set.

    Shutdown:
      - No special cleanup needed for sync engine.
    """
    logger.info("Startup: connecting to %s", engine.url.render_as_string(hide_password=True))
    try:
        create_db_and_tables()
        logger.info("Startup: DB connection OK, tables verified.")
    except Exception:
        logger.error("Startup: DB connection FAILED", exc_info=True)
        raise

    if settings.ADMIN_EMAIL and settings.ADMIN_PASSWORD:
        with Session(engine) as session:
            user_service.ensure_admin(session, settings.ADMIN_EMAIL, settings.ADMIN_PASSWORD)

    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


# --- CORS configuration ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=settings.cors_origins_list != ["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Language detection ---
@app.middleware("http")
async def language_middleware(request: Request, call_next):
    request.state.lang = detect_language(request)
    return await call_next(request)


# --- Error envelope ---
def _error_response(status_code: int, error: str, message: str | None = None) -> JSONResponse:
    body = {"success": False, "error": error}
    if message:
        body["message"] = message
    return JSONResponse(status_code=status_code, content=body)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Render HTTPException raised by services as {success: false, error}.
    """
    return _error_response(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """
    Request-schema violations are reported as 400 with the first issue.
    """
    errors = exc.errors()
    if errors:
        first = errors[0]
        # Dot path without the top-level 'body' / 'query' location
        field = ".".join(str(loc) for loc in first["loc"][1:])
        issue = str(first["msg"]).removeprefix("Value error, ")
        error = f"{field}: {issue}" if field else issue
    else:
        error = "Invalid request"
    return _error_response(status.HTTP_400_BAD_REQUEST, error, "Validation failed")


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all: generic message to the client, traceback to the server log.
    """
    logger.error(
        "Unhandled exception on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
    )
    return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


app.include_router(products_router, prefix=settings.API_PREFIX)
app.include_router(categories_router, prefix=settings.API_PREFIX)
app.include_router(brands_router, prefix=settings.API_PREFIX)
app.include_router(cart_router, prefix=settings.API_PREFIX)
app.include_router(auth_router, prefix=settings.API_PREFIX)
app.include_router(orders_router, prefix=settings.API_PREFIX)
app.include_router(admin_router, prefix=settings.API_PREFIX)


@app.get(f"{settings.API_PREFIX}/health")
def health():
    """Health check endpoint."""
    return {"success": True, "data": {"status": "ok", "service": "pc-parts-shop"}}
