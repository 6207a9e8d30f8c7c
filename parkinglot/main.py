# parkinglot/main.py
"""
FastAPI application entry point.
Includes security middleware, error handlers, and all routers.
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from parkinglot.routers import entries, customer, dashboard, health
from parkinglot.database import create_tables
from parkinglot.config import settings
from parkinglot.exceptions import (
    ConflictError, EntryDeniedError, NotFoundError, ParkingError, ValidationError,
)
from parkinglot.utils.logger import get_logger
import time

logger = get_logger(__name__)

app = FastAPI(
    title="Parking Lot API",
    description="Vehicle entry/exit logging, self-service payment, overnight carryover fees and revenue dashboard.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# ── CORS (allow the staff/customer front-ends to call the API) ───────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],   # Restrict to front-end origin in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ── API Key Middleware ───────────────────────────────────────────────────────
class APIKeyMiddleware(BaseHTTPMiddleware):
    """
    Optional lightweight API key auth for staff and dashboard endpoints.
    Customer self-service (lookup + exit) stays open; customers have no key.
    Set API_KEY in .env. Leave empty to disable auth.
    """
    open_paths = {"/api/v1/health", "/docs", "/redoc", "/openapi.json"}
    open_prefixes = ("/api/v1/lookup/", "/api/v1/exit/")

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if path in self.open_paths or path.startswith(self.open_prefixes) or not settings.API_KEY:
            return await call_next(request)

        api_key = request.headers.get("X-API-Key") or request.query_params.get("api_key")
        if api_key != settings.API_KEY:
            return JSONResponse(
                status_code=status.HTTP_401_UNAUTHORIZED,
                content={"detail": "Invalid or missing API key"},
            )
        return await call_next(request)


if settings.API_KEY:
    app.add_middleware(APIKeyMiddleware)


# ── Request Timing Middleware ────────────────────────────────────────────────
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    response = await call_next(request)
    duration = round((time.time() - start) * 1000, 2)
    logger.debug(f"{request.method} {request.url.path} → {response.status_code} ({duration}ms)")
    return response


# ── Business Error Handlers ──────────────────────────────────────────────────
_STATUS_BY_ERROR = (
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ConflictError, status.HTTP_409_CONFLICT),
)


@app.exception_handler(ParkingError)
async def parking_error_handler(request: Request, exc: ParkingError):
    code = next((c for cls, c in _STATUS_BY_ERROR if isinstance(exc, cls)), status.HTTP_400_BAD_REQUEST)
    content = {"detail": exc.message}
    if isinstance(exc, EntryDeniedError):
        content["decision"] = exc.decision.status.value
    logger.info(f"{request.method} {request.url.path} → {code}: {exc.message}")
    return JSONResponse(status_code=code, content=content)


# ── Global Exception Handler ─────────────────────────────────────────────────
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Internal server error"},
    )


# ── Routers ──────────────────────────────────────────────────────────────────
app.include_router(entries.router,   prefix="/api/v1", tags=["🚗 Staff — Entries"])
app.include_router(customer.router,  prefix="/api/v1", tags=["🧾 Customer — Lookup & Pay"])
app.include_router(dashboard.router, prefix="/api/v1", tags=["📊 Dashboard"])
app.include_router(health.router,    prefix="/api/v1", tags=["💚 Health"])


# ── Startup ───────────────────────────────────────────────────────────────────
@app.on_event("startup")
async def startup():
    logger.info("🚀 Parking backend starting up...")
    create_tables()
    logger.info("✅ Database tables ready")
    cal = settings.calendar
    logger.info(f"🕗 Business hours {cal.open_time:%H:%M}–{cal.close_time:%H:%M} ({settings.BUSINESS_TIMEZONE})")
    logger.info(f"💰 Tariff {cal.rate_per_billing_unit} per {cal.billing_unit_minutes} min")
    logger.info(f"🌐 Listening on http://{settings.BACKEND_HOST}:{settings.BACKEND_PORT}")
    logger.info("📖 API docs at /docs")


@app.on_event("shutdown")
async def shutdown():
    logger.info("🛑 Parking backend shutting down...")
