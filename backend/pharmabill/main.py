"""
PharmaBill Backend: GST billing for a retail pharmacy.

ARCHITECTURE:
- Billing core: line/invoice tax arithmetic, invoice numbering,
  invoice assembly and PDF rendering (pharmabill.services)
- FastAPI routes: validation and persistence around the core
- SQLite DB: invoices and pharmacy settings
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from pharmabill.api.routes import invoices
from pharmabill.api.routes import settings as settings_routes
from pharmabill.core.config import settings
from pharmabill.db.init_db import init_db

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup."""
    logger.info("[*] Initializing database...")
    init_db()
    logger.info("[OK] Database initialized")
    yield


app = FastAPI(
    title="PharmaBill API",
    description="GST invoices for a retail pharmacy: compute, number, print.",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=[
        "Content-Type",
        "Authorization",
        "Accept",
        "Origin",
    ],
    max_age=600,
    expose_headers=["Content-Type", "Content-Disposition"],
)


@app.middleware("http")
async def add_security_headers(request, call_next):
    response = await call_next(request)
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response

app.include_router(invoices.router, prefix="/invoices", tags=["invoices"])
app.include_router(settings_routes.router, prefix="/settings", tags=["settings"])


@app.get("/health")
def health():
    return {"status": "ok", "environment": settings.ENVIRONMENT}
