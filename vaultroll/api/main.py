"""
vaultroll.api.main — FastAPI application entry point
=====================================================

Run with::

    uvicorn vaultroll.api.main:app --reload --port 8000

or ``python -m vaultroll.api``.
"""

from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

load_dotenv()

from vaultroll.api.deps import get_config, get_engine  # noqa: E402
from vaultroll.api.routes.accounts import router as accounts_router  # noqa: E402
from vaultroll.api.routes.game import router as game_router  # noqa: E402
from vaultroll.database.engine import init_db  # noqa: E402
from vaultroll.errors import CooldownActive, InternalError, VaultrollError  # noqa: E402

logger = logging.getLogger(__name__)

STATUS_BY_KIND: dict[str, int] = {
    "InvalidInput": status.HTTP_400_BAD_REQUEST,
    "InsufficientFunds": status.HTTP_400_BAD_REQUEST,
    "AccountNotFound": status.HTTP_404_NOT_FOUND,
    "PoolExhausted": status.HTTP_409_CONFLICT,
    "ConditionFailed": status.HTTP_409_CONFLICT,
    "CooldownActive": status.HTTP_429_TOO_MANY_REQUESTS,
    "StoreUnavailable": status.HTTP_503_SERVICE_UNAVAILABLE,
    "InternalError": status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def _cors_origins() -> list[str]:
    """Resolve allowed CORS origins from ``CORS_ALLOW_ORIGINS`` (comma-separated)."""
    raw = os.getenv("CORS_ALLOW_ORIGINS", "").strip()
    if raw:
        return [origin.strip().rstrip("/") for origin in raw.split(",") if origin.strip()]
    return []


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle — create tables and seed the pool."""
    cfg = get_config()
    engine = get_engine()
    init_db(engine, cfg)
    logger.info(
        "Vaultroll API started — engine ready (%s, strategy=%s)",
        engine.url.database, cfg.settlement_strategy,
    )
    yield
    logger.info("Vaultroll API shutting down")


app = FastAPI(
    title="Vaultroll API",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(game_router, prefix="/api")
app.include_router(accounts_router, prefix="/api")


# ---------------------------------------------------------------------------
# Error mapping
# ---------------------------------------------------------------------------
@app.exception_handler(VaultrollError)
async def vaultroll_error_handler(request: Request, exc: VaultrollError):
    headers = None
    if isinstance(exc, CooldownActive):
        headers = {"Retry-After": str(exc.hours_remaining * 3600)}
    return JSONResponse(
        status_code=STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR),
        content={"error": exc.to_dict()},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    fields = [".".join(str(p) for p in err["loc"][1:]) for err in exc.errors()]
    message = "Invalid input"
    if fields:
        message = f"Invalid input: {', '.join(f for f in fields if f)}"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": {"kind": "InvalidInput", "message": message}},
    )


@app.exception_handler(Exception)
async def internal_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": InternalError().to_dict()},
    )


@app.get("/api/health")
def health():
    return {"status": "ok"}
