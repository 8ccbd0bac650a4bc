"""Storefront checkout FastAPI application.

Usage:
    uvicorn app:create_app --factory --app-dir src --host 0.0.0.0 --port 8000 --reload

STOREFRONT_ENV selects the logging overlay and whether the gateway
configuration endpoint is exposed; DATABASE_URL picks the database.
"""

from contextlib import asynccontextmanager
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ordering.api.routes import admin_router, cart_router, order_router
from ordering.checkout.orchestrator import CheckoutService
from ordering.order.assembly import OrderAssembler
from payments.api.routes import payment_router
from payments.gateway import gateway_from_settings
from payments.gateway.port import PaymentGateway
from payments.settlement.scheduler import SettlementScheduler
from shared.api import register_exception_handlers
from shared.config import Settings
from shared.database import Database
from shared.utils.db import setup_db
from shared.utils.logging import add_context, clear_context, configure_logging

logger = structlog.get_logger(__name__)


def create_app(
    settings: Settings | None = None,
    database: Database | None = None,
    gateway: PaymentGateway | None = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    database = database or Database(settings.database_url)

    gateway = gateway or gateway_from_settings(settings)

    scheduler = SettlementScheduler(
        database,
        gateway,
        timeout_seconds=settings.settlement_timeout_seconds,
        max_workers=settings.settlement_workers,
    )
    checkout = CheckoutService(database, OrderAssembler.from_settings(settings), scheduler)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging()
        setup_db(database)
        logger.info("Storefront started", env=settings.env, gateway=type(gateway).__name__)
        yield
        scheduler.shutdown(wait=True)
        logger.info("Storefront stopped")

    app = FastAPI(
        title="Storefront Checkout API",
        description="Cart validation, order placement, settlement and cancellation",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.database = database
    app.state.scheduler = scheduler
    app.state.checkout = checkout

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def logging_context_middleware(request: Request, call_next):
        """Bind a request id (and the caller, when known) to every log line."""
        clear_context()
        add_context(
            request_id=request.headers.get("x-request-id") or uuid4().hex,
            path=request.url.path,
            user_id=request.headers.get("x-user-id"),
        )
        try:
            return await call_next(request)
        finally:
            clear_context()

    register_exception_handlers(app)

    app.include_router(cart_router)
    app.include_router(order_router)
    app.include_router(admin_router)
    app.include_router(payment_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "env": settings.env})

    return app
