"""FastAPI application for the M7R storefront backend."""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from libs.common.config import get_settings
from libs.common.error_handler import add_exception_handlers
from libs.common.logging import get_logger
from libs.common.middleware import add_observability_middleware
from libs.db.config import engine
from libs.db.session import check_connection, create_all
from services.storefront_service.routers import (
    affiliates_router,
    auth_router,
    orders_router,
    payments_router,
    products_router,
    stores_router,
    users_router,
)

logger = get_logger(__name__)

API_ENDPOINTS = {
    "auth": "/api/auth",
    "users": "/api/users",
    "products": "/api/products",
    "stores": "/api/stores",
    "orders": "/api/orders",
    "payments": "/api/payments",
    "affiliates": "/api/affiliates",
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Verify the database before serving; dispose the pool on shutdown."""
    settings = get_settings()
    try:
        await check_connection(engine)
    except Exception:
        logger.exception("Database connection failed, refusing to start")
        raise
    logger.info("Database connection verified")

    if settings.DB_CREATE_ALL:
        await create_all(engine)
        logger.info("Database tables ensured")

    yield

    await engine.dispose()
    logger.info("Database engine disposed")


def create_app() -> FastAPI:
    """Create and configure the storefront FastAPI app."""
    settings = get_settings()
    app = FastAPI(
        title="M7R Store Builder API",
        version="1.0.0",
        description="Multi-tenant store builder: stores, products, orders, "
        "PayFast payments and affiliate commissions.",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Structured logging + request tracing
    add_observability_middleware(app)

    # Consistent JSON error bodies
    add_exception_handlers(app)

    app.mount(
        "/uploads",
        StaticFiles(directory=settings.UPLOADS_DIR, check_dir=False),
        name="uploads",
    )

    @app.get("/", tags=["system"])
    async def root() -> dict:
        return {
            "message": "Welcome to the M7R Store Builder API",
            "version": app.version,
            "endpoints": API_ENDPOINTS,
        }

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "storefront"}

    app.include_router(auth_router, prefix=API_ENDPOINTS["auth"])
    app.include_router(users_router, prefix=API_ENDPOINTS["users"])
    app.include_router(products_router, prefix=API_ENDPOINTS["products"])
    app.include_router(stores_router, prefix=API_ENDPOINTS["stores"])
    app.include_router(orders_router, prefix=API_ENDPOINTS["orders"])
    app.include_router(payments_router, prefix=API_ENDPOINTS["payments"])
    app.include_router(affiliates_router, prefix=API_ENDPOINTS["affiliates"])

    return app


app = create_app()


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        "services.storefront_service.app.main:app",
        host="0.0.0.0",
        port=settings.PORT,
        reload=settings.ENVIRONMENT == "local",
    )


if __name__ == "__main__":
    run()
