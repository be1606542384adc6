# storefront/main.py
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from storefront import __version__
from storefront.api.errors import register_exception_handlers
from storefront.api.middleware import FixedWindowRateLimiter, install_middleware
from storefront.api.routers import cart, health, orders, products, wishlist
from storefront.data.database import Base, engine
from storefront.repos.session_store import SessionStore, create_session_store
from storefront.utils.settings import PORT
from storefront.utils.logging import get_logger

# import modeli przed create_all, zeby byly w Base.metadata
from storefront.data import models  # noqa: F401

logger = get_logger(__name__)


def init_db() -> None:
    logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception:
        logger.exception("Failed to create tables")
        raise
    logger.info("Database tables ready")


def create_app(
    session_store: SessionStore | None = None,
    rate_limiter: FixedWindowRateLimiter | None = None,
    init_database: bool = True,
) -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if init_database:
            init_db()
        yield

    app = FastAPI(
        title="Storefront API",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.session_store = session_store or create_session_store()

    register_exception_handlers(app)
    install_middleware(app, rate_limiter)

    # Include routers
    app.include_router(health.router)
    app.include_router(products.router)
    app.include_router(cart.router)
    app.include_router(wishlist.router)
    app.include_router(orders.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=PORT)
