import asyncio
import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from apps.api.routes import (
    auth,
    chat,
    distance,
    health,
    product_requests,
    products,
    shops,
)
from apps.core.db import init_db
from apps.market.caching import MarketCaches, create_market_caches

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    caches: MarketCaches = app.state.caches
    tasks = [asyncio.create_task(sweeper.run()) for sweeper in caches.sweepers]
    logger.info(
        "startup complete", extra={"env": os.getenv("APP_ENV", "dev"), "port": os.getenv("PORT", "8000")}
    )
    try:
        yield
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info("sweepers stopped")


def create_app(caches: Optional[MarketCaches] = None) -> FastAPI:
    """Build the API with its own cache instances."""
    app = FastAPI(
        title="Village Market API",
        description="Local shops, product search with synonyms, distances and buyer requests",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.caches = caches or create_market_caches()

    # CORS: фронт читает X-Total-Count и debug-заголовки поиска
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Total-Count", "X-Search-Terms", "X-Search-Debug"],
    )

    app.include_router(health.router, prefix="/api")
    app.include_router(auth.router, prefix="/api")
    app.include_router(shops.router, prefix="/api")
    app.include_router(products.router, prefix="/api")
    app.include_router(distance.router, prefix="/api")
    app.include_router(chat.router, prefix="/api")
    app.include_router(product_requests.router, prefix="/api")

    @app.get("/")
    async def root():
        return {"message": "Village Market API", "version": "1.0.0"}

    return app


app = create_app()
