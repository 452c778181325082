from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.ingestion import build_default_gateway


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    gateway = build_default_gateway()
    try:
        yield
    finally:
        gateway.store.clear()
        build_default_gateway.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Microclimate Sensor Hub",
        description="Push ingestion and bounded recent history for environmental sensors.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
