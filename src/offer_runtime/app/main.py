from __future__ import annotations

from fastapi import FastAPI

from offer_runtime.app.api.routers import offers_router
from offer_runtime.app.health import router as health_router
from offer_runtime.observability.logging import configure_logging

configure_logging()

app = FastAPI(title="Offer Runtime")
app.include_router(health_router)
app.include_router(offers_router, prefix="/v1", tags=["offers"])
