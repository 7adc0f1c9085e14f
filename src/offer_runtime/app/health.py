from __future__ import annotations

from fastapi import APIRouter

from offer_runtime.settings import get_settings

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok", "offer_catalog_adapter": get_settings().offer_catalog_adapter}
