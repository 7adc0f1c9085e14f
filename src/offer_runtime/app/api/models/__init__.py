"""Pydantic models for API requests and responses."""

from offer_runtime.app.api.models.offers import (
    CalculateCartRequest,
    CartCalculationResponse,
    CartItemModel,
    FreeItemModel,
    OfferCalculationModel,
    OfferListResponse,
    OfferModel,
    Pagination,
)

__all__ = [
    "CalculateCartRequest",
    "CartCalculationResponse",
    "CartItemModel",
    "FreeItemModel",
    "OfferCalculationModel",
    "OfferListResponse",
    "OfferModel",
    "Pagination",
]
