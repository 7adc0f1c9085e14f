from __future__ import annotations

from offer_runtime.domain.offers.config import OfferEngineConfig
from offer_runtime.domain.offers.models import (
    AmountOff,
    CartCalculationInput,
    CartCalculationResult,
    CartItem,
    FreeItem,
    FreeItemGrant,
    Offer,
    OfferCalculation,
    OfferScope,
    OfferType,
    PercentOff,
    Product,
    RedemptionCount,
    Reward,
)

__all__ = [
    "OfferEngineConfig",
    "AmountOff",
    "CartCalculationInput",
    "CartCalculationResult",
    "CartItem",
    "FreeItem",
    "FreeItemGrant",
    "Offer",
    "OfferCalculation",
    "OfferScope",
    "OfferType",
    "PercentOff",
    "Product",
    "RedemptionCount",
    "Reward",
]
