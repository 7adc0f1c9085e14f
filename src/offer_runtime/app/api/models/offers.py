"""Pydantic models for offer API requests and responses.

Field names follow the marketplace's camelCase JSON; Python attributes stay snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from offer_runtime.domain.offers.models import (
    AmountOff,
    CartCalculationResult,
    CartItem,
    FreeItem,
    FreeItemGrant,
    Offer,
    OfferCalculation,
    OfferType,
    PercentOff,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CartItemModel(CamelModel):
    product_id: str = Field(..., alias="productId")
    quantity: int
    unit_price: float = Field(..., alias="unitPrice")

    def to_domain(self) -> CartItem:
        return CartItem(product_id=self.product_id, quantity=self.quantity, unit_price=self.unit_price)


class CalculateCartRequest(CamelModel):
    cart_items: list[CartItemModel] = Field(..., alias="cartItems")
    user_id: Optional[str] = Field(None, alias="userId")
    as_of: Optional[datetime] = Field(None, alias="asOf", description="Defaults to now")


class FreeItemModel(CamelModel):
    product_id: str = Field(..., alias="productId")
    quantity: int

    @classmethod
    def from_domain(cls, grant: FreeItemGrant) -> "FreeItemModel":
        return cls(product_id=grant.product_id, quantity=grant.quantity)


class OfferCalculationModel(CamelModel):
    offer_id: str = Field(..., alias="offerId")
    offer_name: str = Field(..., alias="offerName")
    type: OfferType
    discount: float
    free_items: Optional[list[FreeItemModel]] = Field(None, alias="freeItems")

    @classmethod
    def from_domain(cls, calculation: OfferCalculation) -> "OfferCalculationModel":
        return cls(
            offer_id=calculation.offer_id,
            offer_name=calculation.offer_name,
            type=calculation.type,
            discount=calculation.discount,
            free_items=[FreeItemModel.from_domain(g) for g in calculation.free_items] or None,
        )


class CartCalculationResponse(CamelModel):
    applicable_offers: list[OfferCalculationModel] = Field(..., alias="applicableOffers")
    total_discount: float = Field(..., alias="totalDiscount")
    final_amount: float = Field(..., alias="finalAmount")
    original_amount: float = Field(..., alias="originalAmount")
    free_items: list[FreeItemModel] = Field(default_factory=list, alias="freeItems")
    excluded_offers: dict[str, list[str]] = Field(
        default_factory=dict,
        alias="excludedOffers",
        description="Offer id -> reason codes for scoped offers that were not applied",
    )

    @classmethod
    def from_domain(cls, result: CartCalculationResult) -> "CartCalculationResponse":
        return cls(
            applicable_offers=[OfferCalculationModel.from_domain(c) for c in result.applicable_offers],
            total_discount=result.total_discount,
            final_amount=result.final_amount,
            original_amount=result.original_amount,
            free_items=[FreeItemModel.from_domain(g) for g in result.free_items],
            excluded_offers=result.excluded_offers,
        )


class OfferScopesModel(CamelModel):
    products: list[str] = Field(default_factory=list)
    categories: list[str] = Field(default_factory=list)
    collections: list[str] = Field(default_factory=list)


class OfferModel(CamelModel):
    id: str
    name: str
    description: Optional[str] = None
    type: OfferType
    percent_off: Optional[float] = Field(None, alias="percentOff")
    amount_off: Optional[float] = Field(None, alias="amountOff")
    free_item_product_id: Optional[str] = Field(None, alias="freeItemProductId")
    free_item_qty: Optional[int] = Field(None, alias="freeItemQty")
    starts_at: Optional[datetime] = Field(None, alias="startsAt")
    ends_at: Optional[datetime] = Field(None, alias="endsAt")
    min_quantity: int = Field(0, alias="minQuantity")
    min_order_amount: Optional[float] = Field(None, alias="minOrderAmount")
    applies_to_any_qty: bool = Field(False, alias="appliesToAnyQty")
    max_per_user: Optional[int] = Field(None, alias="maxPerUser")
    max_total_redemptions: Optional[int] = Field(None, alias="maxTotalRedemptions")
    priority: int = 0
    is_stackable: bool = Field(False, alias="isStackable")
    is_active: bool = Field(True, alias="isActive")
    scopes: OfferScopesModel = Field(default_factory=OfferScopesModel)

    @classmethod
    def from_domain(cls, offer: Offer) -> "OfferModel":
        reward = offer.reward
        return cls(
            id=offer.offer_id,
            name=offer.name,
            description=offer.description,
            type=offer.type,
            percent_off=reward.percent_off if isinstance(reward, PercentOff) else None,
            amount_off=reward.amount_off if isinstance(reward, AmountOff) else None,
            free_item_product_id=reward.product_id if isinstance(reward, FreeItem) else None,
            free_item_qty=reward.quantity if isinstance(reward, FreeItem) else None,
            starts_at=offer.starts_at,
            ends_at=offer.ends_at,
            min_quantity=offer.min_quantity,
            min_order_amount=offer.min_order_amount,
            applies_to_any_qty=offer.applies_to_any_qty,
            max_per_user=offer.max_per_user,
            max_total_redemptions=offer.max_total_redemptions,
            priority=offer.priority,
            is_stackable=offer.is_stackable,
            is_active=offer.is_active,
            scopes=OfferScopesModel(
                products=sorted(offer.scope.product_ids),
                categories=sorted(offer.scope.categories),
                collections=sorted(offer.scope.collections),
            ),
        )


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class OfferListResponse(BaseModel):
    data: list[OfferModel]
    pagination: Pagination
