from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Union

from offer_runtime.domain.common.ids import OfferId, ProductId


class OfferType(str, Enum):
    FREE_ITEM = "FREE_ITEM"
    PERCENT_OFF = "PERCENT_OFF"
    AMOUNT_OFF = "AMOUNT_OFF"


@dataclass(frozen=True)
class PercentOff:
    """Discount a share of the matched subtotal."""

    percent_off: float

    @property
    def type(self) -> OfferType:
        return OfferType.PERCENT_OFF


@dataclass(frozen=True)
class AmountOff:
    """Discount a fixed amount, never more than the matched subtotal."""

    amount_off: float

    @property
    def type(self) -> OfferType:
        return OfferType.AMOUNT_OFF


@dataclass(frozen=True)
class FreeItem:
    """Grant units of a product at zero cost."""

    product_id: ProductId
    quantity: int = 1

    @property
    def type(self) -> OfferType:
        return OfferType.FREE_ITEM


Reward = Union[PercentOff, AmountOff, FreeItem]


@dataclass(frozen=True)
class OfferScope:
    """Products, categories and collections an offer targets."""

    product_ids: frozenset[str] = frozenset()
    categories: frozenset[str] = frozenset()
    collections: frozenset[str] = frozenset()

    @staticmethod
    def new(
        product_ids: list[str] | None = None,
        categories: list[str] | None = None,
        collections: list[str] | None = None,
    ) -> "OfferScope":
        return OfferScope(
            product_ids=frozenset(product_ids or []),
            categories=frozenset(categories or []),
            collections=frozenset(collections or []),
        )

    def is_empty(self) -> bool:
        return not (self.product_ids or self.categories or self.collections)


@dataclass(frozen=True)
class Offer:
    """A promotional rule read from the offer catalog."""

    offer_id: OfferId
    name: str
    reward: Reward
    scope: OfferScope = field(default_factory=OfferScope)
    description: str | None = None
    starts_at: datetime | None = None
    ends_at: datetime | None = None
    min_quantity: int = 0
    min_order_amount: float | None = None
    applies_to_any_qty: bool = False
    max_per_user: int | None = None
    max_total_redemptions: int | None = None
    priority: int = 0
    is_stackable: bool = False
    is_active: bool = True

    @property
    def type(self) -> OfferType:
        return self.reward.type


@dataclass(frozen=True)
class Product:
    """Scope data for a product: the only product fields the engine reads."""

    product_id: ProductId
    category: str | None = None
    collection: str | None = None


@dataclass(frozen=True)
class CartItem:
    product_id: ProductId
    quantity: int
    unit_price: float

    @property
    def line_total(self) -> float:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class RedemptionCount:
    """Read-only redemption counters for one offer."""

    user_redemptions: int = 0
    total_redemptions: int = 0


@dataclass(frozen=True)
class FreeItemGrant:
    product_id: ProductId
    quantity: int


@dataclass(frozen=True)
class OfferCalculation:
    """Stand-alone effect of a single offer against the cart."""

    offer_id: OfferId
    offer_name: str
    type: OfferType
    discount: float
    free_items: list[FreeItemGrant] = field(default_factory=list)

    def has_effect(self) -> bool:
        return self.discount > 0 or bool(self.free_items)


@dataclass(frozen=True)
class CartCalculationInput:
    """Everything one calculation reads: the cart plus a catalog snapshot."""

    cart_items: list[CartItem]
    offers: list[Offer]
    products: dict[str, Product]
    as_of_ts: datetime
    user_id: str | None = None
    redemption_counts: dict[str, RedemptionCount] = field(default_factory=dict)

    @staticmethod
    def new(
        cart_items: list[CartItem],
        offers: list[Offer],
        products: list[Product] | dict[str, Product],
        as_of_ts: datetime,
        user_id: str | None = None,
        redemption_counts: dict[str, RedemptionCount] | None = None,
    ) -> "CartCalculationInput":
        if not isinstance(products, dict):
            products = {p.product_id: p for p in products}
        return CartCalculationInput(
            cart_items=list(cart_items),
            offers=list(offers),
            products=dict(products),
            as_of_ts=as_of_ts,
            user_id=user_id,
            redemption_counts=dict(redemption_counts or {}),
        )


@dataclass(frozen=True)
class CartCalculationResult:
    """Evaluator output for a cart. Derived, never stored."""

    applicable_offers: list[OfferCalculation]
    total_discount: float
    final_amount: float
    original_amount: float
    free_items: list[FreeItemGrant]
    excluded_offers: dict[str, list[str]] = field(default_factory=dict)
