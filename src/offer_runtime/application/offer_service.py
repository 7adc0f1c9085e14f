from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional, TypeVar

from offer_runtime.application.calculation_context import CalculationContext
from offer_runtime.application.errors import (
    CartValidationError,
    OfferDataUnavailableError,
    OfferNotFoundError,
    OfferValidationError,
)
from offer_runtime.domain.common.clock import ensure_utc
from offer_runtime.domain.eligibility import exclude_if_inactive, exclude_if_outside_window
from offer_runtime.domain.offers.config import OfferEngineConfig
from offer_runtime.domain.offers.evaluator import evaluate_cart_offers
from offer_runtime.domain.offers.models import (
    CartCalculationInput,
    CartCalculationResult,
    CartItem,
    Offer,
    OfferType,
)
from offer_runtime.ports.offer_catalog import OfferCatalog
from offer_runtime.ports.redemption_ledger import RedemptionLedger

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class OfferPage:
    data: List[Offer]
    page: int
    limit: int
    total: int

    @property
    def pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


def _rank_offers(offers: List[Offer]) -> List[Offer]:
    return sorted(offers, key=lambda o: (-o.priority, str(o.offer_id)))


class OffersService:
    """Fetches a catalog snapshot and runs the offer engine against it."""

    def __init__(
        self,
        catalog: OfferCatalog,
        ledger: RedemptionLedger,
        config: OfferEngineConfig,
    ) -> None:
        self.catalog = catalog
        self.ledger = ledger
        self.config = config

    def _fetch(self, operation: Callable[[], T], what: str, ctx: Optional[CalculationContext] = None) -> T:
        """Run a catalog read, turning unexpected failures into OfferDataUnavailableError."""
        extra = {"correlation_id": ctx.correlation_id.value} if ctx else {}
        try:
            return operation()
        except (OfferDataUnavailableError, OfferValidationError):
            raise
        except Exception as e:
            logger.error(f"Offer catalog unavailable while fetching {what}: {e}", extra=extra)
            raise OfferDataUnavailableError(f"Offer catalog unavailable while fetching {what}", source=what) from e

    def calculate_cart(self, cart_items: List[CartItem], ctx: CalculationContext) -> CartCalculationResult:
        """
        Price a cart with the offers currently scoped to its products.

        Raises:
            CartValidationError: If the cart is malformed or references unknown products
            OfferValidationError: If the catalog returned malformed offers
            OfferDataUnavailableError: If the catalog could not be read
        """
        if not cart_items:
            raise CartValidationError("Invalid cart", issues=["cart must contain at least one item"])

        extra = {"correlation_id": ctx.correlation_id.value}
        product_ids = list(dict.fromkeys(item.product_id for item in cart_items if item.product_id))
        products = self._fetch(lambda: self.catalog.get_products(product_ids), "products", ctx)

        categories = {p.category for p in products.values() if p.category}
        collections = {p.collection for p in products.values() if p.collection}
        offers = self._fetch(
            lambda: self.catalog.fetch_scoped_offers(product_ids, categories, collections),
            "scoped offers",
            ctx,
        )
        redemption_counts = self._fetch(
            lambda: self.ledger.get_redemption_counts([o.offer_id for o in offers], ctx.user_id),
            "redemption counts",
            ctx,
        )

        logger.info(
            f"Calculating cart of {len(cart_items)} lines against {len(offers)} scoped offers",
            extra=extra,
        )
        input_row = CartCalculationInput.new(
            cart_items=cart_items,
            offers=offers,
            products=products,
            as_of_ts=ctx.as_of_ts,
            user_id=ctx.user_id,
            redemption_counts=redemption_counts,
        )
        result = evaluate_cart_offers(input_row, self.config)
        logger.info(
            f"Applied {len(result.applicable_offers)} offers, total_discount={result.total_discount}",
            extra=extra,
        )
        return result

    def find_applicable_offers(
        self,
        product_id: Optional[str] = None,
        category: Optional[str] = None,
        collection: Optional[str] = None,
        as_of_ts: Optional[datetime] = None,
    ) -> List[Offer]:
        """
        Active, in-window offers for a product, category or collection, highest priority first.

        A product id also pulls in offers scoped to that product's category and collection.
        """
        ctx = CalculationContext.from_args(as_of_ts=as_of_ts)
        product_ids: set[str] = set()
        categories: set[str] = {category} if category else set()
        collections: set[str] = {collection} if collection else set()

        if product_id:
            product_ids.add(product_id)
            product = self._fetch(lambda: self.catalog.get_products([product_id]), "products").get(product_id)
            if product is not None:
                if product.category:
                    categories.add(product.category)
                if product.collection:
                    collections.add(product.collection)

        if not (product_ids or categories or collections):
            return []

        offers = self._fetch(
            lambda: self.catalog.fetch_scoped_offers(product_ids, categories, collections),
            "scoped offers",
        )
        live = [
            offer
            for offer in offers
            if not exclude_if_inactive(offer).excluded
            and not exclude_if_outside_window(offer, ctx.as_of_ts).excluded
        ]
        return _rank_offers(live)

    def list_offers(
        self,
        offer_type: Optional[OfferType] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        page: int = 1,
        limit: int = 10,
    ) -> OfferPage:
        """
        Filter and paginate the catalog.

        start_date keeps offers with no start or starting on/after it; end_date keeps
        offers with no end or ending on/before it.
        """
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be >= 1")

        offers = self._fetch(self.catalog.list_offers, "offers")
        needle = search.lower() if search else None

        def keep(offer: Offer) -> bool:
            if offer_type is not None and offer.type != offer_type:
                return False
            if is_active is not None and offer.is_active != is_active:
                return False
            if needle and needle not in offer.name.lower() and needle not in (offer.description or "").lower():
                return False
            if start_date and offer.starts_at and ensure_utc(offer.starts_at) < ensure_utc(start_date):
                return False
            if end_date and offer.ends_at and ensure_utc(offer.ends_at) > ensure_utc(end_date):
                return False
            return True

        matching = _rank_offers([offer for offer in offers if keep(offer)])
        skip = (page - 1) * limit
        return OfferPage(data=matching[skip: skip + limit], page=page, limit=limit, total=len(matching))

    def get_offer(self, offer_id: str) -> Offer:
        offer = self._fetch(lambda: self.catalog.get_offer(offer_id), "offer")
        if offer is None:
            raise OfferNotFoundError(f"Offer {offer_id} not found")
        return offer

    def close(self) -> None:
        self.catalog.close()
