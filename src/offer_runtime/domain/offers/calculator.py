from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from offer_runtime.domain.eligibility.models import OfferMatch
from offer_runtime.domain.offers import rules
from offer_runtime.domain.offers.config import OfferEngineConfig
from offer_runtime.domain.offers.models import (
    AmountOff,
    FreeItem,
    FreeItemGrant,
    OfferCalculation,
    PercentOff,
)


def round_money(value: float, places: int = 2) -> float:
    """Round half-up on the decimal representation, so 0.125 becomes 0.13."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(str(value)).quantize(quantum, rounding=ROUND_HALF_UP))


def free_item_multiples(match: OfferMatch, policy: str) -> int:
    """
    Number of times a FREE_ITEM grant is earned by the matched lines.

    PER_THRESHOLD grants once per full multiple of min_quantity across all matching
    lines; an offer with no min_quantity, or one flagged applies_to_any_qty that has
    not reached the threshold, still earns a single grant. ONCE_PER_ORDER always
    grants once.
    """
    if not match.items:
        return 0
    if policy == rules.GRANT_ONCE_PER_ORDER:
        return 1

    min_quantity = match.offer.min_quantity
    if min_quantity <= 0:
        return 1
    multiples = match.quantity // min_quantity
    if multiples == 0 and match.offer.applies_to_any_qty:
        return 1
    return multiples


def calculate_offer_discount(match: OfferMatch, config: OfferEngineConfig) -> OfferCalculation:
    """Compute the stand-alone effect of one offer against its matched cart lines."""
    offer = match.offer
    reward = offer.reward
    places = config.money_decimal_places
    matched_subtotal = match.subtotal

    discount = 0.0
    free_items: list[FreeItemGrant] = []

    if isinstance(reward, PercentOff):
        discount = round_money(matched_subtotal * reward.percent_off / 100, places)
    elif isinstance(reward, AmountOff):
        discount = round_money(min(reward.amount_off, matched_subtotal), places)
    elif isinstance(reward, FreeItem):
        free_qty = free_item_multiples(match, config.free_item_grant_policy) * reward.quantity
        if free_qty > 0:
            free_items.append(FreeItemGrant(product_id=reward.product_id, quantity=free_qty))

    return OfferCalculation(
        offer_id=offer.offer_id,
        offer_name=offer.name,
        type=offer.type,
        discount=discount,
        free_items=free_items,
    )
