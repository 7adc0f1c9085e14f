from __future__ import annotations

import logging

from offer_runtime.domain.eligibility import (
    ExcludedOffer,
    apply_exclusions,
    exclude_if_below_min_order_amount,
    exclude_if_below_min_quantity,
    exclude_if_inactive,
    exclude_if_no_matching_items,
    exclude_if_outside_window,
    exclude_if_redemption_limit_reached,
    match_offer,
    stable_rank,
)
from offer_runtime.domain.offers import rules
from offer_runtime.domain.offers.calculator import calculate_offer_discount, round_money
from offer_runtime.domain.offers.config import OfferEngineConfig
from offer_runtime.domain.offers.models import (
    CartCalculationInput,
    CartCalculationResult,
    Offer,
    OfferCalculation,
)
from offer_runtime.domain.offers.stacking import merge_free_items, resolve_stacking
from offer_runtime.domain.offers.validation import validate_cart, validate_offers

logger = logging.getLogger(__name__)


def evaluate_cart_offers(
    input_row: CartCalculationInput, config: OfferEngineConfig
) -> CartCalculationResult:
    """
    Price a cart against an offer snapshot.

    Validates the whole input first and raises before computing anything, so callers
    never see a partial result. Offers that simply do not apply are reported in
    excluded_offers with their reason codes.
    """
    validate_cart(input_row.cart_items, input_row.products)
    validate_offers(input_row.offers)

    places = config.money_decimal_places
    cart_items = input_row.cart_items
    original_amount = round_money(sum(item.line_total for item in cart_items), places)

    # 1. Match each offer's scope against the cart
    matches = [match_offer(offer, cart_items, input_row.products) for offer in input_row.offers]

    # 2. Eligibility gates
    exclusion_checks = [
        lambda m: exclude_if_inactive(m.offer),
        lambda m: exclude_if_outside_window(m.offer, input_row.as_of_ts),
        exclude_if_no_matching_items,
        exclude_if_below_min_quantity,
        lambda m: exclude_if_below_min_order_amount(m.offer, original_amount),
        lambda m: exclude_if_redemption_limit_reached(
            m.offer, input_row.redemption_counts.get(m.offer.offer_id)
        ),
    ]
    eligible, excluded, reason_counts = apply_exclusions(matches, exclusion_checks)

    # 3. Stand-alone effect of each eligible offer; offers with no effect drop out
    ranked: list[tuple[Offer, OfferCalculation]] = []
    for match in stable_rank(eligible):
        calculation = calculate_offer_discount(match, config)
        if calculation.has_effect():
            ranked.append((match.offer, calculation))
        else:
            excluded.append(ExcludedOffer(offer=match.offer, reasons=[rules.REASON_NO_EFFECT]))

    # 4. Stacking
    applied, skipped = resolve_stacking(ranked)

    total_discount = round_money(sum(c.discount for c in applied), places)
    # Cap so final_amount == original_amount - total_discount and never goes negative
    total_discount = min(total_discount, original_amount)
    final_amount = round_money(original_amount - total_discount, places)

    excluded_offers: dict[str, list[str]] = {e.offer.offer_id: list(e.reasons) for e in excluded}
    for offer_id, reason in skipped.items():
        excluded_offers[offer_id] = [reason]

    logger.debug(
        f"Priced cart of {len(cart_items)} lines: {len(applied)} offers applied, "
        f"{len(excluded_offers)} excluded, reasons={reason_counts}"
    )

    return CartCalculationResult(
        applicable_offers=applied,
        total_discount=total_discount,
        final_amount=final_amount,
        original_amount=original_amount,
        free_items=merge_free_items(applied),
        excluded_offers=excluded_offers,
    )
