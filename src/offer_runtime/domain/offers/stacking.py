from __future__ import annotations

from offer_runtime.domain.offers import rules
from offer_runtime.domain.offers.models import FreeItemGrant, Offer, OfferCalculation


def resolve_stacking(
    ranked: list[tuple[Offer, OfferCalculation]],
) -> tuple[list[OfferCalculation], dict[str, str]]:
    """
    Pick which ranked offers apply together.

    A non-stackable top offer applies alone. Otherwise stackable offers accumulate
    in rank order until the first non-stackable one, which is not applied. Each
    discount was computed against the original subtotal, so nothing compounds.

    Args:
        ranked: (offer, calculation) pairs already sorted best first

    Returns:
        Tuple of (applied_calculations, skipped) where skipped maps offer_id to reason
    """
    applied: list[OfferCalculation] = []
    skipped: dict[str, str] = {}

    for index, (offer, calculation) in enumerate(ranked):
        if not offer.is_stackable:
            if index == 0:
                applied.append(calculation)
                reason = rules.REASON_OUTRANKED_BY_NON_STACKABLE
            else:
                skipped[offer.offer_id] = rules.REASON_STOPPED_AT_NON_STACKABLE
                reason = rules.REASON_STOPPED_AT_NON_STACKABLE
            for remaining, _ in ranked[index + 1:]:
                skipped[remaining.offer_id] = reason
            break
        applied.append(calculation)

    return applied, skipped


def merge_free_items(calculations: list[OfferCalculation]) -> list[FreeItemGrant]:
    """Merge free item grants by product id, summing quantities, in first-seen order."""
    quantities: dict[str, int] = {}
    for calculation in calculations:
        for grant in calculation.free_items:
            quantities[grant.product_id] = quantities.get(grant.product_id, 0) + grant.quantity
    return [FreeItemGrant(product_id=product_id, quantity=qty) for product_id, qty in quantities.items()]
