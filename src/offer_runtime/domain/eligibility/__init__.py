"""
Offer eligibility policy.

Pure, deterministic gates deciding which offers a cart qualifies for. An offer
that fails a gate is an expected outcome, reported through reason codes rather
than exceptions.

Usage Example:
    ```python
    matches = [match_offer(offer, cart_items, products) for offer in offers]
    eligible, excluded, reason_counts = apply_exclusions(
        matches,
        [
            lambda m: exclude_if_inactive(m.offer),
            lambda m: exclude_if_outside_window(m.offer, as_of_ts),
            exclude_if_no_matching_items,
            exclude_if_below_min_quantity,
        ],
    )
    ranked = stable_rank(eligible)
    ```
"""

from __future__ import annotations

from offer_runtime.domain.eligibility.exclusions import (
    apply_exclusions,
    exclude_if_below_min_order_amount,
    exclude_if_below_min_quantity,
    exclude_if_inactive,
    exclude_if_no_matching_items,
    exclude_if_outside_window,
    exclude_if_redemption_limit_reached,
)
from offer_runtime.domain.eligibility.models import ExcludedOffer, ExclusionResult, OfferMatch
from offer_runtime.domain.eligibility.ordering import stable_rank
from offer_runtime.domain.eligibility.scope import (
    item_specificity,
    match_offer,
    offer_matches_context,
)

__all__ = [
    # Models
    "ExclusionResult",
    "ExcludedOffer",
    "OfferMatch",
    # Scope
    "item_specificity",
    "match_offer",
    "offer_matches_context",
    # Exclusions
    "exclude_if_inactive",
    "exclude_if_outside_window",
    "exclude_if_no_matching_items",
    "exclude_if_below_min_quantity",
    "exclude_if_below_min_order_amount",
    "exclude_if_redemption_limit_reached",
    "apply_exclusions",
    # Ordering
    "stable_rank",
]
