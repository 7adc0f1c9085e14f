from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from offer_runtime.domain.common.clock import ensure_utc
from offer_runtime.domain.eligibility.models import ExcludedOffer, ExclusionResult, OfferMatch
from offer_runtime.domain.offers import rules
from offer_runtime.domain.offers.models import Offer, RedemptionCount

_NOT_EXCLUDED = ExclusionResult(excluded=False, reasons=[])


def exclude_if_inactive(offer: Offer) -> ExclusionResult:
    if not offer.is_active:
        return ExclusionResult(excluded=True, reasons=[rules.REASON_OFFER_INACTIVE])
    return _NOT_EXCLUDED


def exclude_if_outside_window(offer: Offer, as_of_ts: datetime) -> ExclusionResult:
    """
    Check the offer's activation window against as_of_ts.

    Both bounds are inclusive and optional; a missing bound is unbounded.
    """
    as_of = ensure_utc(as_of_ts)
    if offer.starts_at is not None and as_of < ensure_utc(offer.starts_at):
        return ExclusionResult(excluded=True, reasons=[rules.REASON_OFFER_NOT_STARTED])
    if offer.ends_at is not None and as_of > ensure_utc(offer.ends_at):
        return ExclusionResult(excluded=True, reasons=[rules.REASON_OFFER_EXPIRED])
    return _NOT_EXCLUDED


def exclude_if_no_matching_items(match: OfferMatch) -> ExclusionResult:
    if not match.items:
        return ExclusionResult(excluded=True, reasons=[rules.REASON_NO_MATCHING_ITEMS])
    return _NOT_EXCLUDED


def exclude_if_below_min_quantity(match: OfferMatch) -> ExclusionResult:
    """
    Check total matching-item quantity against min_quantity.

    Offers flagged applies_to_any_qty skip the gate entirely.
    """
    offer = match.offer
    if offer.applies_to_any_qty or offer.min_quantity <= 0:
        return _NOT_EXCLUDED
    if match.quantity < offer.min_quantity:
        return ExclusionResult(excluded=True, reasons=[rules.REASON_BELOW_MIN_QUANTITY])
    return _NOT_EXCLUDED


def exclude_if_below_min_order_amount(offer: Offer, cart_subtotal: float) -> ExclusionResult:
    if offer.min_order_amount is not None and cart_subtotal < offer.min_order_amount:
        return ExclusionResult(excluded=True, reasons=[rules.REASON_BELOW_MIN_ORDER_AMOUNT])
    return _NOT_EXCLUDED


def exclude_if_redemption_limit_reached(offer: Offer, count: RedemptionCount | None) -> ExclusionResult:
    """
    Check redemption limits against a read-only counter snapshot.

    Without a snapshot the limits are not enforced here.
    """
    if count is None:
        return _NOT_EXCLUDED
    reasons: list[str] = []
    if offer.max_per_user is not None and count.user_redemptions >= offer.max_per_user:
        reasons.append(rules.REASON_MAX_PER_USER_REACHED)
    if offer.max_total_redemptions is not None and count.total_redemptions >= offer.max_total_redemptions:
        reasons.append(rules.REASON_MAX_TOTAL_REDEMPTIONS_REACHED)
    if reasons:
        return ExclusionResult(excluded=True, reasons=reasons)
    return _NOT_EXCLUDED


def apply_exclusions(
    matches: list[OfferMatch],
    exclusion_checks: list[Callable[[OfferMatch], ExclusionResult]],
) -> tuple[list[OfferMatch], list[ExcludedOffer], dict[str, int]]:
    """
    Apply every exclusion check to every offer match.

    All checks run even after one fails, so an excluded offer carries every reason it failed.

    Returns:
        Tuple of (eligible_matches, excluded_offers, reason_counts)
    """
    eligible: list[OfferMatch] = []
    excluded: list[ExcludedOffer] = []
    reason_counts: dict[str, int] = {}

    for match in matches:
        all_reasons: list[str] = []
        for check in exclusion_checks:
            result = check(match)
            if result.excluded:
                all_reasons.extend(result.reasons)
                for reason in result.reasons:
                    reason_counts[reason] = reason_counts.get(reason, 0) + 1

        if all_reasons:
            excluded.append(ExcludedOffer(offer=match.offer, reasons=all_reasons))
        else:
            eligible.append(match)

    return eligible, excluded, reason_counts
