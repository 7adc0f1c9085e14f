from __future__ import annotations

from offer_runtime.domain.eligibility.models import OfferMatch


def stable_rank(matches: list[OfferMatch]) -> list[OfferMatch]:
    """
    Sort offer matches deterministically.

    Sort key priority:
    1. offer.priority DESC (highest first)
    2. specificity DESC (product scope, then collection, then category)
    3. offer_id ASC as final tie-breaker
    """
    def sort_key(match: OfferMatch) -> tuple:
        return (-match.offer.priority, -match.specificity, str(match.offer.offer_id))

    return sorted(matches, key=sort_key)
