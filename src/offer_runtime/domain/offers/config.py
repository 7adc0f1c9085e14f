from __future__ import annotations

from dataclasses import dataclass

from offer_runtime.domain.offers import rules


@dataclass(frozen=True)
class OfferEngineConfig:
    free_item_grant_policy: str = rules.GRANT_PER_THRESHOLD  # or GRANT_ONCE_PER_ORDER
    money_decimal_places: int = 2
