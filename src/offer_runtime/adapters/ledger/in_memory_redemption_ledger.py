from __future__ import annotations

from typing import Iterable, Optional

from offer_runtime.domain.offers.models import RedemptionCount
from offer_runtime.ports.redemption_ledger import RedemptionLedger


class InMemoryRedemptionLedger(RedemptionLedger):
    """Redemption counters held in memory: {offer_id: {"total": n, "by_user": {user_id: n}}}."""

    def __init__(self, counters: Optional[dict[str, dict]] = None) -> None:
        self.counters = counters or {}

    def get_redemption_counts(
        self, offer_ids: Iterable[str], user_id: Optional[str] = None
    ) -> dict[str, RedemptionCount]:
        counts: dict[str, RedemptionCount] = {}
        for offer_id in offer_ids:
            counter = self.counters.get(offer_id)
            if counter is None:
                continue
            by_user = counter.get("by_user", {})
            counts[offer_id] = RedemptionCount(
                user_redemptions=int(by_user.get(user_id, 0)) if user_id else 0,
                total_redemptions=int(counter.get("total", 0)),
            )
        return counts
