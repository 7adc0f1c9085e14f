from __future__ import annotations

from typing import Iterable, Optional

from offer_runtime.domain.offers.models import RedemptionCount
from offer_runtime.ports.redemption_ledger import RedemptionLedger


class NoopRedemptionLedger(RedemptionLedger):
    def get_redemption_counts(
        self, offer_ids: Iterable[str], user_id: Optional[str] = None
    ) -> dict[str, RedemptionCount]:
        return {}
