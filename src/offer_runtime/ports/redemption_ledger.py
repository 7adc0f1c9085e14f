from __future__ import annotations

from typing import Iterable, Optional, Protocol

from offer_runtime.domain.offers.models import RedemptionCount


class RedemptionLedger(Protocol):
    def get_redemption_counts(
        self, offer_ids: Iterable[str], user_id: Optional[str] = None
    ) -> dict[str, RedemptionCount]: ...
