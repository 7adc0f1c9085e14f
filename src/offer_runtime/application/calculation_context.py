from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from offer_runtime.domain.common.clock import ensure_utc
from offer_runtime.domain.common.ids import CorrelationId, UserId


@dataclass(frozen=True)
class CalculationContext:
    as_of_ts: datetime
    correlation_id: CorrelationId
    user_id: Optional[UserId] = None

    @classmethod
    def from_args(
        cls,
        as_of_ts: Optional[datetime] = None,
        user_id: Optional[str] = None,
        correlation_id: Optional[str] = None,
    ) -> "CalculationContext":
        return cls(
            as_of_ts=ensure_utc(as_of_ts) if as_of_ts else datetime.now(timezone.utc),
            correlation_id=CorrelationId(correlation_id or "auto"),
            user_id=UserId(user_id) if user_id else None,
        )
