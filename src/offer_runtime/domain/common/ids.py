from __future__ import annotations

from dataclasses import dataclass
from typing import NewType

OfferId = NewType("OfferId", str)
ProductId = NewType("ProductId", str)
UserId = NewType("UserId", str)


@dataclass(frozen=True)
class CorrelationId:
    value: str
