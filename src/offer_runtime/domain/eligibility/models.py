from __future__ import annotations

from dataclasses import dataclass, field

from offer_runtime.domain.offers.models import CartItem, Offer


@dataclass(frozen=True)
class ExclusionResult:
    """Result of an exclusion check on an Offer."""

    excluded: bool
    reasons: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class ExcludedOffer:
    offer: Offer
    reasons: list[str]


@dataclass(frozen=True)
class OfferMatch:
    """Cart lines an offer's scope covers, plus derived totals."""

    offer: Offer
    items: list[CartItem]
    specificity: int

    @property
    def quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> float:
        return sum(item.line_total for item in self.items)
