from __future__ import annotations

from typing import Iterable, Protocol

from offer_runtime.domain.offers.models import Offer, Product


class OfferCatalog(Protocol):
    """Read-only access to offers and product scope data owned by the admin subsystem."""

    def get_products(self, product_ids: Iterable[str]) -> dict[str, Product]: ...

    def fetch_scoped_offers(
        self,
        product_ids: Iterable[str],
        categories: Iterable[str],
        collections: Iterable[str],
    ) -> list[Offer]: ...

    def list_offers(self) -> list[Offer]: ...

    def get_offer(self, offer_id: str) -> Offer | None: ...

    def close(self) -> None:
        """Release any connection the catalog holds."""
        ...
