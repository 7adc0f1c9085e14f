from __future__ import annotations

from typing import Iterable, List, Optional

from offer_runtime.domain.eligibility.scope import offer_matches_context
from offer_runtime.domain.offers.models import Offer, Product
from offer_runtime.ports.offer_catalog import OfferCatalog


class InMemoryOfferCatalog(OfferCatalog):
    def __init__(self, offers: Optional[List[Offer]] = None, products: Optional[List[Product]] = None) -> None:
        self.offers = list(offers or [])
        self.products = {p.product_id: p for p in products or []}

    def get_products(self, product_ids: Iterable[str]) -> dict[str, Product]:
        return {pid: self.products[pid] for pid in product_ids if pid in self.products}

    def fetch_scoped_offers(
        self,
        product_ids: Iterable[str],
        categories: Iterable[str],
        collections: Iterable[str],
    ) -> list[Offer]:
        product_set, category_set, collection_set = set(product_ids), set(categories), set(collections)
        return [
            offer
            for offer in self.offers
            if offer_matches_context(offer, product_set, category_set, collection_set)
        ]

    def list_offers(self) -> list[Offer]:
        return list(self.offers)

    def get_offer(self, offer_id: str) -> Offer | None:
        for offer in self.offers:
            if offer.offer_id == offer_id:
                return offer
        return None

    def close(self) -> None:
        pass
