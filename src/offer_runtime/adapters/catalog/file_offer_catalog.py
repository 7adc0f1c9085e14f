from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, Iterable, Optional

import jsonschema

from offer_runtime.adapters.catalog.in_memory_offer_catalog import InMemoryOfferCatalog
from offer_runtime.adapters.catalog.records import (
    offer_from_record,
    product_from_record,
    redemption_counts_from_record,
)
from offer_runtime.application.errors import OfferDataUnavailableError
from offer_runtime.domain.offers.models import Offer, Product, RedemptionCount
from offer_runtime.ports.offer_catalog import OfferCatalog
from offer_runtime.ports.redemption_ledger import RedemptionLedger

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("offer_catalog.schema.json")


def load_catalog_schema() -> dict[str, Any]:
    with SCHEMA_PATH.open("r", encoding="utf-8") as f:
        return json.load(f)


class FileOfferCatalog(OfferCatalog, RedemptionLedger):
    """
    Offer catalog read from a JSON document.

    The file is loaded lazily on first access and validated against the packaged
    schema. Any read, parse or validation failure surfaces as
    OfferDataUnavailableError.
    """

    def __init__(self, path: str, schema: Optional[dict[str, Any]] = None) -> None:
        self.path = Path(path)
        self._schema = schema
        self._catalog: Optional[InMemoryOfferCatalog] = None
        self._redemptions: dict[str, dict[str, Any]] = {}
        self._lock = threading.Lock()

    def _load(self) -> InMemoryOfferCatalog:
        if self._catalog is not None:
            return self._catalog
        with self._lock:
            if self._catalog is None:
                self._catalog = self._read()
        return self._catalog

    def _read(self) -> InMemoryOfferCatalog:
        try:
            with self.path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read offer catalog {self.path}: {e}")
            raise OfferDataUnavailableError(f"Offer catalog {self.path} could not be read", source=str(self.path)) from e

        try:
            jsonschema.validate(instance=data, schema=self._schema or load_catalog_schema())
        except jsonschema.ValidationError as e:
            logger.error(f"Offer catalog {self.path} failed schema validation: {e.message}")
            raise OfferDataUnavailableError(
                f"Offer catalog {self.path} is invalid: {e.message}", source=str(self.path)
            ) from e

        offers = [offer_from_record(record) for record in data.get("offers", [])]
        products = [product_from_record(record) for record in data.get("products", [])]
        self._redemptions = data.get("redemptions", {})
        logger.info(f"Loaded {len(offers)} offers and {len(products)} products from {self.path}")
        return InMemoryOfferCatalog(offers=offers, products=products)

    def get_products(self, product_ids: Iterable[str]) -> dict[str, Product]:
        return self._load().get_products(product_ids)

    def fetch_scoped_offers(
        self,
        product_ids: Iterable[str],
        categories: Iterable[str],
        collections: Iterable[str],
    ) -> list[Offer]:
        return self._load().fetch_scoped_offers(product_ids, categories, collections)

    def list_offers(self) -> list[Offer]:
        return self._load().list_offers()

    def get_offer(self, offer_id: str) -> Offer | None:
        return self._load().get_offer(offer_id)

    def close(self) -> None:
        # Snapshot stays loaded for other holders of this instance
        pass

    def get_redemption_counts(
        self, offer_ids: Iterable[str], user_id: Optional[str] = None
    ) -> dict[str, RedemptionCount]:
        self._load()
        return {
            offer_id: redemption_counts_from_record(self._redemptions[offer_id], user_id)
            for offer_id in offer_ids
            if offer_id in self._redemptions
        }
