from __future__ import annotations

import logging
from typing import Any, Iterable

from offer_runtime.adapters.catalog.records import offer_from_record, product_from_record
from offer_runtime.adapters.databricks.client import DatabricksSqlClient
from offer_runtime.domain.offers.models import Offer, Product
from offer_runtime.ports.offer_catalog import OfferCatalog
from offer_runtime.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# Offer table column -> catalog record field
_OFFER_COLUMNS = {
    "id": "id",
    "name": "name",
    "description": "description",
    "type": "type",
    "percent_off": "percentOff",
    "amount_off": "amountOff",
    "free_item_product_id": "freeItemProductId",
    "free_item_qty": "freeItemQty",
    "starts_at": "startsAt",
    "ends_at": "endsAt",
    "min_quantity": "minQuantity",
    "min_order_amount": "minOrderAmount",
    "applies_to_any_qty": "appliesToAnyQty",
    "max_per_user": "maxPerUser",
    "max_total_redemptions": "maxTotalRedemptions",
    "priority": "priority",
    "is_stackable": "isStackable",
    "is_active": "isActive",
}

# Scope kind -> (table suffix, value column, record key)
_SCOPE_TABLES = {
    "product": ("offer_scope_product", "product_id", "products"),
    "category": ("offer_scope_category", "category", "categories"),
    "collection": ("offer_scope_collection", "collection", "collections"),
}


def _placeholders(values: list[Any]) -> str:
    return ",".join(["?"] * len(values))


class DatabricksOfferCatalog(OfferCatalog):
    """Offer catalog that reads the admin subsystem's offer tables from Databricks."""

    def __init__(self, client: DatabricksSqlClient, settings: Settings | None = None) -> None:
        self.client = client
        self.settings = settings or get_settings()

    def _build_table_name(self, table_suffix: str) -> str:
        """Build fully qualified table name with catalog and schema if specified."""
        parts = []
        if self.settings.databricks_catalog:
            parts.append(self.settings.databricks_catalog)
        if self.settings.databricks_schema:
            parts.append(self.settings.databricks_schema)
        parts.append(f"{self.settings.databricks_table_prefix}{table_suffix}")
        return ".".join(parts)

    def get_products(self, product_ids: Iterable[str]) -> dict[str, Product]:
        ids = sorted(set(product_ids))
        if not ids:
            return {}

        table_name = self._build_table_name("product")
        sql = f"""
        SELECT id, category, collection
        FROM {table_name}
        WHERE id IN ({_placeholders(ids)})
        """
        try:
            rows = self.client.query(sql, params=ids)
        except Exception as e:
            logger.error(f"Error fetching products from {table_name}: {e}")
            raise

        products = [product_from_record(row) for row in rows]
        return {p.product_id: p for p in products}

    def fetch_scoped_offers(
        self,
        product_ids: Iterable[str],
        categories: Iterable[str],
        collections: Iterable[str],
    ) -> list[Offer]:
        """
        Fetch every offer whose scope touches the given products, categories or collections.

        Active flag and time window are not filtered here; the eligibility policy
        reports those as exclusions.
        """
        wanted = {
            "product": sorted(set(product_ids)),
            "category": sorted(set(categories)),
            "collection": sorted(set(collections)),
        }
        branches: list[str] = []
        params: list[Any] = []
        for kind, values in wanted.items():
            if not values:
                continue
            table_suffix, value_column, _ = _SCOPE_TABLES[kind]
            branches.append(
                f"SELECT offer_id FROM {self._build_table_name(table_suffix)} "
                f"WHERE {value_column} IN ({_placeholders(values)})"
            )
            params.extend(values)

        if not branches:
            return []

        sql = "SELECT DISTINCT offer_id FROM (\n" + "\nUNION ALL\n".join(branches) + "\n) scoped"
        try:
            rows = self.client.query(sql, params=params)
        except Exception as e:
            logger.error(f"Error fetching scoped offer ids: {e}")
            raise

        offer_ids = sorted({str(row["offer_id"]) for row in rows if row.get("offer_id")})
        if not offer_ids:
            return []
        return self._load_offers(offer_ids)

    def list_offers(self) -> list[Offer]:
        return self._load_offers(None)

    def close(self) -> None:
        self.client.close()

    def get_offer(self, offer_id: str) -> Offer | None:
        offers = self._load_offers([offer_id])
        return offers[0] if offers else None

    def _load_offers(self, offer_ids: list[str] | None) -> list[Offer]:
        offer_table = self._build_table_name("offer")
        columns = ", ".join(_OFFER_COLUMNS)
        where = f"WHERE id IN ({_placeholders(offer_ids)})" if offer_ids else ""
        offer_sql = f"""
        SELECT {columns}
        FROM {offer_table}
        {where}
        ORDER BY priority DESC, id
        """
        try:
            offer_rows = self.client.query(offer_sql, params=offer_ids or None)
            scopes = self._load_scopes(offer_ids)
        except Exception as e:
            logger.error(f"Error fetching offers from {offer_table}: {e}")
            raise

        offers: list[Offer] = []
        for row in offer_rows:
            record = {field: row.get(column) for column, field in _OFFER_COLUMNS.items()}
            record["scopes"] = scopes.get(str(row.get("id")), {})
            offers.append(offer_from_record(record))

        logger.info(f"Fetched {len(offers)} offers from {offer_table}")
        return offers

    def _load_scopes(self, offer_ids: list[str] | None) -> dict[str, dict[str, list[str]]]:
        branches: list[str] = []
        params: list[Any] = []
        for kind, (table_suffix, value_column, _) in _SCOPE_TABLES.items():
            branch = (
                f"SELECT offer_id, '{kind}' AS scope_kind, {value_column} AS scope_value "
                f"FROM {self._build_table_name(table_suffix)}"
            )
            if offer_ids:
                branch += f" WHERE offer_id IN ({_placeholders(offer_ids)})"
                params.extend(offer_ids)
            branches.append(branch)

        rows = self.client.query("\nUNION ALL\n".join(branches), params=params or None)

        scopes: dict[str, dict[str, list[str]]] = {}
        for row in rows:
            kind = row.get("scope_kind")
            value = row.get("scope_value")
            if kind not in _SCOPE_TABLES or value is None:
                continue
            record_key = _SCOPE_TABLES[kind][2]
            offer_scopes = scopes.setdefault(str(row["offer_id"]), {})
            offer_scopes.setdefault(record_key, []).append(str(value))
        return scopes
