from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from offer_runtime.ports.offer_catalog import OfferCatalog
    from offer_runtime.ports.redemption_ledger import RedemptionLedger

from offer_runtime.adapters.catalog.file_offer_catalog import FileOfferCatalog
from offer_runtime.adapters.catalog.in_memory_offer_catalog import InMemoryOfferCatalog
from offer_runtime.adapters.databricks.client import DatabricksSqlClient
from offer_runtime.adapters.databricks.offer_catalog_repo import DatabricksOfferCatalog
from offer_runtime.adapters.ledger.noop_redemption_ledger import NoopRedemptionLedger
from offer_runtime.application.offer_service import OffersService
from offer_runtime.domain.common.ids import CorrelationId
from offer_runtime.domain.offers import rules
from offer_runtime.domain.offers.config import OfferEngineConfig
from offer_runtime.settings import Settings, get_settings

# One FileOfferCatalog per path so the JSON is read and validated once per process
_file_catalogs: dict[str, FileOfferCatalog] = {}


def create_engine_config(settings: Settings | None = None) -> OfferEngineConfig:
    settings = settings or get_settings()
    if settings.free_item_grant_policy not in rules.GRANT_POLICIES:
        raise ValueError(
            f"Unknown FREE_ITEM_GRANT_POLICY {settings.free_item_grant_policy!r}; "
            f"expected one of {', '.join(rules.GRANT_POLICIES)}"
        )
    return OfferEngineConfig(
        free_item_grant_policy=settings.free_item_grant_policy,
        money_decimal_places=settings.money_decimal_places,
    )


def create_adapters(
    correlation_id: str | None = None,
    settings: Settings | None = None,
) -> tuple["OfferCatalog", "RedemptionLedger"]:
    """
    Factory function to create the catalog and ledger adapters from OFFER_CATALOG_ADAPTER.

    - "databricks": reads offer tables from a Databricks SQL warehouse
    - "file": reads a JSON catalog from OFFER_CATALOG_PATH (also supplies redemption counters)
    - anything else: an empty in-memory catalog
    """
    settings = settings or get_settings()
    adapter = settings.offer_catalog_adapter
    ledger: RedemptionLedger = NoopRedemptionLedger()

    if adapter == "databricks":
        required_settings = [
            ("DATABRICKS_SERVER_HOSTNAME", settings.databricks_server_hostname),
            ("DATABRICKS_HTTP_PATH", settings.databricks_http_path),
            ("DATABRICKS_ACCESS_TOKEN", settings.databricks_access_token),
        ]
        missing = [name for name, value in required_settings if not value]
        if missing:
            raise ValueError(f"Missing required Databricks settings: {', '.join(missing)}")

        correlation_id_obj = CorrelationId(correlation_id) if correlation_id else None
        client = DatabricksSqlClient(
            settings,
            correlation_id_obj,
            max_retries=settings.databricks_max_retries,
            initial_delay=settings.databricks_retry_delay_seconds,
        )
        catalog: OfferCatalog = DatabricksOfferCatalog(client, settings)

    elif adapter == "file":
        if not settings.offer_catalog_path:
            raise ValueError("OFFER_CATALOG_PATH is required when OFFER_CATALOG_ADAPTER=file")
        file_catalog = _file_catalogs.get(settings.offer_catalog_path)
        if file_catalog is None:
            file_catalog = _file_catalogs.setdefault(
                settings.offer_catalog_path, FileOfferCatalog(settings.offer_catalog_path)
            )
        catalog = file_catalog
        ledger = file_catalog

    else:
        catalog = InMemoryOfferCatalog()

    return catalog, ledger


def create_offers_service(
    correlation_id: str | None = None,
    settings: Settings | None = None,
) -> OffersService:
    settings = settings or get_settings()
    catalog, ledger = create_adapters(correlation_id=correlation_id, settings=settings)
    return OffersService(catalog=catalog, ledger=ledger, config=create_engine_config(settings))
