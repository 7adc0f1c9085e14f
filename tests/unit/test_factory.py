"""Unit tests for adapter and service factories."""

import pytest

from offer_runtime.adapters.catalog.file_offer_catalog import FileOfferCatalog
from offer_runtime.adapters.catalog.in_memory_offer_catalog import InMemoryOfferCatalog
from offer_runtime.adapters.databricks.offer_catalog_repo import DatabricksOfferCatalog
from offer_runtime.adapters.ledger.noop_redemption_ledger import NoopRedemptionLedger
from offer_runtime.app.factory import create_adapters, create_engine_config, create_offers_service
from offer_runtime.settings import Settings


def test_create_engine_config_from_settings():
    config = create_engine_config(Settings(free_item_grant_policy="ONCE_PER_ORDER", money_decimal_places=3))

    assert config.free_item_grant_policy == "ONCE_PER_ORDER"
    assert config.money_decimal_places == 3


def test_create_engine_config_rejects_unknown_policy():
    with pytest.raises(ValueError, match="FREE_ITEM_GRANT_POLICY"):
        create_engine_config(Settings(free_item_grant_policy="SOMETIMES"))


def test_create_adapters_memory_default():
    catalog, ledger = create_adapters(settings=Settings())

    assert isinstance(catalog, InMemoryOfferCatalog)
    assert isinstance(ledger, NoopRedemptionLedger)


def test_create_adapters_file_serves_catalog_and_ledger():
    catalog, ledger = create_adapters(
        settings=Settings(offer_catalog_adapter="file", offer_catalog_path="catalogs/sample_catalog.json")
    )

    assert isinstance(catalog, FileOfferCatalog)
    assert ledger is catalog


def test_create_adapters_file_reuses_catalog_per_path(tmp_path):
    path = tmp_path / "catalog.json"
    path.write_text('{"products": [], "offers": []}', encoding="utf-8")
    settings = Settings(offer_catalog_adapter="file", offer_catalog_path=str(path))

    first, _ = create_adapters(settings=settings)
    second, _ = create_adapters(settings=settings)

    assert first is second


def test_create_adapters_file_requires_path():
    with pytest.raises(ValueError, match="OFFER_CATALOG_PATH"):
        create_adapters(settings=Settings(offer_catalog_adapter="file"))


def test_create_adapters_databricks_requires_connection_settings():
    with pytest.raises(ValueError, match="DATABRICKS_ACCESS_TOKEN"):
        create_adapters(
            settings=Settings(
                offer_catalog_adapter="databricks",
                databricks_server_hostname="host",
                databricks_http_path="/sql",
            )
        )


def test_create_adapters_databricks():
    settings = Settings(
        offer_catalog_adapter="databricks",
        databricks_server_hostname="host",
        databricks_http_path="/sql",
        databricks_access_token="token",
    )

    catalog, ledger = create_adapters(correlation_id="c1", settings=settings)

    assert isinstance(catalog, DatabricksOfferCatalog)
    assert catalog.client.correlation_id.value == "c1"
    assert catalog.client.max_retries == 3
    assert isinstance(ledger, NoopRedemptionLedger)


def test_create_offers_service():
    service = create_offers_service(settings=Settings())

    assert isinstance(service.catalog, InMemoryOfferCatalog)
    assert service.config.free_item_grant_policy == "PER_THRESHOLD"
