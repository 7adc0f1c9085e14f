"""Unit tests for DatabricksOfferCatalog SQL builders and row mapping."""

from unittest.mock import Mock

import pytest

from offer_runtime.adapters.databricks.client import DatabricksSqlClient
from offer_runtime.adapters.databricks.offer_catalog_repo import DatabricksOfferCatalog
from offer_runtime.domain.offers.models import PercentOff
from offer_runtime.settings import Settings

OFFER_ROW = {
    "id": "o1",
    "name": "10% off dairy",
    "description": None,
    "type": "PERCENT_OFF",
    "percent_off": 10,
    "amount_off": None,
    "free_item_product_id": None,
    "free_item_qty": None,
    "starts_at": None,
    "ends_at": None,
    "min_quantity": 2,
    "min_order_amount": None,
    "applies_to_any_qty": False,
    "max_per_user": None,
    "max_total_redemptions": None,
    "priority": 3,
    "is_stackable": True,
    "is_active": True,
}


def test_build_table_name_with_catalog_schema_and_prefix():
    settings = Settings(databricks_catalog="main", databricks_schema="marketplace", databricks_table_prefix="mkt_")
    repo = DatabricksOfferCatalog(Mock(spec=DatabricksSqlClient), settings)

    assert repo._build_table_name("offer") == "main.marketplace.mkt_offer"


def test_build_table_name_without_catalog():
    repo = DatabricksOfferCatalog(Mock(spec=DatabricksSqlClient), Settings())

    assert repo._build_table_name("product") == "product"


def test_get_products_sql_builder():
    """Test that get_products queries the product table with one placeholder per id."""
    mock_client = Mock(spec=DatabricksSqlClient)
    mock_client.query.return_value = [{"id": "p1", "category": "Dairy", "collection": None}]
    repo = DatabricksOfferCatalog(mock_client, Settings())

    products = repo.get_products(["p2", "p1", "p1"])

    sql = mock_client.query.call_args[0][0]
    params = mock_client.query.call_args[1]["params"]
    assert "from product" in sql.lower()
    assert "idin(?,?)" in sql.lower().replace(" ", "")
    assert params == ["p1", "p2"]
    assert products["p1"].category == "Dairy"
    assert products["p1"].collection is None


def test_get_products_empty_ids_skips_query():
    mock_client = Mock(spec=DatabricksSqlClient)
    repo = DatabricksOfferCatalog(mock_client, Settings())

    assert repo.get_products([]) == {}
    assert not mock_client.query.called


def test_fetch_scoped_offers_unions_scope_tables():
    mock_client = Mock(spec=DatabricksSqlClient)
    mock_client.query.side_effect = [
        [{"offer_id": "o1"}],
        [OFFER_ROW],
        [
            {"offer_id": "o1", "scope_kind": "category", "scope_value": "Dairy"},
            {"offer_id": "o1", "scope_kind": "product", "scope_value": "p9"},
        ],
    ]
    repo = DatabricksOfferCatalog(mock_client, Settings())

    offers = repo.fetch_scoped_offers(["p1"], ["Dairy"], [])

    scoped_sql = mock_client.query.call_args_list[0][0][0]
    scoped_params = mock_client.query.call_args_list[0][1]["params"]
    assert "select distinct offer_id" in scoped_sql.lower()
    assert "offer_scope_product" in scoped_sql
    assert "offer_scope_category" in scoped_sql
    assert "offer_scope_collection" not in scoped_sql
    assert "union all" in scoped_sql.lower()
    assert scoped_params == ["p1", "Dairy"]

    offer_sql = mock_client.query.call_args_list[1][0][0]
    assert "order by priority desc, id" in offer_sql.lower()
    assert mock_client.query.call_args_list[1][1]["params"] == ["o1"]

    assert len(offers) == 1
    offer = offers[0]
    assert offer.offer_id == "o1"
    assert offer.reward == PercentOff(percent_off=10.0)
    assert offer.min_quantity == 2
    assert offer.priority == 3
    assert offer.scope.categories == frozenset({"Dairy"})
    assert offer.scope.product_ids == frozenset({"p9"})


def test_fetch_scoped_offers_without_context_skips_query():
    mock_client = Mock(spec=DatabricksSqlClient)
    repo = DatabricksOfferCatalog(mock_client, Settings())

    assert repo.fetch_scoped_offers([], [], []) == []
    assert not mock_client.query.called


def test_fetch_scoped_offers_no_matching_ids():
    mock_client = Mock(spec=DatabricksSqlClient)
    mock_client.query.return_value = []
    repo = DatabricksOfferCatalog(mock_client, Settings())

    assert repo.fetch_scoped_offers(["p1"], [], []) == []
    assert mock_client.query.call_count == 1


def test_list_offers_reads_whole_table():
    mock_client = Mock(spec=DatabricksSqlClient)
    mock_client.query.side_effect = [[OFFER_ROW], []]
    repo = DatabricksOfferCatalog(mock_client, Settings())

    offers = repo.list_offers()

    offer_sql = mock_client.query.call_args_list[0][0][0]
    assert "where" not in offer_sql.lower()
    assert mock_client.query.call_args_list[0][1]["params"] is None
    assert [o.offer_id for o in offers] == ["o1"]
    assert offers[0].scope.is_empty()


def test_get_offer_not_found():
    mock_client = Mock(spec=DatabricksSqlClient)
    mock_client.query.side_effect = [[], []]
    repo = DatabricksOfferCatalog(mock_client, Settings())

    assert repo.get_offer("missing") is None


def test_query_errors_propagate():
    mock_client = Mock(spec=DatabricksSqlClient)
    mock_client.query.side_effect = RuntimeError("warehouse down")
    repo = DatabricksOfferCatalog(mock_client, Settings())

    with pytest.raises(RuntimeError, match="warehouse down"):
        repo.get_products(["p1"])


def test_close_releases_client_connection():
    mock_client = Mock(spec=DatabricksSqlClient)
    repo = DatabricksOfferCatalog(mock_client, Settings())

    repo.close()

    mock_client.close.assert_called_once()
