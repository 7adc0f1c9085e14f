"""Unit tests for the per-offer discount calculator."""

from offer_runtime.domain.eligibility import match_offer
from offer_runtime.domain.offers.calculator import calculate_offer_discount, free_item_multiples, round_money
from offer_runtime.domain.offers.config import OfferEngineConfig
from offer_runtime.domain.offers.models import (
    AmountOff,
    CartItem,
    FreeItem,
    FreeItemGrant,
    Offer,
    OfferScope,
    OfferType,
    PercentOff,
    Product,
)

PRODUCTS = {
    "cereal": Product(product_id="cereal", category="Grocery"),
    "oats": Product(product_id="oats", category="Grocery"),
    "spoon": Product(product_id="spoon", category="Homeware"),
}

CONFIG = OfferEngineConfig()


def _offer(reward, **kwargs) -> Offer:
    defaults = dict(
        offer_id="o1",
        name="Grocery deal",
        reward=reward,
        scope=OfferScope.new(categories=["Grocery"]),
    )
    defaults.update(kwargs)
    return Offer(**defaults)


def test_round_money_half_up():
    assert round_money(0.125) == 0.13
    assert round_money(2.675) == 2.68
    assert round_money(1.005) == 1.01
    assert round_money(10) == 10.0


def test_percent_off_uses_matched_subtotal():
    """Test that PERCENT_OFF applies only to in-scope lines."""
    cart = [CartItem("cereal", 5, 10.0), CartItem("spoon", 2, 3.0)]
    match = match_offer(_offer(PercentOff(percent_off=20)), cart, PRODUCTS)

    calculation = calculate_offer_discount(match, CONFIG)

    assert calculation.type == OfferType.PERCENT_OFF
    assert calculation.discount == 10.0
    assert calculation.free_items == []


def test_percent_off_rounds_to_two_places():
    cart = [CartItem("cereal", 1, 3.33)]
    match = match_offer(_offer(PercentOff(percent_off=15)), cart, PRODUCTS)

    assert calculate_offer_discount(match, CONFIG).discount == 0.5


def test_amount_off_capped_at_matched_subtotal():
    cart = [CartItem("cereal", 1, 4.0), CartItem("spoon", 10, 3.0)]
    match = match_offer(_offer(AmountOff(amount_off=10)), cart, PRODUCTS)

    calculation = calculate_offer_discount(match, CONFIG)

    assert calculation.type == OfferType.AMOUNT_OFF
    assert calculation.discount == 4.0


def test_amount_off_full_amount():
    cart = [CartItem("cereal", 5, 4.0)]
    match = match_offer(_offer(AmountOff(amount_off=5)), cart, PRODUCTS)

    assert calculate_offer_discount(match, CONFIG).discount == 5.0


def test_free_item_per_threshold_pools_matching_lines():
    """Test that PER_THRESHOLD grants once per full min_quantity across matching lines."""
    offer = _offer(FreeItem(product_id="spoon", quantity=2), min_quantity=3)
    cart = [CartItem("cereal", 4, 4.0), CartItem("oats", 3, 2.0)]
    match = match_offer(offer, cart, PRODUCTS)

    calculation = calculate_offer_discount(match, CONFIG)

    assert calculation.type == OfferType.FREE_ITEM
    assert calculation.discount == 0.0
    assert calculation.free_items == [FreeItemGrant(product_id="spoon", quantity=4)]


def test_free_item_once_per_order():
    offer = _offer(FreeItem(product_id="spoon"), min_quantity=3)
    cart = [CartItem("cereal", 9, 4.0)]
    match = match_offer(offer, cart, PRODUCTS)

    calculation = calculate_offer_discount(match, OfferEngineConfig(free_item_grant_policy="ONCE_PER_ORDER"))

    assert calculation.free_items == [FreeItemGrant(product_id="spoon", quantity=1)]


def test_free_item_multiples_without_min_quantity():
    match = match_offer(_offer(FreeItem(product_id="spoon")), [CartItem("cereal", 7, 1.0)], PRODUCTS)

    assert free_item_multiples(match, "PER_THRESHOLD") == 1


def test_free_item_multiples_any_qty_below_threshold():
    offer = _offer(FreeItem(product_id="spoon"), min_quantity=5, applies_to_any_qty=True)
    match = match_offer(offer, [CartItem("cereal", 2, 1.0)], PRODUCTS)

    assert free_item_multiples(match, "PER_THRESHOLD") == 1


def test_free_item_multiples_no_matching_items():
    offer = _offer(FreeItem(product_id="spoon"))
    match = match_offer(offer, [CartItem("spoon", 2, 1.0)], PRODUCTS)

    assert free_item_multiples(match, "PER_THRESHOLD") == 0
    assert free_item_multiples(match, "ONCE_PER_ORDER") == 0
