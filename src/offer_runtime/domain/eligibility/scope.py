from __future__ import annotations

from offer_runtime.domain.eligibility.models import OfferMatch
from offer_runtime.domain.offers import rules
from offer_runtime.domain.offers.models import CartItem, Offer, Product


def item_specificity(offer: Offer, item: CartItem, product: Product | None) -> int:
    """
    Return how specifically an offer's scope covers one cart line.

    A product-id match beats a collection match, which beats a category match.
    Returns SPECIFICITY_NONE when the line is out of scope or the product is unknown.
    """
    if product is None:
        return rules.SPECIFICITY_NONE
    if item.product_id in offer.scope.product_ids:
        return rules.SPECIFICITY_PRODUCT
    if product.collection and product.collection in offer.scope.collections:
        return rules.SPECIFICITY_COLLECTION
    if product.category and product.category in offer.scope.categories:
        return rules.SPECIFICITY_CATEGORY
    return rules.SPECIFICITY_NONE


def match_offer(offer: Offer, cart_items: list[CartItem], products: dict[str, Product]) -> OfferMatch:
    """
    Collect the cart lines an offer applies to.

    Args:
        offer: Offer whose scope is checked
        cart_items: Cart lines in submission order
        products: Product scope data keyed by product id

    Returns:
        OfferMatch with matching lines (order preserved) and the highest specificity seen
    """
    if offer.scope.is_empty():
        return OfferMatch(offer=offer, items=[], specificity=rules.SPECIFICITY_NONE)

    matched: list[CartItem] = []
    specificity = rules.SPECIFICITY_NONE
    for item in cart_items:
        item_level = item_specificity(offer, item, products.get(item.product_id))
        if item_level > rules.SPECIFICITY_NONE:
            matched.append(item)
            specificity = max(specificity, item_level)
    return OfferMatch(offer=offer, items=matched, specificity=specificity)


def offer_matches_context(
    offer: Offer,
    product_ids: set[str],
    categories: set[str],
    collections: set[str],
) -> bool:
    """Check whether an offer's scope touches any of the given ids/categories/collections."""
    return bool(
        offer.scope.product_ids & product_ids
        or offer.scope.categories & categories
        or offer.scope.collections & collections
    )
