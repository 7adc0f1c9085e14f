from __future__ import annotations

import math

from offer_runtime.application.errors import CartValidationError, OfferValidationError
from offer_runtime.domain.common.clock import ensure_utc
from offer_runtime.domain.offers import rules
from offer_runtime.domain.offers.models import AmountOff, CartItem, FreeItem, Offer, PercentOff, Product


def _is_finite_number(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def cart_issues(cart_items: list[CartItem], products: dict[str, Product]) -> list[str]:
    """
    Collect every problem with a cart so the caller can fix them in one pass.

    Args:
        cart_items: Submitted cart lines
        products: Product scope data keyed by product id

    Returns:
        List of human readable issues, empty when the cart is valid
    """
    issues: list[str] = []
    if not cart_items:
        issues.append("cart must contain at least one item")

    cart_total = 0.0
    for index, item in enumerate(cart_items):
        label = f"cartItems[{index}]"
        if not item.product_id:
            issues.append(f"{label}: productId is required")
        elif item.product_id not in products:
            issues.append(f"{label}: unknown productId {item.product_id}")
        quantity_ok = isinstance(item.quantity, int) and not isinstance(item.quantity, bool) and item.quantity >= 1
        if not quantity_ok:
            issues.append(f"{label}: quantity must be an integer >= 1")
        price_ok = _is_finite_number(item.unit_price) and item.unit_price >= 0
        if not price_ok:
            issues.append(f"{label}: unitPrice must be a finite number >= 0")
        if quantity_ok and price_ok:
            line_total = item.quantity * item.unit_price if item.quantity <= rules.MAX_CART_AMOUNT else math.inf
            if line_total > rules.MAX_CART_AMOUNT:
                issues.append(f"{label}: line total must not exceed {rules.MAX_CART_AMOUNT}")
            else:
                cart_total += line_total

    if cart_total > rules.MAX_CART_AMOUNT:
        issues.append(f"cart total must not exceed {rules.MAX_CART_AMOUNT}")
    return issues


def offer_issues(offer: Offer) -> list[str]:
    """Check type-specific reward fields and eligibility bounds of one offer."""
    issues: list[str] = []
    label = f"offer {offer.offer_id}"
    if not offer.offer_id:
        issues.append("offer id is required")

    reward = offer.reward
    if isinstance(reward, PercentOff):
        if not _is_finite_number(reward.percent_off) or not 0 < reward.percent_off <= 100:
            issues.append(f"{label}: percentOff must be > 0 and <= 100 for PERCENT_OFF offers")
    elif isinstance(reward, AmountOff):
        if not _is_finite_number(reward.amount_off) or reward.amount_off <= 0:
            issues.append(f"{label}: amountOff must be > 0 for AMOUNT_OFF offers")
    elif isinstance(reward, FreeItem):
        if not reward.product_id:
            issues.append(f"{label}: freeItemProductId is required for FREE_ITEM offers")
        if reward.quantity < 1:
            issues.append(f"{label}: freeItemQty must be >= 1")
    else:
        issues.append(f"{label}: unsupported reward {type(reward).__name__}")

    if offer.min_quantity < 0:
        issues.append(f"{label}: minQuantity must be >= 0")
    if offer.min_order_amount is not None and offer.min_order_amount < 0:
        issues.append(f"{label}: minOrderAmount must be >= 0")
    if offer.max_per_user is not None and offer.max_per_user < 1:
        issues.append(f"{label}: maxPerUser must be >= 1")
    if offer.max_total_redemptions is not None and offer.max_total_redemptions < 1:
        issues.append(f"{label}: maxTotalRedemptions must be >= 1")
    if offer.starts_at and offer.ends_at and ensure_utc(offer.starts_at) > ensure_utc(offer.ends_at):
        issues.append(f"{label}: startsAt must not be after endsAt")
    return issues


def validate_cart(cart_items: list[CartItem], products: dict[str, Product]) -> None:
    issues = cart_issues(cart_items, products)
    if issues:
        raise CartValidationError("Invalid cart", issues=issues)


def validate_offers(offers: list[Offer]) -> None:
    issues: list[str] = []
    seen: set[str] = set()
    for offer in offers:
        if offer.offer_id in seen:
            issues.append(f"duplicate offer id {offer.offer_id}")
        seen.add(offer.offer_id)
        issues.extend(offer_issues(offer))
    if issues:
        raise OfferValidationError("Invalid offer snapshot", issues=issues)
