"""
Conversion of offer catalog records into domain objects.

Records use the admin subsystem's camelCase field names:

    {
        "id": "offer-1",
        "name": "10% off dairy",
        "type": "PERCENT_OFF",
        "percentOff": 10,
        "minQuantity": 5,
        "priority": 2,
        "isStackable": true,
        "scopes": {"products": [], "categories": ["Dairy"], "collections": []}
    }
"""

from __future__ import annotations

from typing import Any

from offer_runtime.application.errors import OfferValidationError
from offer_runtime.domain.common.clock import parse_datetime
from offer_runtime.domain.common.ids import OfferId, ProductId
from offer_runtime.domain.offers.models import (
    AmountOff,
    FreeItem,
    Offer,
    OfferScope,
    OfferType,
    PercentOff,
    Product,
    RedemptionCount,
    Reward,
)
from offer_runtime.domain.offers.validation import offer_issues


def _optional_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    return float(value)


def _optional_int(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return int(value)


def _optional_bool(value: Any, default: bool) -> bool:
    if value is None:
        return default
    return bool(value)


def _build_reward(offer_type: OfferType, record: dict[str, Any]) -> Reward:
    if offer_type is OfferType.PERCENT_OFF:
        return PercentOff(percent_off=_optional_float(record.get("percentOff")) or 0.0)
    if offer_type is OfferType.AMOUNT_OFF:
        return AmountOff(amount_off=_optional_float(record.get("amountOff")) or 0.0)
    free_qty = _optional_int(record.get("freeItemQty"))
    return FreeItem(
        product_id=ProductId(str(record.get("freeItemProductId") or "")),
        quantity=1 if free_qty is None else free_qty,
    )


def offer_from_record(record: dict[str, Any]) -> Offer:
    """
    Build an Offer from a catalog record.

    Only the field selected by `type` is read for the reward, so stray values in the
    other type-specific fields are ignored.

    Raises:
        OfferValidationError: If the type is unknown, a field cannot be parsed,
            or the type-specific fields are invalid
    """
    offer_id = str(record.get("id") or "")
    try:
        offer_type = OfferType(record.get("type"))
    except ValueError:
        raise OfferValidationError(
            f"Invalid offer {offer_id}", issues=[f"offer {offer_id}: unknown type {record.get('type')!r}"]
        )

    scopes = record.get("scopes") or {}
    try:
        offer = Offer(
            offer_id=OfferId(offer_id),
            name=str(record.get("name") or ""),
            description=record.get("description"),
            reward=_build_reward(offer_type, record),
            scope=OfferScope.new(
                product_ids=[str(p) for p in scopes.get("products") or []],
                categories=[str(c) for c in scopes.get("categories") or []],
                collections=[str(c) for c in scopes.get("collections") or []],
            ),
            starts_at=parse_datetime(record.get("startsAt")),
            ends_at=parse_datetime(record.get("endsAt")),
            min_quantity=_optional_int(record.get("minQuantity")) or 0,
            min_order_amount=_optional_float(record.get("minOrderAmount")),
            applies_to_any_qty=_optional_bool(record.get("appliesToAnyQty"), False),
            max_per_user=_optional_int(record.get("maxPerUser")),
            max_total_redemptions=_optional_int(record.get("maxTotalRedemptions")),
            priority=_optional_int(record.get("priority")) or 0,
            is_stackable=_optional_bool(record.get("isStackable"), False),
            is_active=_optional_bool(record.get("isActive"), True),
        )
    except (TypeError, ValueError) as e:
        raise OfferValidationError(f"Invalid offer {offer_id}", issues=[f"offer {offer_id}: {e}"])

    issues = offer_issues(offer)
    if issues:
        raise OfferValidationError(f"Invalid offer {offer_id}", issues=issues)
    return offer


def product_from_record(record: dict[str, Any]) -> Product:
    product_id = record.get("id")
    if not product_id:
        raise OfferValidationError("Invalid product", issues=["product id is required"])
    return Product(
        product_id=ProductId(str(product_id)),
        category=record.get("category") or None,
        collection=record.get("collection") or None,
    )


def redemption_counts_from_record(record: dict[str, Any], user_id: str | None) -> RedemptionCount:
    """
    Build a RedemptionCount from {"total": int, "byUser": {user_id: int}}.
    """
    by_user = record.get("byUser") or {}
    return RedemptionCount(
        user_redemptions=int(by_user.get(user_id, 0)) if user_id else 0,
        total_redemptions=int(record.get("total", 0)),
    )
