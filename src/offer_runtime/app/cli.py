from __future__ import annotations

import argparse
import json
import sys
from dataclasses import replace
from typing import Optional

from pydantic import ValidationError

from offer_runtime.app.api.models.offers import CartCalculationResponse, CartItemModel
from offer_runtime.app.factory import create_offers_service
from offer_runtime.application.calculation_context import CalculationContext
from offer_runtime.application.errors import (
    CartValidationError,
    OfferDataUnavailableError,
    OfferValidationError,
)
from offer_runtime.domain.common.clock import parse_datetime
from offer_runtime.observability.logging import configure_logging
from offer_runtime.settings import get_settings


def load_cart(path: str) -> list[CartItemModel]:
    """Read a cart file: either a list of items or {"cartItems": [...]}."""
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    items = data.get("cartItems", []) if isinstance(data, dict) else data
    if not isinstance(items, list):
        raise ValueError('cart file must hold a list of items or {"cartItems": [...]}')
    return [CartItemModel.model_validate(item) for item in items]


def main(argv: Optional[list[str]] = None) -> int:
    configure_logging(stream=sys.stderr)
    parser = argparse.ArgumentParser(description="Offer Runtime CLI")
    subparsers = parser.add_subparsers(dest="command")

    calc_parser = subparsers.add_parser("calculate", help="Price a cart against the offer catalog")
    calc_parser.add_argument("--cart", required=True, help="Path to cart JSON")
    calc_parser.add_argument("--catalog", help="Path to offer catalog JSON (overrides OFFER_CATALOG_PATH)")
    calc_parser.add_argument("--as-of", dest="as_of_ts", type=parse_datetime, help="ISO timestamp, defaults to now")
    calc_parser.add_argument("--user", dest="user_id")
    calc_parser.add_argument("--correlation-id", dest="correlation_id")

    args = parser.parse_args(argv)
    if args.command != "calculate":
        parser.print_help()
        return 1

    settings = get_settings()
    if args.catalog:
        settings = replace(settings, offer_catalog_adapter="file", offer_catalog_path=args.catalog)

    ctx = CalculationContext.from_args(
        as_of_ts=args.as_of_ts,
        user_id=args.user_id,
        correlation_id=args.correlation_id,
    )
    try:
        cart_items = [item.to_domain() for item in load_cart(args.cart)]
    except ValidationError as e:
        print(json.dumps({"error": "Invalid cart file", "issues": [err["msg"] for err in e.errors()]}), file=sys.stderr)
        return 2
    except (OSError, ValueError) as e:
        # JSONDecodeError is a ValueError
        print(json.dumps({"error": "Invalid cart file", "issues": [str(e)]}), file=sys.stderr)
        return 2

    service = create_offers_service(correlation_id=args.correlation_id, settings=settings)
    try:
        result = service.calculate_cart(cart_items, ctx)
    except (CartValidationError, OfferValidationError) as e:
        print(json.dumps({"error": str(e), "issues": e.issues}), file=sys.stderr)
        return 2
    except OfferDataUnavailableError as e:
        print(json.dumps({"error": str(e)}), file=sys.stderr)
        return 3
    finally:
        service.close()

    print(CartCalculationResponse.from_domain(result).model_dump_json(by_alias=True, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
