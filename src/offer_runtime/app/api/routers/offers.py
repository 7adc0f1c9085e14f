"""Router for offer lookup and cart calculation endpoints."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Iterator

from fastapi import APIRouter, Depends, HTTPException, Query

from offer_runtime.app.api.models.offers import (
    CalculateCartRequest,
    CartCalculationResponse,
    OfferListResponse,
    OfferModel,
    Pagination,
)
from offer_runtime.app.factory import create_offers_service
from offer_runtime.application.calculation_context import CalculationContext
from offer_runtime.application.errors import (
    CartValidationError,
    OfferDataUnavailableError,
    OfferNotFoundError,
    OfferValidationError,
)
from offer_runtime.application.offer_service import OffersService
from offer_runtime.domain.offers.models import OfferType

router = APIRouter()


def get_offers_service() -> Iterator[OffersService]:
    """Dependency to provide OffersService, closed once the request is done."""
    service = create_offers_service()
    try:
        yield service
    finally:
        service.close()


def _unavailable(e: Exception) -> HTTPException:
    detail: dict = {"message": str(e)}
    if isinstance(e, OfferValidationError):
        detail["issues"] = e.issues
    return HTTPException(status_code=503, detail=detail)


@router.post("/offers/calculate", response_model=CartCalculationResponse)
def calculate_cart(
    req: CalculateCartRequest,
    service: OffersService = Depends(get_offers_service),
) -> CartCalculationResponse:
    """
    Price a cart against the offers scoped to its products.

    Returns 422 with every cart issue when the cart is malformed and 503 when the
    offer catalog cannot be read. No partial result is ever returned.
    """
    ctx = CalculationContext.from_args(
        as_of_ts=req.as_of,
        user_id=req.user_id,
        correlation_id=f"calc-{uuid.uuid4().hex[:8]}",
    )
    try:
        result = service.calculate_cart([item.to_domain() for item in req.cart_items], ctx)
    except CartValidationError as e:
        raise HTTPException(status_code=422, detail={"message": str(e), "issues": e.issues})
    except (OfferDataUnavailableError, OfferValidationError) as e:
        raise _unavailable(e)
    return CartCalculationResponse.from_domain(result)


@router.get("/offers/applicable", response_model=list[OfferModel])
def find_applicable_offers(
    product_id: str | None = Query(None, alias="productId"),
    category: str | None = Query(None),
    collection: str | None = Query(None),
    service: OffersService = Depends(get_offers_service),
) -> list[OfferModel]:
    """Active offers for a product, category or collection, highest priority first."""
    try:
        offers = service.find_applicable_offers(product_id=product_id, category=category, collection=collection)
    except (OfferDataUnavailableError, OfferValidationError) as e:
        raise _unavailable(e)
    return [OfferModel.from_domain(o) for o in offers]


@router.get("/offers", response_model=OfferListResponse)
def list_offers(
    offer_type: OfferType | None = Query(None, alias="type"),
    is_active: bool | None = Query(None, alias="isActive"),
    search: str | None = Query(None),
    start_date: datetime | None = Query(None, alias="startDate"),
    end_date: datetime | None = Query(None, alias="endDate"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: OffersService = Depends(get_offers_service),
) -> OfferListResponse:
    try:
        result = service.list_offers(
            offer_type=offer_type,
            is_active=is_active,
            search=search,
            start_date=start_date,
            end_date=end_date,
            page=page,
            limit=limit,
        )
    except (OfferDataUnavailableError, OfferValidationError) as e:
        raise _unavailable(e)
    return OfferListResponse(
        data=[OfferModel.from_domain(o) for o in result.data],
        pagination=Pagination(page=result.page, limit=result.limit, total=result.total, pages=result.pages),
    )


@router.get("/offers/{offer_id}", response_model=OfferModel)
def get_offer(
    offer_id: str,
    service: OffersService = Depends(get_offers_service),
) -> OfferModel:
    try:
        return OfferModel.from_domain(service.get_offer(offer_id))
    except OfferNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (OfferDataUnavailableError, OfferValidationError) as e:
        raise _unavailable(e)
