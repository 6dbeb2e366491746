"""Order quote and placement API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.orm import Session

from orderpricing.core.auth import get_current_user_id, get_optional_user_id
from orderpricing.core.database import get_db
from orderpricing.models.order import Order
from orderpricing.repositories.order_repository import OrderRepository
from orderpricing.schemas.order import (
    LineItemBreakdown,
    OrderCreate,
    OrderLineItemResponse,
    OrderResponse,
    QuoteRequest,
    QuoteResponse,
)
from orderpricing.services.order_pricing_service import OrderPricingService

router = APIRouter()


def _order_response(db: Session, order: Order) -> OrderResponse:
    response = OrderResponse.model_validate(order)
    response.items = [
        OrderLineItemResponse.model_validate(item)
        for item in OrderRepository(db).get_items(order.id)  # type: ignore[arg-type]
    ]
    return response


@router.post(
    "/quote",
    response_model=QuoteResponse,
    summary="Price a cart without placing an order",
    responses={
        400: {"description": "Promo code cannot be applied"},
        404: {"description": "Promo code not found"},
        409: {"description": "Promo code usage limit reached"},
        422: {"description": "Invalid line item"},
    },
)
async def quote_order(
    data: QuoteRequest,
    db: Session = Depends(get_db),
    user_id: UUID | None = Depends(get_optional_user_id),
) -> QuoteResponse:
    quote = OrderPricingService(db).quote(
        data.items,
        promo_code=data.promo_code,
        user_id=user_id,
        delivery_fee=data.delivery_fee,
    )
    return QuoteResponse(
        subtotal=quote.subtotal,
        discount_amount=quote.discount_amount,
        delivery_fee=quote.delivery_fee,
        total_amount=quote.total_amount,
        promo_code=quote.promo_code,
        items=[
            LineItemBreakdown(
                product_id=item.product_id,
                variant_ids=list(item.variant_ids),
                quantity=item.quantity,
                unit_price=item.unit_price,
                total_price=item.total_price,
            )
            for item in quote.items
        ],
    )


@router.post(
    "/",
    response_model=OrderResponse,
    status_code=201,
    summary="Place order",
    responses={
        400: {"description": "Promo code cannot be applied"},
        401: {"description": "Missing user"},
        404: {"description": "Promo code not found"},
        409: {"description": "Promo code usage limit reached"},
        422: {"description": "Invalid line item"},
    },
)
async def create_order(
    data: OrderCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> OrderResponse:
    order = OrderPricingService(db).commit(
        data.items,
        promo_code=data.promo_code,
        user_id=user_id,
        delivery_fee=data.delivery_fee,
    )
    return _order_response(db, order)


@router.get("/", response_model=list[OrderResponse], summary="List my orders")
async def list_orders(
    response: Response,
    skip: int = Query(default=0, ge=0),
    limit: int = Query(default=100, ge=1, le=1000),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> list[OrderResponse]:
    repo = OrderRepository(db)
    response.headers["X-Total-Count"] = str(repo.count_by_user_id(user_id))
    return [_order_response(db, o) for o in repo.get_by_user_id(user_id, skip=skip, limit=limit)]


@router.get(
    "/{order_id}",
    response_model=OrderResponse,
    summary="Get order",
    responses={404: {"description": "Order not found"}},
)
async def get_order(
    order_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> OrderResponse:
    order = OrderRepository(db).get_by_id(order_id)
    if not order or order.user_id != user_id:
        raise HTTPException(status_code=404, detail="Order not found")
    return _order_response(db, order)


@router.post(
    "/{order_id}/cancel",
    response_model=OrderResponse,
    summary="Cancel order",
    responses={
        400: {"description": "Order is already cancelled"},
        404: {"description": "Order not found"},
    },
)
async def cancel_order(
    order_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> OrderResponse:
    """Cancel an order; any promo usage it held becomes available again."""
    existing = OrderRepository(db).get_by_id(order_id)
    if not existing or existing.user_id != user_id:
        raise HTTPException(status_code=404, detail="Order not found")
    try:
        order = OrderPricingService(db).cancel(order_id)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from None
    return _order_response(db, order)  # type: ignore[arg-type]
