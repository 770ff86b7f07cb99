"""FastAPI routes for the Ordering domain: pricing, carts, orders and admin.

The calling customer is identified by the ``X-Customer-Id`` header, set by
the authenticating gateway in front of this service.
"""

import json

from fastapi import APIRouter, Header
from protean.utils.globals import current_domain

from ordering.admin.override_editor import load_from_domain
from ordering.api.schemas import (
    AddCartItemRequest,
    BulkUpsertRequest,
    BulkUpsertResponse,
    CartResponse,
    OfferGroupPricesResponse,
    OrderResponse,
    OrderSummaryResponse,
    PlaceOrderRequest,
    PriceResponse,
    TransitionStatusRequest,
    UpdateCartItemRequest,
)
from ordering.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem
from ordering.cart.view import view_cart
from ordering.discount.offer_group_prices import BulkUpsertOfferGroupPrices
from ordering.exceptions import NotAuthenticated
from ordering.order.order import Order, allowed_transitions
from ordering.order.placement import PlaceOrder
from ordering.order.status import TransitionOrderStatus
from ordering.pricing.catalog import resolve_price_for
from ordering.projections.order_summary import orders_for_customer

CustomerHeader = Header(default=None, alias="X-Customer-Id")


def _order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        order_id=str(order.id),
        order_number=order.order_number,
        customer_id=str(order.customer_id),
        status=order.status,
        allowed_transitions=sorted(s.value for s in allowed_transitions(order.status)),
        items=[
            {
                "product_id": str(item.product_id),
                "product_name": item.product_name,
                "sku": item.sku,
                "unit": item.unit,
                "quantity": item.quantity,
                "pricing": item.pricing.to_dict(),
                "item_total": item.item_total,
                "item_original_total": item.item_original_total,
                "item_savings": item.item_savings,
            }
            for item in order.items
        ],
        customer=order.customer.to_dict(),
        delivery=order.delivery.to_dict() if order.delivery else None,
        totals=order.totals.to_dict(),
        status_history=[
            {"status": entry.status, "note": entry.note, "changed_at": entry.changed_at}
            for entry in sorted(order.status_history, key=lambda e: e.changed_at)
        ],
        invoice_number=order.invoice_number,
        invoiced_at=order.invoiced_at,
        placed_at=order.placed_at,
    )


# ---------------------------------------------------------------------------
# Pricing Router
# ---------------------------------------------------------------------------
pricing_router = APIRouter(prefix="/pricing", tags=["pricing"])


@pricing_router.get("/{product_id}", response_model=PriceResponse)
async def get_price(product_id: str, x_customer_id: str | None = CustomerHeader) -> PriceResponse:
    """Live price of a product for the calling customer, or the standard price when anonymous."""
    return PriceResponse(**resolve_price_for(product_id, x_customer_id).to_dict())


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(x_customer_id: str | None = CustomerHeader) -> CartResponse:
    return CartResponse(**view_cart(x_customer_id).to_dict())


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddCartItemRequest, x_customer_id: str | None = CustomerHeader) -> CartResponse:
    command = AddToCart(customer_id=x_customer_id, product_id=body.product_id, quantity=body.quantity)
    view = current_domain.process(command, asynchronous=False)
    return CartResponse(**view.to_dict())


@cart_router.put("/items/{product_id}", response_model=CartResponse)
async def update_cart_item(
    product_id: str, body: UpdateCartItemRequest, x_customer_id: str | None = CustomerHeader
) -> CartResponse:
    command = UpdateCartItem(customer_id=x_customer_id, product_id=product_id, quantity=body.quantity)
    view = current_domain.process(command, asynchronous=False)
    return CartResponse(**view.to_dict())


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(product_id: str, x_customer_id: str | None = CustomerHeader) -> CartResponse:
    view = current_domain.process(RemoveFromCart(customer_id=x_customer_id, product_id=product_id), asynchronous=False)
    return CartResponse(**view.to_dict())


@cart_router.delete("", response_model=CartResponse)
async def clear_cart(x_customer_id: str | None = CustomerHeader) -> CartResponse:
    view = current_domain.process(ClearCart(customer_id=x_customer_id), asynchronous=False)
    return CartResponse(**view.to_dict())


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("", status_code=201, response_model=OrderResponse)
async def place_order(body: PlaceOrderRequest, x_customer_id: str | None = CustomerHeader) -> OrderResponse:
    fields = body.model_dump(exclude_none=True)
    if "expected_delivery" in fields:
        fields["expected_delivery"] = fields["expected_delivery"].isoformat()
    command = PlaceOrder(customer_id=x_customer_id, **fields)
    order_id = current_domain.process(command, asynchronous=False)
    return _order_response(current_domain.repository_for(Order).get(order_id))


@order_router.get("", response_model=list[OrderSummaryResponse])
async def list_orders(x_customer_id: str | None = CustomerHeader) -> list[OrderSummaryResponse]:
    if not x_customer_id:
        raise NotAuthenticated()
    return [
        OrderSummaryResponse(
            order_id=str(s.order_id),
            order_number=s.order_number,
            status=s.status,
            total_items=s.total_items,
            total_amount=s.total_amount,
            total_savings=s.total_savings,
            placed_at=s.placed_at,
        )
        for s in orders_for_customer(x_customer_id)
    ]


@order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return _order_response(current_domain.repository_for(Order).get(order_id))


@order_router.put("/{order_id}/status", response_model=OrderResponse)
async def transition_order_status(order_id: str, body: TransitionStatusRequest) -> OrderResponse:
    command = TransitionOrderStatus(
        order_id=order_id,
        new_status=body.status,
        note=body.note,
        invoice_number=body.invoice_number,
    )
    current_domain.process(command, asynchronous=False)
    return _order_response(current_domain.repository_for(Order).get(order_id))


# ---------------------------------------------------------------------------
# Admin Router
# ---------------------------------------------------------------------------
admin_router = APIRouter(prefix="/admin", tags=["admin"])


@admin_router.post("/offer-group-prices/bulk-upsert", response_model=BulkUpsertResponse)
async def bulk_upsert_offer_group_prices(body: BulkUpsertRequest) -> BulkUpsertResponse:
    """Write every valid entry; the response reports success or the error per entry."""
    command = BulkUpsertOfferGroupPrices(prices=json.dumps([entry.model_dump() for entry in body.prices]))
    results = current_domain.process(command, asynchronous=False)
    return BulkUpsertResponse(results=results)


@admin_router.get("/offer-group-prices", response_model=OfferGroupPricesResponse)
async def list_offer_group_prices() -> OfferGroupPricesResponse:
    return OfferGroupPricesResponse(prices=load_from_domain())
