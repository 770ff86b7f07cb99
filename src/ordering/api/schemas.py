"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), kept separate from
internal Protean commands. Quantities and prices are deliberately loose here
so the domain, not request parsing, decides what is invalid.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Pricing
# ---------------------------------------------------------------------------
class PriceResponse(BaseModel):
    price: float
    original_price: float
    discount_type: str
    discount_label: str | None = None
    discount_percentage: int
    show_strikethrough: bool


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class AddCartItemRequest(BaseModel):
    product_id: str
    quantity: int = 1

    model_config = {"json_schema_extra": {"examples": [{"product_id": "prod-001", "quantity": 3}]}}


class UpdateCartItemRequest(BaseModel):
    quantity: int


class CartLineResponse(BaseModel):
    product_id: str
    product_name: str
    sku: str
    unit: str | None = None
    quantity: int
    pricing: PriceResponse
    item_total: float
    item_original_total: float
    item_savings: float
    is_available: bool


class CartResponse(BaseModel):
    customer_id: str
    items: list[CartLineResponse]
    total_items: int
    total_price: float
    total_original_price: float
    total_savings: float
    priced_at: datetime


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class PlaceOrderRequest(BaseModel):
    street: str | None = None
    postal_code: str | None = None
    city: str | None = None
    country: str | None = None
    expected_delivery: date | None = None
    instructions: str | None = None
    note: str | None = None


class TransitionStatusRequest(BaseModel):
    status: str
    note: str | None = None
    invoice_number: str | None = None


class FrozenPriceSchema(BaseModel):
    price: float
    original_price: float
    discount_type: str
    discount_label: str | None = None
    discount_percentage: int
    show_strikethrough: bool


class OrderItemResponse(BaseModel):
    product_id: str
    product_name: str
    sku: str | None = None
    unit: str | None = None
    quantity: int
    pricing: FrozenPriceSchema
    item_total: float
    item_original_total: float
    item_savings: float


class StatusEntryResponse(BaseModel):
    status: str
    note: str | None = None
    changed_at: datetime


class CustomerSnapshotResponse(BaseModel):
    customer_id: str
    company_name: str
    contact_name: str | None = None
    email: str | None = None
    phone: str | None = None
    cvr: str | None = None
    discount_group_id: str | None = None
    discount_group_name: str | None = None
    discount_group_percentage: float = 0.0


class DeliveryResponse(BaseModel):
    street: str | None = None
    postal_code: str | None = None
    city: str | None = None
    country: str | None = None
    expected_delivery: str | None = None
    instructions: str | None = None


class OrderTotalsResponse(BaseModel):
    total_items: int
    subtotal: float
    total_amount: float
    total_savings: float


class OrderResponse(BaseModel):
    order_id: str
    order_number: str
    customer_id: str
    status: str
    allowed_transitions: list[str]
    items: list[OrderItemResponse]
    customer: CustomerSnapshotResponse
    delivery: DeliveryResponse | None = None
    totals: OrderTotalsResponse
    status_history: list[StatusEntryResponse]
    invoice_number: str | None = None
    invoiced_at: datetime | None = None
    placed_at: datetime


class OrderSummaryResponse(BaseModel):
    order_id: str
    order_number: str
    status: str
    total_items: int
    total_amount: float
    total_savings: float
    placed_at: datetime


# ---------------------------------------------------------------------------
# Admin: offer-group price overrides
# ---------------------------------------------------------------------------
class OfferGroupPriceEntry(BaseModel):
    product_id: str | None = None
    offer_group_id: str | None = None
    price: float | str | None = None


class BulkUpsertRequest(BaseModel):
    prices: list[OfferGroupPriceEntry] = Field(min_length=1)


class BulkUpsertResult(BaseModel):
    product_id: str
    offer_group_id: str
    price: float | str | None = None
    ok: bool
    error: str | None = None


class BulkUpsertResponse(BaseModel):
    results: list[BulkUpsertResult]


class OfferGroupPricesResponse(BaseModel):
    prices: dict[str, dict[str, float]]
