"""Order aggregate (Event Sourced): a cart frozen at its final prices.

An order is written once, when it is placed, and never re-priced: every line
carries a ``FrozenPriceSnapshot`` copied from the live ``PriceDescriptor`` at
placement, and the customer's details and discount group are copied into a
``CustomerSnapshot``. The only thing that moves afterwards is the status,
and every move is appended to ``status_history``.

State Machine:
    ORDER_PLACED → ORDER_CONFIRMED → IN_TRANSIT → DELIVERED → INVOICED
    REJECTED (from ORDER_PLACED, ORDER_CONFIRMED)
"""

import json
from datetime import UTC, datetime
from enum import Enum
from uuid import uuid4

from protean import apply
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.exceptions import InvalidTransition
from ordering.order.events import OrderPlaced, OrderStatusChanged


class OrderStatus(Enum):
    ORDER_PLACED = "order_placed"
    ORDER_CONFIRMED = "order_confirmed"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    INVOICED = "invoiced"
    REJECTED = "rejected"


_VALID_TRANSITIONS = {
    OrderStatus.ORDER_PLACED: {OrderStatus.ORDER_CONFIRMED, OrderStatus.REJECTED},
    OrderStatus.ORDER_CONFIRMED: {OrderStatus.IN_TRANSIT, OrderStatus.REJECTED},
    OrderStatus.IN_TRANSIT: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: {OrderStatus.INVOICED},
    OrderStatus.INVOICED: set(),  # Terminal
    OrderStatus.REJECTED: set(),  # Terminal
}


def allowed_transitions(status) -> set:
    return _VALID_TRANSITIONS[OrderStatus(status)]


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class FrozenPriceSnapshot:
    """The price descriptor of one line, exactly as resolved at placement."""

    price = Float(required=True, min_value=0.0)
    original_price = Float(required=True, min_value=0.0)
    discount_type = String(required=True, max_length=30)
    discount_label = String(max_length=150)
    discount_percentage = Integer(default=0)
    show_strikethrough = Boolean(default=False)


@ordering.value_object(part_of="Order")
class CustomerSnapshot:
    """Who placed the order, and in which discount group, at placement time."""

    customer_id = Identifier(required=True)
    company_name = String(required=True, max_length=255)
    contact_name = String(max_length=255)
    email = String(max_length=254)
    phone = String(max_length=20)
    cvr = String(max_length=8)
    discount_group_id = Identifier()
    discount_group_name = String(max_length=100)
    discount_group_percentage = Float(default=0.0)


@ordering.value_object(part_of="Order")
class DeliveryInfo:
    street = String(max_length=255)
    postal_code = String(max_length=10)
    city = String(max_length=100)
    country = String(max_length=100, default="Danmark")
    expected_delivery = String(max_length=10)  # ISO date string
    instructions = Text()


@ordering.value_object(part_of="Order")
class OrderTotals:
    total_items = Integer(default=0)
    subtotal = Float(default=0.0)  # sum of original totals
    total_amount = Float(default=0.0)
    total_savings = Float(default=0.0)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    product_id = Identifier(required=True)
    product_name = String(required=True, max_length=255)
    sku = String(max_length=50)
    unit = String(max_length=20)
    quantity = Integer(required=True, min_value=1)
    pricing = ValueObject(FrozenPriceSnapshot)
    item_total = Float(required=True)
    item_original_total = Float(required=True)
    item_savings = Float(default=0.0)


@ordering.entity(part_of="Order")
class StatusEntry:
    status = String(required=True, choices=OrderStatus)
    note = Text()
    changed_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root (Event Sourced)
# ---------------------------------------------------------------------------
@ordering.aggregate(is_event_sourced=True)
class Order:
    order_number = String(max_length=100)
    customer_id = Identifier(required=True)
    status = String(choices=OrderStatus, default=OrderStatus.ORDER_PLACED.value)
    items = HasMany(OrderItem)
    customer = ValueObject(CustomerSnapshot)
    delivery = ValueObject(DeliveryInfo)
    totals = ValueObject(OrderTotals)
    status_history = HasMany(StatusEntry)
    invoice_number = String(max_length=100)
    invoiced_at = DateTime()
    placed_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def place(cls, order_number, customer, lines, totals, delivery=None, note=None, placed_at=None):
        """Record a new order.

        Args:
            order_number: Pre-allocated sequential order number.
            customer: Dict of ``CustomerSnapshot`` fields.
            lines: List of dicts with product_id, product_name, sku, unit,
                quantity, pricing (dict of ``FrozenPriceSnapshot`` fields),
                item_total, item_original_total, item_savings.
            totals: Dict with total_items, subtotal, total_amount, total_savings.
            delivery: Optional dict of ``DeliveryInfo`` fields.
        """
        now = placed_at or datetime.now(UTC)

        # Pre-generate item IDs for deterministic replay
        lines_with_ids = [{**line, "id": str(uuid4())} for line in lines]

        order = cls._create_new()
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer["customer_id"]),
                items=json.dumps(lines_with_ids),
                customer=json.dumps(customer),
                delivery=json.dumps(delivery) if delivery else None,
                total_items=totals["total_items"],
                subtotal=totals["subtotal"],
                total_amount=totals["total_amount"],
                total_savings=totals["total_savings"],
                note=note,
                history_entry_id=str(uuid4()),
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def can_transition_to(self, new_status) -> bool:
        try:
            target = OrderStatus(new_status)
        except ValueError:
            return False
        return target in allowed_transitions(self.status)

    def transition(self, new_status, note=None, invoice_number=None):
        """Move the order to ``new_status`` and append a history entry.

        Invoicing records an invoice number; one is derived from the order
        number when none is given.
        """
        if not self.can_transition_to(new_status):
            raise InvalidTransition({"status": [f"Cannot transition from {self.status} to {new_status}"]})

        target = OrderStatus(new_status)
        if target != OrderStatus.INVOICED:
            invoice_number = None
        elif not invoice_number:
            invoice_number = f"F-{self.order_number}"

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                customer_id=str(self.customer_id),
                previous_status=self.status,
                new_status=target.value,
                note=note,
                invoice_number=invoice_number,
                history_entry_id=str(uuid4()),
                changed_at=datetime.now(UTC),
            )
        )

    def confirm(self, note=None):
        self.transition(OrderStatus.ORDER_CONFIRMED.value, note)

    def ship(self, note=None):
        self.transition(OrderStatus.IN_TRANSIT.value, note)

    def deliver(self, note=None):
        self.transition(OrderStatus.DELIVERED.value, note)

    def invoice(self, invoice_number=None, note=None):
        self.transition(OrderStatus.INVOICED.value, note, invoice_number)

    def reject(self, reason=None):
        self.transition(OrderStatus.REJECTED.value, reason)

    @property
    def is_terminal(self) -> bool:
        return not allowed_transitions(self.status)

    # -------------------------------------------------------------------
    # @apply methods: rebuild state during event replay
    # -------------------------------------------------------------------
    @apply
    def _on_order_placed(self, event: OrderPlaced):
        self.id = event.order_id
        self.order_number = event.order_number
        self.customer_id = event.customer_id
        self.status = OrderStatus.ORDER_PLACED.value
        self.placed_at = event.placed_at
        self.updated_at = event.placed_at

        self.items = [
            OrderItem(**{**line, "pricing": FrozenPriceSnapshot(**line["pricing"])})
            for line in json.loads(event.items)
        ]
        self.customer = CustomerSnapshot(**json.loads(event.customer))
        if event.delivery:
            self.delivery = DeliveryInfo(**json.loads(event.delivery))
        self.totals = OrderTotals(
            total_items=event.total_items,
            subtotal=event.subtotal,
            total_amount=event.total_amount,
            total_savings=event.total_savings,
        )
        self.status_history = [
            StatusEntry(
                id=event.history_entry_id,
                status=OrderStatus.ORDER_PLACED.value,
                note=event.note,
                changed_at=event.placed_at,
            )
        ]

    @apply
    def _on_status_changed(self, event: OrderStatusChanged):
        self.status = event.new_status
        self.updated_at = event.changed_at
        self.add_status_history(
            StatusEntry(
                id=event.history_entry_id,
                status=event.new_status,
                note=event.note,
                changed_at=event.changed_at,
            )
        )
        if event.new_status == OrderStatus.INVOICED.value:
            self.invoice_number = event.invoice_number
            self.invoiced_at = event.changed_at
