"""Domain events for the Order aggregate.

Orders are event sourced: these events are the order's only persisted state
and are replayed through the ``@apply`` handlers on ``Order``.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A cart was frozen into an order at its final resolved prices."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=100)
    customer_id = Identifier(required=True)
    items = Text(required=True)  # JSON: list of line dicts incl. frozen pricing
    customer = Text(required=True)  # JSON: customer snapshot
    delivery = Text()  # JSON: delivery info
    total_items = Integer(required=True)
    subtotal = Float(required=True)
    total_amount = Float(required=True)
    total_savings = Float(required=True)
    note = Text()
    history_entry_id = Identifier(required=True)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=100)
    customer_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    note = Text()
    invoice_number = String(max_length=100)
    history_entry_id = Identifier(required=True)
    changed_at = DateTime(required=True)
