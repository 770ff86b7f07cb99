"""Order summary: one row per order for order lists and the admin overview."""

from protean.core.projector import on
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.events import OrderPlaced, OrderStatusChanged
from ordering.order.order import Order


@ordering.projection
class OrderSummary:
    order_id = Identifier(identifier=True, required=True)
    order_number = String(required=True, max_length=100)
    customer_id = Identifier(required=True)
    status = String(required=True)
    total_items = Integer(default=0)
    total_amount = Float()
    total_savings = Float()
    invoice_number = String(max_length=100)
    placed_at = DateTime()
    updated_at = DateTime()


@ordering.projector(projector_for=OrderSummary, aggregates=[Order])
class OrderSummaryProjector:
    @on(OrderPlaced)
    def on_order_placed(self, event):
        current_domain.repository_for(OrderSummary).add(
            OrderSummary(
                order_id=event.order_id,
                order_number=event.order_number,
                customer_id=event.customer_id,
                status="order_placed",
                total_items=event.total_items,
                total_amount=event.total_amount,
                total_savings=event.total_savings,
                placed_at=event.placed_at,
                updated_at=event.placed_at,
            )
        )

    @on(OrderStatusChanged)
    def on_status_changed(self, event):
        repo = current_domain.repository_for(OrderSummary)
        summary = repo.get(event.order_id)
        summary.status = event.new_status
        if event.invoice_number:
            summary.invoice_number = event.invoice_number
        summary.updated_at = event.changed_at
        repo.add(summary)


def orders_for_customer(customer_id):
    """The customer's orders, newest first."""
    repo = current_domain.repository_for(OrderSummary)
    summaries = repo._dao.query.filter(customer_id=str(customer_id)).limit(None).all().items
    return sorted(summaries, key=lambda s: s.order_number, reverse=True)


def orders_by_status(status):
    repo = current_domain.repository_for(OrderSummary)
    return repo._dao.query.filter(status=status).limit(None).all().items
