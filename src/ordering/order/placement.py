"""Order placement: freezes the customer's cart into an ``Order``.

Everything is checked before anything is written: the cart must hold at
least one line and every product must still exist and be active. Each line
is then resolved one final time and copied, field for field, into the
order. The order, the sequence bump and the emptied cart are saved in the
same unit of work as the handler.
"""

from datetime import date

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.view import price_line, summarize
from ordering.domain import logger, ordering
from ordering.exceptions import NotAuthenticated, ProductInactive
from ordering.order.numbering import next_order_number
from ordering.order.order import Order
from ordering.pricing.catalog import PriceCatalog
from ordering.shared.clock import utc_now
from ordering.shared.money import as_float


@ordering.command(part_of="Order")
class PlaceOrder:
    customer_id = Identifier()
    street = String(max_length=255)
    postal_code = String(max_length=10)
    city = String(max_length=100)
    country = String(max_length=100)
    expected_delivery = String(max_length=10)  # ISO date, YYYY-MM-DD
    instructions = Text()
    note = Text()


def frozen_line(line) -> dict:
    """Structural copy of a priced cart line; nothing is recomputed."""
    return {
        "product_id": line.product_id,
        "product_name": line.product_name,
        "sku": line.sku,
        "unit": line.unit,
        "quantity": line.quantity,
        "pricing": line.pricing.to_dict(),
        "item_total": as_float(line.item_total),
        "item_original_total": as_float(line.item_original_total),
        "item_savings": as_float(line.item_savings),
    }


def customer_snapshot(customer, group) -> dict:
    return {
        "customer_id": str(customer.id),
        "company_name": customer.company_name,
        "contact_name": customer.contact_name,
        "email": customer.email,
        "phone": customer.phone,
        "cvr": customer.cvr,
        "discount_group_id": str(group.id) if group else None,
        "discount_group_name": group.name if group else None,
        "discount_group_percentage": group.percentage if group else 0.0,
    }


def _delivery_date(value):
    if not value:
        return None
    try:
        return date.fromisoformat(value).isoformat()
    except ValueError:
        raise ValidationError({"expected_delivery": [f"Not an ISO date: {value}"]}) from None


def _delivery(command):
    delivery = {
        "street": command.street,
        "postal_code": command.postal_code,
        "city": command.city,
        "country": command.country,
        "expected_delivery": _delivery_date(command.expected_delivery),
        "instructions": command.instructions,
    }
    delivery = {k: v for k, v in delivery.items() if v is not None}
    return delivery or None


def _orderable_products(cart, catalog):
    products, problems = [], []
    for item in cart.items:
        try:
            product = catalog.product(item.product_id)
        except ObjectNotFoundError:
            problems.append(f"Product {item.product_id} no longer exists")
            continue
        if not product.is_active:
            problems.append(f"Product {product.sku} is no longer available")
            continue
        products.append((product, item.quantity))

    if problems:
        raise ProductInactive({"items": problems})
    return products


@ordering.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        if not command.customer_id:
            raise NotAuthenticated()

        delivery = _delivery(command)
        catalog = PriceCatalog()
        customer = catalog.customer(command.customer_id)
        carts = current_domain.repository_for(Cart)
        try:
            cart = carts.get(customer.id)
        except ObjectNotFoundError:
            cart = None
        if cart is None or not cart.items:
            raise ValidationError({"cart": ["Cannot place an order from an empty cart"]})

        products = _orderable_products(cart, catalog)

        now = utc_now()
        lines = [price_line(p, qty, catalog.resolve_for(p, customer, now)) for p, qty in products]
        view = summarize(customer.id, lines, now)

        order = Order.place(
            order_number=next_order_number(customer.id, now),
            customer=customer_snapshot(customer, catalog.discount_group(customer.discount_group_id)),
            lines=[frozen_line(line) for line in view.items],
            totals={
                "total_items": view.total_items,
                "subtotal": as_float(view.total_original_price),
                "total_amount": as_float(view.total_price),
                "total_savings": as_float(view.total_savings),
            },
            delivery=delivery,
            note=command.note,
            placed_at=now,
        )
        current_domain.repository_for(Order).add(order)

        cart.clear()
        carts.add(cart)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            order_number=order.order_number,
            customer_id=str(customer.id),
            total_amount=order.totals.total_amount,
            lines=len(lines),
        )
        return str(order.id)
