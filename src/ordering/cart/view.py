"""Live cart view.

Nothing in the cart carries a price. Every time a cart is shown it is priced
line by line through the ``PriceCatalog`` at the current instant, so a change
to a discount group, an override or a flash sale is visible on the next read.
All arithmetic is done in ``Decimal``; floats only appear in ``to_dict``.
"""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.domain import logger
from ordering.exceptions import NotAuthenticated
from ordering.pricing.catalog import PriceCatalog
from ordering.pricing.descriptor import PriceDescriptor
from ordering.shared.clock import as_utc, utc_now
from ordering.shared.money import ZERO, as_float, to_money


@dataclass(frozen=True)
class CartLine:
    product_id: str
    product_name: str
    sku: str
    unit: str
    quantity: int
    pricing: PriceDescriptor
    item_total: Decimal
    item_original_total: Decimal
    item_savings: Decimal
    is_available: bool = True

    def to_dict(self) -> dict:
        return {
            "product_id": self.product_id,
            "product_name": self.product_name,
            "sku": self.sku,
            "unit": self.unit,
            "quantity": self.quantity,
            "pricing": self.pricing.to_dict(),
            "item_total": as_float(self.item_total),
            "item_original_total": as_float(self.item_original_total),
            "item_savings": as_float(self.item_savings),
            "is_available": self.is_available,
        }


@dataclass(frozen=True)
class CartView:
    customer_id: str
    items: tuple[CartLine, ...]
    total_items: int
    total_price: Decimal
    total_original_price: Decimal
    total_savings: Decimal
    priced_at: datetime

    @property
    def is_empty(self) -> bool:
        return not self.items

    def to_dict(self) -> dict:
        return {
            "customer_id": self.customer_id,
            "items": [line.to_dict() for line in self.items],
            "total_items": self.total_items,
            "total_price": as_float(self.total_price),
            "total_original_price": as_float(self.total_original_price),
            "total_savings": as_float(self.total_savings),
            "priced_at": self.priced_at.isoformat(),
        }


def price_line(product, quantity: int, descriptor: PriceDescriptor) -> CartLine:
    """Extend a resolved unit price over ``quantity`` units of ``product``."""
    total = to_money(descriptor.price * quantity)
    original_total = to_money(descriptor.original_price * quantity)
    return CartLine(
        product_id=str(product.id),
        product_name=product.name,
        sku=product.sku,
        unit=product.unit,
        quantity=quantity,
        pricing=descriptor,
        item_total=total,
        item_original_total=original_total,
        item_savings=max(original_total - total, ZERO),
        is_available=bool(product.is_active),
    )


def summarize(customer_id, lines, priced_at) -> CartView:
    lines = tuple(lines)
    total = sum((line.item_total for line in lines), ZERO)
    original = sum((line.item_original_total for line in lines), ZERO)
    return CartView(
        customer_id=str(customer_id),
        items=lines,
        total_items=sum(line.quantity for line in lines),
        total_price=to_money(total),
        total_original_price=to_money(original),
        total_savings=to_money(sum((line.item_savings for line in lines), ZERO)),
        priced_at=priced_at,
    )


def build_cart_view(cart: Cart, catalog: PriceCatalog | None = None, now: datetime | None = None) -> CartView:
    catalog = catalog or PriceCatalog()
    now = as_utc(now) or utc_now()
    customer = catalog.customer(cart.customer_id)

    lines = []
    for item in sorted(cart.items, key=lambda i: (i.added_at is None, as_utc(i.added_at) or now)):
        try:
            product = catalog.product(item.product_id)
        except ObjectNotFoundError:
            logger.warning(
                "cart_item_product_missing",
                customer_id=str(cart.customer_id),
                product_id=str(item.product_id),
            )
            continue

        descriptor = catalog.resolve_for(product, customer, now)
        lines.append(price_line(product, item.quantity, descriptor))

    return summarize(cart.customer_id, lines, now)


def view_cart(customer_id, now: datetime | None = None) -> CartView:
    """The customer's cart, priced at ``now``. An absent cart reads as empty."""
    if not customer_id:
        raise NotAuthenticated()

    catalog = PriceCatalog()
    try:
        cart = current_domain.repository_for(Cart).get(customer_id)
    except ObjectNotFoundError:
        # Unknown customers still surface as not-found
        catalog.customer(customer_id)
        return summarize(customer_id, (), as_utc(now) or utc_now())

    return build_cart_view(cart, catalog, now)
