"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, String

from ordering.domain import ordering


@ordering.event(part_of="Product")
class ProductRegistered:
    """A product was added to the wholesale catalogue."""

    __version__ = 1

    product_id = Identifier(required=True)
    sku = String(required=True)
    name = String(required=True)
    base_price = Float(required=True)
    unit = String(required=True)
    category = String()
    registered_at = DateTime(required=True)


@ordering.event(part_of="Product")
class BasePriceChanged:
    """The list price of a product changed. Open carts reprice on next view."""

    __version__ = 1

    product_id = Identifier(required=True)
    previous_price = Float(required=True)
    new_price = Float(required=True)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Product")
class ProductAvailabilityChanged:
    """A product was activated or deactivated for ordering."""

    __version__ = 1

    product_id = Identifier(required=True)
    is_active = Boolean(required=True)
    changed_at = DateTime(required=True)
