"""Domain events for the discount configuration aggregates."""

from protean.fields import Boolean, DateTime, Float, Identifier, String

from ordering.domain import ordering


@ordering.event(part_of="DiscountGroup")
class DiscountGroupCreated:
    __version__ = 1

    group_id = Identifier(required=True)
    name = String(required=True)
    percentage = Float(required=True)
    created_at = DateTime(required=True)


@ordering.event(part_of="DiscountGroup")
class DiscountGroupUpdated:
    """Name, color or percentage of a discount group changed."""

    __version__ = 1

    group_id = Identifier(required=True)
    name = String(required=True)
    color = String()
    percentage = Float(required=True)
    updated_at = DateTime(required=True)


@ordering.event(part_of="DiscountGroup")
class DiscountGroupDeactivated:
    __version__ = 1

    group_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)


@ordering.event(part_of="OfferGroupPrice")
class OfferGroupPriceSet:
    """A fixed price override for a (product, discount group) pair was written."""

    __version__ = 1

    offer_group_price_id = Identifier(required=True)
    product_id = Identifier(required=True)
    discount_group_id = Identifier(required=True)
    previous_price = Float()
    price = Float(required=True)
    set_at = DateTime(required=True)


@ordering.event(part_of="OfferGroupPrice")
class OfferGroupPriceRemoved:
    __version__ = 1

    offer_group_price_id = Identifier(required=True)
    product_id = Identifier(required=True)
    discount_group_id = Identifier(required=True)
    removed_at = DateTime(required=True)


@ordering.event(part_of="UniqueOffer")
class UniqueOfferCreated:
    """A customer was granted a fixed price on one product."""

    __version__ = 1

    offer_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    fixed_price = Float(required=True)
    valid_from = DateTime()
    valid_to = DateTime()
    is_unlimited = Boolean(required=True)
    created_at = DateTime(required=True)


@ordering.event(part_of="UniqueOffer")
class UniqueOfferDeactivated:
    __version__ = 1

    offer_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    deactivated_at = DateTime(required=True)


@ordering.event(part_of="FlashSale")
class FlashSaleStarted:
    __version__ = 1

    flash_sale_id = Identifier(required=True)
    product_id = Identifier(required=True)
    sale_price = Float(required=True)
    valid_from = DateTime(required=True)
    valid_to = DateTime(required=True)


@ordering.event(part_of="FlashSale")
class FlashSaleEnded:
    __version__ = 1

    flash_sale_id = Identifier(required=True)
    product_id = Identifier(required=True)
    ended_at = DateTime(required=True)
