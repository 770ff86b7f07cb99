"""Price resolution: the single place discount precedence is decided.

``resolve_price`` is a pure function over already-loaded data. Precedence,
first match wins:

1. an active unique offer for the customer whose window contains ``now``
2. an active flash sale on the product whose window contains ``now``
3. a fixed offer-group price for the customer's discount group
4. the discount group's percentage, when above zero
5. the product's base price
"""

from datetime import UTC, datetime
from decimal import Decimal

from ordering.catalogue.product import DEFAULT_SALE_LABEL
from ordering.pricing.descriptor import Anomaly, DiscountType, PriceDescriptor
from ordering.shared.clock import as_utc
from ordering.shared.money import ZERO, apply_percentage, percentage_off, to_money

UNIQUE_OFFER_LABEL = "Unikt tilbud"

_EPOCH = datetime.min.replace(tzinfo=UTC)


def resolve_price(
    product,
    customer,
    now: datetime,
    *,
    discount_group=None,
    group_price=None,
    unique_offers=(),
    flash_sales=(),
) -> PriceDescriptor:
    now = as_utc(now)
    base = to_money(product.base_price)
    anomalies = []

    if customer is not None:
        offer = _current_unique_offer(unique_offers, now, anomalies)
        if offer is not None:
            return _discounted(offer.fixed_price, base, DiscountType.UNIQUE_OFFER, UNIQUE_OFFER_LABEL, anomalies)

    sale = _current_flash_sale(flash_sales, now)
    if sale is not None:
        label = getattr(product, "discount_label", None) or DEFAULT_SALE_LABEL
        return _discounted(sale.sale_price, base, DiscountType.FLASH_SALE, label, anomalies)

    if customer is None:
        return _standard(base, anomalies)

    if discount_group is None:
        anomalies.append(Anomaly.MISSING_DISCOUNT_GROUP)
        return _standard(base, anomalies)
    if not discount_group.is_active:
        anomalies.append(Anomaly.INACTIVE_DISCOUNT_GROUP)
        return _standard(base, anomalies)

    group_label = f"{discount_group.name} rabat"
    if group_price is not None and group_price.is_active:
        return _discounted(group_price.price, base, DiscountType.GROUP, group_label, anomalies)

    if discount_group.percentage and discount_group.percentage > 0:
        price = apply_percentage(base, discount_group.percentage)
        return _discounted(price, base, DiscountType.GROUP, group_label, anomalies)

    return _standard(base, anomalies)


def _current_unique_offer(offers, now, anomalies):
    live = [offer for offer in offers if offer.applies_at(now)]
    if not live:
        return None
    if len(live) > 1:
        anomalies.append(Anomaly.OVERLAPPING_UNIQUE_OFFERS)
    return max(live, key=lambda offer: as_utc(offer.created_at) or _EPOCH)


def _current_flash_sale(sales, now):
    live = [sale for sale in sales if sale.applies_at(now)]
    if not live:
        return None
    # Several overlapping sales on one product: the customer gets the lowest
    return min(live, key=lambda sale: to_money(sale.sale_price))


def _discounted(amount, base: Decimal, discount_type, label, anomalies) -> PriceDescriptor:
    price = to_money(amount)
    if price < ZERO:
        price = ZERO
        anomalies.append(Anomaly.NEGATIVE_PRICE_CLAMPED)

    return PriceDescriptor(
        price=price,
        original_price=base,
        discount_type=discount_type,
        discount_label=label,
        discount_percentage=max(percentage_off(base, price), 0),
        show_strikethrough=price < base,
        anomalies=tuple(anomalies),
    )


def _standard(base: Decimal, anomalies) -> PriceDescriptor:
    return PriceDescriptor(
        price=base,
        original_price=base,
        discount_type=DiscountType.NONE,
        discount_label=None,
        discount_percentage=0,
        show_strikethrough=False,
        anomalies=tuple(anomalies),
    )
