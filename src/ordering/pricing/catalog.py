"""Repository-backed price lookup.

``PriceCatalog`` gathers everything the resolver needs for a product and a
customer (discount group, offer-group override, unique offers, flash sales),
runs ``resolve_price`` and logs any anomalies it reports. One catalog is meant
to serve a single request: discount groups are memoised for its lifetime.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.catalogue.product import Product
from ordering.customer.customer import Customer
from ordering.discount.discount_group import DiscountGroup
from ordering.discount.flash_sale import FlashSale
from ordering.discount.offer_group_price import OfferGroupPrice
from ordering.discount.unique_offer import UniqueOffer
from ordering.domain import logger
from ordering.pricing.descriptor import PriceDescriptor
from ordering.pricing.resolver import resolve_price
from ordering.shared.clock import as_utc, utc_now


class PriceCatalog:
    def __init__(self):
        self._groups = {}

    def product(self, product_id) -> Product:
        return current_domain.repository_for(Product).get(product_id)

    def customer(self, customer_id) -> Customer:
        return current_domain.repository_for(Customer).get(customer_id)

    def discount_group(self, group_id):
        if not group_id:
            return None
        key = str(group_id)
        if key not in self._groups:
            try:
                self._groups[key] = current_domain.repository_for(DiscountGroup).get(key)
            except ObjectNotFoundError:
                self._groups[key] = None
        return self._groups[key]

    def resolve(self, product_id, customer_id=None, now=None) -> PriceDescriptor:
        """Price of ``product_id`` for ``customer_id`` (or an anonymous visitor) at ``now``."""
        product = self.product(product_id)
        customer = self.customer(customer_id) if customer_id else None
        return self.resolve_for(product, customer, now)

    def resolve_for(self, product, customer=None, now=None) -> PriceDescriptor:
        now = as_utc(now) or utc_now()
        group = None
        group_price = None
        unique_offers = ()

        if customer is not None:
            group = self.discount_group(customer.discount_group_id)
            unique_offers = current_domain.repository_for(UniqueOffer).for_pair(customer.id, product.id)
            if group is not None:
                group_price = current_domain.repository_for(OfferGroupPrice).active_for(product.id, group.id)

        descriptor = resolve_price(
            product,
            customer,
            now,
            discount_group=group,
            group_price=group_price,
            unique_offers=unique_offers,
            flash_sales=current_domain.repository_for(FlashSale).for_product(product.id),
        )

        if descriptor.anomalies:
            logger.warning(
                "price_resolution_anomaly",
                product_id=str(product.id),
                customer_id=str(customer.id) if customer else None,
                anomalies=list(descriptor.anomalies),
                resolved_as=descriptor.discount_type.value,
            )
        return descriptor


def resolve_price_for(product_id, customer_id=None, now=None) -> PriceDescriptor:
    return PriceCatalog().resolve(product_id, customer_id, now)
