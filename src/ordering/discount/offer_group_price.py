"""OfferGroupPrice aggregate: a fixed price for one product within one discount group.

An override takes precedence over the group's percentage discount. There is
at most one active override per (product, discount group) pair; writers
upsert rather than insert.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier

from ordering.discount.events import OfferGroupPriceRemoved, OfferGroupPriceSet
from ordering.domain import ordering
from ordering.shared.money import as_float, to_money


@ordering.aggregate
class OfferGroupPrice:
    product_id = Identifier(required=True)
    discount_group_id = Identifier(required=True)
    price = Float(required=True, min_value=0.0)
    is_active = Boolean(default=True)
    updated_at = DateTime()

    @classmethod
    def create(cls, product_id, discount_group_id, price):
        override = cls(
            product_id=product_id,
            discount_group_id=discount_group_id,
            price=as_float(to_money(price)),
            is_active=True,
            updated_at=datetime.now(UTC),
        )
        override._record_set(previous_price=None)
        return override

    def set_price(self, price):
        previous = self.price if self.is_active else None
        self.price = as_float(to_money(price))
        self.is_active = True
        self.updated_at = datetime.now(UTC)
        self._record_set(previous_price=previous)

    def remove(self):
        if not self.is_active:
            raise ValidationError({"offer_group_price": ["Override is already removed"]})

        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now
        self.raise_(
            OfferGroupPriceRemoved(
                offer_group_price_id=str(self.id),
                product_id=str(self.product_id),
                discount_group_id=str(self.discount_group_id),
                removed_at=now,
            )
        )

    def _record_set(self, previous_price):
        self.raise_(
            OfferGroupPriceSet(
                offer_group_price_id=str(self.id),
                product_id=str(self.product_id),
                discount_group_id=str(self.discount_group_id),
                previous_price=previous_price,
                price=self.price,
                set_at=self.updated_at,
            )
        )


@ordering.repository(part_of=OfferGroupPrice)
class OfferGroupPriceRepository:
    def for_pair(self, product_id, discount_group_id):
        """The stored override for a pair, active or not, or None."""
        records = (
            self._dao.query.filter(product_id=str(product_id), discount_group_id=str(discount_group_id))
            .limit(None)
            .all()
            .items
        )
        active = [r for r in records if r.is_active]
        if active:
            return active[0]
        return records[0] if records else None

    def active_for(self, product_id, discount_group_id):
        override = self.for_pair(product_id, discount_group_id)
        return override if override is not None and override.is_active else None

    def active_prices(self):
        """All active overrides as ``{product_id: {discount_group_id: price}}``."""
        baseline = {}
        for record in self._dao.query.filter(is_active=True).limit(None).all().items:
            baseline.setdefault(str(record.product_id), {})[str(record.discount_group_id)] = record.price
        return baseline
