"""UniqueOffer aggregate: a fixed price granted to one customer on one product.

Offers are optionally time-bounded (``valid_from``/``valid_to``) or unlimited.
Activation is managed by the caller: creating a new offer does not retract
older ones unless asked to, so overlapping active offers can exist and are
flagged by the price resolver rather than merged.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Text

from ordering.discount.events import UniqueOfferCreated, UniqueOfferDeactivated
from ordering.domain import ordering
from ordering.shared.clock import as_utc
from ordering.shared.money import as_float, to_money


@ordering.aggregate
class UniqueOffer:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    fixed_price = Float(required=True, min_value=0.0)
    valid_from = DateTime()
    valid_to = DateTime()
    is_unlimited = Boolean(default=False)
    is_active = Boolean(default=True)
    description = Text()
    created_at = DateTime()

    @invariant.post
    def window_must_be_ordered(self):
        if self.valid_from and self.valid_to and as_utc(self.valid_to) < as_utc(self.valid_from):
            raise ValidationError({"valid_to": ["Offer cannot end before it starts"]})

    @classmethod
    def create(
        cls,
        customer_id,
        product_id,
        fixed_price,
        valid_from=None,
        valid_to=None,
        is_unlimited=False,
        description=None,
        created_at=None,
    ):
        now = created_at or datetime.now(UTC)
        offer = cls(
            customer_id=customer_id,
            product_id=product_id,
            fixed_price=as_float(to_money(fixed_price)),
            valid_from=None if is_unlimited else valid_from or now,
            valid_to=None if is_unlimited else valid_to,
            is_unlimited=is_unlimited,
            is_active=True,
            description=description,
            created_at=now,
        )
        offer.raise_(
            UniqueOfferCreated(
                offer_id=str(offer.id),
                customer_id=str(customer_id),
                product_id=str(product_id),
                fixed_price=offer.fixed_price,
                valid_from=offer.valid_from,
                valid_to=offer.valid_to,
                is_unlimited=is_unlimited,
                created_at=now,
            )
        )
        return offer

    def applies_at(self, now):
        """True when the offer is active and ``now`` lies inside its window."""
        if not self.is_active:
            return False
        if self.is_unlimited:
            return True
        starts, ends = as_utc(self.valid_from), as_utc(self.valid_to)
        if starts is not None and now < starts:
            return False
        return ends is None or now <= ends

    def deactivate(self):
        if not self.is_active:
            raise ValidationError({"unique_offer": ["Offer is already inactive"]})

        self.is_active = False
        self.raise_(
            UniqueOfferDeactivated(
                offer_id=str(self.id),
                customer_id=str(self.customer_id),
                product_id=str(self.product_id),
                deactivated_at=datetime.now(UTC),
            )
        )


@ordering.repository(part_of=UniqueOffer)
class UniqueOfferRepository:
    def for_pair(self, customer_id, product_id):
        return (
            self._dao.query.filter(customer_id=str(customer_id), product_id=str(product_id))
            .limit(None)
            .all()
            .items
        )

    def for_customer(self, customer_id):
        return self._dao.query.filter(customer_id=str(customer_id)).limit(None).all().items
