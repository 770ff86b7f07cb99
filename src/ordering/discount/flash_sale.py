"""FlashSale aggregate ("fast udsalgspris"): a temporary sale price on a product for everyone."""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier

from ordering.discount.events import FlashSaleEnded, FlashSaleStarted
from ordering.domain import ordering
from ordering.shared.clock import as_utc
from ordering.shared.money import as_float, to_money


@ordering.aggregate
class FlashSale:
    product_id = Identifier(required=True)
    sale_price = Float(required=True, min_value=0.0)
    valid_from = DateTime(required=True)
    valid_to = DateTime(required=True)
    is_active = Boolean(default=True)
    created_at = DateTime()

    @invariant.post
    def window_must_be_ordered(self):
        if self.valid_from and self.valid_to and as_utc(self.valid_to) <= as_utc(self.valid_from):
            raise ValidationError({"valid_to": ["Flash sale must end after it starts"]})

    @classmethod
    def start(cls, product_id, sale_price, valid_from, valid_to):
        sale = cls(
            product_id=product_id,
            sale_price=as_float(to_money(sale_price)),
            valid_from=valid_from,
            valid_to=valid_to,
            is_active=True,
            created_at=datetime.now(UTC),
        )
        sale.raise_(
            FlashSaleStarted(
                flash_sale_id=str(sale.id),
                product_id=str(product_id),
                sale_price=sale.sale_price,
                valid_from=valid_from,
                valid_to=valid_to,
            )
        )
        return sale

    def applies_at(self, now):
        return self.is_active and as_utc(self.valid_from) <= now <= as_utc(self.valid_to)

    def end(self):
        if not self.is_active:
            raise ValidationError({"flash_sale": ["Flash sale has already ended"]})

        self.is_active = False
        self.raise_(
            FlashSaleEnded(
                flash_sale_id=str(self.id),
                product_id=str(self.product_id),
                ended_at=datetime.now(UTC),
            )
        )


@ordering.repository(part_of=FlashSale)
class FlashSaleRepository:
    def for_product(self, product_id):
        return self._dao.query.filter(product_id=str(product_id)).limit(None).all().items
