"""Product aggregate: the catalogue entry prices are resolved against.

Only the parts of a product that pricing and ordering care about live here:
the list (base) price, unit of measure, category and whether it can still be
ordered. Everything else about a product is owned elsewhere.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, String

from ordering.catalogue.events import BasePriceChanged, ProductAvailabilityChanged, ProductRegistered
from ordering.domain import ordering
from ordering.shared.money import as_float, to_money

DEFAULT_SALE_LABEL = "Tilbud"


class Unit(Enum):
    KG = "kg"
    PIECE = "stk"
    TRAY = "bakke"
    CASE = "kasse"


@ordering.aggregate
class Product:
    sku = String(required=True, max_length=50)  # varenummer
    name = String(required=True, max_length=255)
    base_price = Float(required=True, min_value=0.01)
    unit = String(choices=Unit, default=Unit.PIECE.value)
    category = String(max_length=100)
    discount_label = String(max_length=50, default=DEFAULT_SALE_LABEL)  # shown during a flash sale
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, sku, name, base_price, unit=None, category=None, discount_label=None):
        now = datetime.now(UTC)
        product = cls(
            sku=sku,
            name=name,
            base_price=as_float(to_money(base_price)),
            unit=unit or Unit.PIECE.value,
            category=category,
            discount_label=discount_label or DEFAULT_SALE_LABEL,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductRegistered(
                product_id=str(product.id),
                sku=product.sku,
                name=product.name,
                base_price=product.base_price,
                unit=product.unit,
                category=product.category,
                registered_at=now,
            )
        )
        return product

    def change_base_price(self, new_price):
        amount = to_money(new_price)
        if amount <= 0:
            raise ValidationError({"base_price": ["Base price must be positive"]})

        previous = self.base_price
        now = datetime.now(UTC)
        self.base_price = as_float(amount)
        self.updated_at = now
        self.raise_(
            BasePriceChanged(
                product_id=str(self.id),
                previous_price=previous,
                new_price=self.base_price,
                changed_at=now,
            )
        )

    def activate(self):
        self._set_availability(True)

    def deactivate(self):
        self._set_availability(False)

    def _set_availability(self, is_active):
        if self.is_active == is_active:
            state = "active" if is_active else "inactive"
            raise ValidationError({"is_active": [f"Product is already {state}"]})

        now = datetime.now(UTC)
        self.is_active = is_active
        self.updated_at = now
        self.raise_(
            ProductAvailabilityChanged(
                product_id=str(self.id),
                is_active=is_active,
                changed_at=now,
            )
        )
