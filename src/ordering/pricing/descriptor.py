"""The live price view returned by the resolver."""

from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum

from ordering.shared.money import as_float


class DiscountType(Enum):
    NONE = "none"
    UNIQUE_OFFER = "uniqueOffer"
    FLASH_SALE = "fastUdsalgspris"
    GROUP = "rabatGruppe"


class Anomaly:
    """Data-integrity conditions the resolver degrades around instead of failing."""

    OVERLAPPING_UNIQUE_OFFERS = "overlapping_unique_offers"
    NEGATIVE_PRICE_CLAMPED = "negative_price_clamped"
    MISSING_DISCOUNT_GROUP = "missing_discount_group"
    INACTIVE_DISCOUNT_GROUP = "inactive_discount_group"


@dataclass(frozen=True)
class PriceDescriptor:
    """What one customer pays for one product at one instant.

    Always derived, never stored as the authoritative price: carts recompute
    it on every read, and orders copy it into a ``FrozenPriceSnapshot``.
    """

    price: Decimal
    original_price: Decimal
    discount_type: DiscountType
    discount_label: str | None
    discount_percentage: int
    show_strikethrough: bool
    anomalies: tuple[str, ...] = field(default=())

    @property
    def is_discounted(self) -> bool:
        return self.discount_type != DiscountType.NONE

    def to_dict(self) -> dict:
        return {
            "price": as_float(self.price),
            "original_price": as_float(self.original_price),
            "discount_type": self.discount_type.value,
            "discount_label": self.discount_label,
            "discount_percentage": self.discount_percentage,
            "show_strikethrough": self.show_strikethrough,
        }
