"""DiscountGroup aggregate: a named customer segment with a default percentage discount."""

import re
from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, String, Text

from ordering.discount.events import DiscountGroupCreated, DiscountGroupDeactivated, DiscountGroupUpdated
from ordering.domain import ordering

STANDARD_GROUP_NAME = "Standard"
DEFAULT_COLOR = "#6B7280"

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")


@ordering.aggregate
class DiscountGroup:
    name = String(required=True, max_length=100)
    description = Text()
    color = String(max_length=7, default=DEFAULT_COLOR)  # display only
    percentage = Float(default=0.0, min_value=0.0, max_value=100.0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def color_must_be_hex(self):
        if self.color and not _HEX_COLOR.match(self.color):
            raise ValidationError({"color": [f"Color must be a hex value like #1A2B3C, got '{self.color}'"]})

    @classmethod
    def create(cls, name, percentage=0.0, color=None, description=None):
        now = datetime.now(UTC)
        group = cls(
            name=name,
            percentage=percentage,
            color=color or DEFAULT_COLOR,
            description=description,
            is_active=True,
            created_at=now,
            updated_at=now,
        )
        group.raise_(
            DiscountGroupCreated(
                group_id=str(group.id),
                name=group.name,
                percentage=group.percentage,
                created_at=now,
            )
        )
        return group

    @property
    def is_standard(self):
        return self.name == STANDARD_GROUP_NAME

    def update(self, name=None, percentage=None, color=None, description=None):
        if name is not None:
            self.name = name
        if percentage is not None:
            self.percentage = percentage
        if color is not None:
            self.color = color
        if description is not None:
            self.description = description

        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            DiscountGroupUpdated(
                group_id=str(self.id),
                name=self.name,
                color=self.color,
                percentage=self.percentage,
                updated_at=now,
            )
        )

    def deactivate(self):
        if self.is_standard:
            raise ValidationError({"discount_group": ["The Standard group cannot be deactivated"]})
        if not self.is_active:
            raise ValidationError({"discount_group": ["Discount group is already inactive"]})

        now = datetime.now(UTC)
        self.is_active = False
        self.updated_at = now
        self.raise_(DiscountGroupDeactivated(group_id=str(self.id), deactivated_at=now))


@ordering.repository(part_of=DiscountGroup)
class DiscountGroupRepository:
    def find_by_name(self, name):
        groups = self._dao.query.filter(name=name).all().items
        return groups[0] if groups else None

    def standard(self):
        """Return the Standard (0%) group, creating it on first use."""
        group = self.find_by_name(STANDARD_GROUP_NAME)
        if group is None:
            group = DiscountGroup.create(name=STANDARD_GROUP_NAME, percentage=0.0)
            self.add(group)
        return group
