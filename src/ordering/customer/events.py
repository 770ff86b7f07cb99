"""Domain events for the Customer aggregate."""

from protean.fields import DateTime, Identifier, String

from ordering.domain import ordering


@ordering.event(part_of="Customer")
class CustomerRegistered:
    """A business customer was approved and can order."""

    __version__ = 1

    customer_id = Identifier(required=True)
    company_name = String(required=True)
    email = String(required=True)
    discount_group_id = Identifier(required=True)
    registered_at = DateTime(required=True)


@ordering.event(part_of="Customer")
class DiscountGroupAssigned:
    """A customer moved to another discount group. Prices change on the next cart view."""

    __version__ = 1

    customer_id = Identifier(required=True)
    previous_group_id = Identifier()
    discount_group_id = Identifier(required=True)
    assigned_at = DateTime(required=True)
