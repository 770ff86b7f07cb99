"""Sequential order numbers: ``YYYYMMDD-HHMMSS-<customer id>-NNN``.

The trailing sequence comes from a single ``OrderSequence`` aggregate and is
global across customers; it is zero padded to three digits and simply grows
wider past 999.
"""

from dataclasses import dataclass
from datetime import UTC, datetime

from protean.exceptions import ObjectNotFoundError
from protean.fields import Integer
from protean.utils.globals import current_domain

from ordering.domain import ordering

SEQUENCE_ID = "order-number"

_TIMESTAMP_FORMAT = "%Y%m%d-%H%M%S"


@ordering.aggregate
class OrderSequence:
    last_value = Integer(default=0, min_value=0)

    def next_value(self) -> int:
        self.last_value += 1
        return self.last_value


@dataclass(frozen=True)
class OrderNumber:
    placed_at: datetime
    customer_id: str
    sequence: int

    def __str__(self):
        return f"{self.placed_at:{_TIMESTAMP_FORMAT}}-{self.customer_id}-{self.sequence:03d}"


def parse_order_number(value: str) -> OrderNumber:
    """Split an order number back into its parts.

    Customer ids may contain dashes (UUIDs), so the timestamp is taken from
    the front and the sequence from the back.
    """
    parts = value.split("-")
    if len(parts) < 4 or not parts[-1].isdigit():
        raise ValueError(f"Not an order number: {value!r}")

    placed_at = datetime.strptime(f"{parts[0]}-{parts[1]}", _TIMESTAMP_FORMAT).replace(tzinfo=UTC)
    return OrderNumber(placed_at=placed_at, customer_id="-".join(parts[2:-1]), sequence=int(parts[-1]))


def next_order_number(customer_id, placed_at: datetime) -> str:
    repo = current_domain.repository_for(OrderSequence)
    try:
        sequence = repo.get(SEQUENCE_ID)
    except ObjectNotFoundError:
        sequence = OrderSequence(id=SEQUENCE_ID)

    value = sequence.next_value()
    repo.add(sequence)
    return str(OrderNumber(placed_at=placed_at, customer_id=str(customer_id), sequence=value))
