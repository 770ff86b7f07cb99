"""Ordering bounded context: wholesale pricing, live carts and frozen orders.

Holds the product catalogue and customer records this context prices against,
the discount configuration (discount groups, offer-group prices, unique offers,
flash sales), the live cart, and the event-sourced order that freezes cart
pricing at checkout.
"""

import structlog
from protean.domain import Domain

ordering = Domain(name="ordering")

logger = structlog.get_logger(__name__)
