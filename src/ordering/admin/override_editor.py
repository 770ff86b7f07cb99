"""Offer-group price override editor.

The admin workbench for fixed prices per (product, discount group). Edits are
staged in a draft buffer on top of a baseline loaded from storage, and only
reach storage when ``apply`` submits them as one bulk upsert. The server
answers per triple, so a partial failure leaves exactly the rejected edits
staged for the admin to correct.
"""

import json
import math
from collections.abc import Callable
from decimal import Decimal, InvalidOperation

from protean.utils.globals import current_domain

from ordering.discount.offer_group_price import OfferGroupPrice
from ordering.discount.offer_group_prices import BulkUpsertOfferGroupPrices
from ordering.domain import logger
from ordering.exceptions import InvalidOverrideValue, PartialBulkFailure
from ordering.shared.money import as_float, to_money

Submit = Callable[[list[dict]], list[dict]]
Load = Callable[[], dict]


def submit_to_domain(triples: list[dict]) -> list[dict]:
    return current_domain.process(BulkUpsertOfferGroupPrices(prices=json.dumps(triples)), asynchronous=False)


def load_from_domain() -> dict:
    return current_domain.repository_for(OfferGroupPrice).active_prices()


def parse_override_value(value) -> Decimal:
    """Parse an entered price. Accepts a comma as decimal separator."""
    if isinstance(value, bool):
        raise InvalidOverrideValue({"price": ["Price must be a number"]})
    if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
        raise InvalidOverrideValue({"price": ["Price must be a finite number"]})

    text = value.strip().replace(",", ".") if isinstance(value, str) else str(value)
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise InvalidOverrideValue({"price": [f"Not a price: {value!r}"]}) from None

    if not amount.is_finite():
        raise InvalidOverrideValue({"price": ["Price must be a finite number"]})
    if amount < 0:
        raise InvalidOverrideValue({"price": ["Price cannot be negative"]})
    return to_money(amount)


def _is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


class OfferOverrideEditor:
    def __init__(self, submit: Submit | None = None, load: Load | None = None):
        self._submit = submit or submit_to_domain
        self._load = load or load_from_domain
        self._staged: dict[tuple[str, str], Decimal] = {}
        self.baseline: dict[str, dict[str, float]] = {}

    def load_baseline(self) -> dict:
        self.baseline = {str(p): {str(g): price for g, price in groups.items()} for p, groups in self._load().items()}
        return self.baseline

    # -------------------------------------------------------------------
    # Draft buffer
    # -------------------------------------------------------------------
    def stage(self, product_id, group_id, value) -> Decimal | None:
        """Stage ``value`` for the pair; a blank value un-stages it.

        Invalid input raises ``InvalidOverrideValue`` and leaves the buffer as
        it was.
        """
        key = (str(product_id), str(group_id))
        if _is_blank(value):
            self._staged.pop(key, None)
            return None

        price = parse_override_value(value)
        self._staged[key] = price
        return price

    def discard(self):
        self._staged.clear()

    def has_pending_changes(self) -> bool:
        return bool(self._staged)

    def staged_value(self, product_id, group_id) -> Decimal | None:
        return self._staged.get((str(product_id), str(group_id)))

    def baseline_value(self, product_id, group_id) -> Decimal | None:
        price = self.baseline.get(str(product_id), {}).get(str(group_id))
        return None if price is None else to_money(price)

    def effective_price(self, product_id, group_id) -> Decimal | None:
        staged = self.staged_value(product_id, group_id)
        return staged if staged is not None else self.baseline_value(product_id, group_id)

    def pending_triples(self) -> list[dict]:
        return [
            {"product_id": product_id, "offer_group_id": group_id, "price": as_float(price)}
            for (product_id, group_id), price in self._staged.items()
        ]

    def diff(self) -> list[dict]:
        """Staged entries that differ from the baseline, with both values."""
        changes = []
        for (product_id, group_id), price in self._staged.items():
            current = self.baseline_value(product_id, group_id)
            if current != price:
                changes.append(
                    {"product_id": product_id, "offer_group_id": group_id, "baseline": current, "staged": price}
                )
        return changes

    # -------------------------------------------------------------------
    # Submission
    # -------------------------------------------------------------------
    def apply(self) -> list[dict]:
        """Submit every staged triple in one bulk upsert.

        If the submission itself fails the exception propagates and the buffer
        is untouched. Otherwise acknowledged entries leave the buffer and the
        baseline is reloaded; if any entry was rejected ``PartialBulkFailure``
        is raised with the full per-triple results.
        """
        if not self._staged:
            return []

        results = self._submit(self.pending_triples())

        for result in results:
            if result["ok"]:
                self._staged.pop((str(result["product_id"]), str(result["offer_group_id"])), None)
        failed = [r for r in results if not r["ok"]]
        if not failed:
            self._staged.clear()

        self.load_baseline()
        logger.info("offer_overrides_applied", submitted=len(results), failed=len(failed))

        if failed:
            raise PartialBulkFailure(results)
        return results
