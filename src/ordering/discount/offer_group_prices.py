"""Offer-group price overrides: bulk upsert and removal.

A bulk upsert is best effort, not a transaction: every triple is validated
and written on its own, and the handler returns one result per triple so the
caller can tell exactly which entries failed. Failures never abort the
triples that are valid.
"""

import json
import math

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from ordering.catalogue.product import Product
from ordering.discount.discount_group import DiscountGroup
from ordering.discount.offer_group_price import OfferGroupPrice
from ordering.domain import logger, ordering


@ordering.command(part_of="OfferGroupPrice")
class BulkUpsertOfferGroupPrices:
    prices = Text(required=True)  # JSON: list of {product_id, offer_group_id, price}


@ordering.command(part_of="OfferGroupPrice")
class RemoveOfferGroupPrice:
    product_id = Identifier(required=True)
    offer_group_id = Identifier(required=True)


def _result(product_id, offer_group_id, price, error=None):
    return {
        "product_id": product_id,
        "offer_group_id": offer_group_id,
        "price": price,
        "ok": error is None,
        "error": error,
    }


def _parse_price(raw):
    if isinstance(raw, bool) or raw is None:
        return None
    try:
        price = float(raw)
    except (TypeError, ValueError):
        return None
    if math.isnan(price) or math.isinf(price) or price < 0:
        return None
    return price


def _dedupe(triples):
    """Keep the last triple per (product, group) pair, in first-seen order."""
    by_pair = {}
    for triple in triples:
        key = (str(triple.get("product_id")), str(triple.get("offer_group_id")))
        by_pair.pop(key, None)
        by_pair[key] = triple
    return list(by_pair.values())


@ordering.command_handler(part_of=OfferGroupPrice)
class ManageOfferGroupPricesHandler:
    @handle(BulkUpsertOfferGroupPrices)
    def bulk_upsert(self, command):
        triples = json.loads(command.prices) if isinstance(command.prices, str) else command.prices

        products = current_domain.repository_for(Product)
        groups = current_domain.repository_for(DiscountGroup)
        overrides = current_domain.repository_for(OfferGroupPrice)

        results = []
        for triple in _dedupe(triples):
            product_id = str(triple.get("product_id") or "")
            group_id = str(triple.get("offer_group_id") or "")
            raw_price = triple.get("price")

            if not product_id or not group_id:
                results.append(_result(product_id, group_id, raw_price, "product_id and offer_group_id are required"))
                continue

            price = _parse_price(raw_price)
            if price is None:
                results.append(_result(product_id, group_id, raw_price, "Price must be a number >= 0"))
                continue

            try:
                products.get(product_id)
            except ObjectNotFoundError:
                results.append(_result(product_id, group_id, price, "Unknown product"))
                continue

            try:
                group = groups.get(group_id)
            except ObjectNotFoundError:
                results.append(_result(product_id, group_id, price, "Unknown offer group"))
                continue
            if not group.is_active:
                results.append(_result(product_id, group_id, price, "Offer group is inactive"))
                continue

            override = overrides.for_pair(product_id, group_id)
            if override is None:
                override = OfferGroupPrice.create(product_id=product_id, discount_group_id=group_id, price=price)
            else:
                override.set_price(price)
            overrides.add(override)
            results.append(_result(product_id, group_id, override.price))

        failed = sum(1 for r in results if not r["ok"])
        logger.info("offer_group_prices_upserted", written=len(results) - failed, failed=failed)
        return results

    @handle(RemoveOfferGroupPrice)
    def remove_offer_group_price(self, command):
        repo = current_domain.repository_for(OfferGroupPrice)
        override = repo.active_for(command.product_id, command.offer_group_id)
        if override is None:
            raise ValidationError({"offer_group_price": ["No active override for this product and group"]})
        override.remove()
        repo.add(override)
