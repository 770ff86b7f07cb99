"""Discount configuration: commands and handlers for groups, unique offers and flash sales."""

from protean import handle
from protean.fields import Boolean, DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.discount.discount_group import DiscountGroup
from ordering.discount.flash_sale import FlashSale
from ordering.discount.unique_offer import UniqueOffer
from ordering.domain import logger, ordering


# ---------------------------------------------------------------------------
# Discount groups
# ---------------------------------------------------------------------------
@ordering.command(part_of="DiscountGroup")
class CreateDiscountGroup:
    name = String(required=True, max_length=100)
    percentage = Float(default=0.0)
    color = String(max_length=7)
    description = Text()


@ordering.command(part_of="DiscountGroup")
class UpdateDiscountGroup:
    group_id = Identifier(required=True)
    name = String(max_length=100)
    percentage = Float()
    color = String(max_length=7)
    description = Text()


@ordering.command(part_of="DiscountGroup")
class DeactivateDiscountGroup:
    group_id = Identifier(required=True)


@ordering.command_handler(part_of=DiscountGroup)
class ManageDiscountGroupHandler:
    @handle(CreateDiscountGroup)
    def create_discount_group(self, command):
        group = DiscountGroup.create(
            name=command.name,
            percentage=command.percentage or 0.0,
            color=command.color,
            description=command.description,
        )
        current_domain.repository_for(DiscountGroup).add(group)
        return str(group.id)

    @handle(UpdateDiscountGroup)
    def update_discount_group(self, command):
        repo = current_domain.repository_for(DiscountGroup)
        group = repo.get(command.group_id)
        group.update(
            name=command.name,
            percentage=command.percentage,
            color=command.color,
            description=command.description,
        )
        repo.add(group)

    @handle(DeactivateDiscountGroup)
    def deactivate_discount_group(self, command):
        repo = current_domain.repository_for(DiscountGroup)
        group = repo.get(command.group_id)
        group.deactivate()
        repo.add(group)


# ---------------------------------------------------------------------------
# Unique offers
# ---------------------------------------------------------------------------
@ordering.command(part_of="UniqueOffer")
class CreateUniqueOffer:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    fixed_price = Float(required=True, min_value=0.0)
    valid_from = DateTime()
    valid_to = DateTime()
    is_unlimited = Boolean(default=False)
    description = Text()
    replace_existing = Boolean(default=True)  # deactivate earlier active offers for the pair


@ordering.command(part_of="UniqueOffer")
class DeactivateUniqueOffer:
    offer_id = Identifier(required=True)


@ordering.command_handler(part_of=UniqueOffer)
class ManageUniqueOfferHandler:
    @handle(CreateUniqueOffer)
    def create_unique_offer(self, command):
        repo = current_domain.repository_for(UniqueOffer)

        if command.replace_existing:
            for existing in repo.for_pair(command.customer_id, command.product_id):
                if existing.is_active:
                    existing.deactivate()
                    repo.add(existing)
                    logger.info(
                        "unique_offer_replaced",
                        offer_id=str(existing.id),
                        customer_id=str(command.customer_id),
                        product_id=str(command.product_id),
                    )

        offer = UniqueOffer.create(
            customer_id=command.customer_id,
            product_id=command.product_id,
            fixed_price=command.fixed_price,
            valid_from=command.valid_from,
            valid_to=command.valid_to,
            is_unlimited=bool(command.is_unlimited),
            description=command.description,
        )
        repo.add(offer)
        return str(offer.id)

    @handle(DeactivateUniqueOffer)
    def deactivate_unique_offer(self, command):
        repo = current_domain.repository_for(UniqueOffer)
        offer = repo.get(command.offer_id)
        offer.deactivate()
        repo.add(offer)


# ---------------------------------------------------------------------------
# Flash sales
# ---------------------------------------------------------------------------
@ordering.command(part_of="FlashSale")
class StartFlashSale:
    product_id = Identifier(required=True)
    sale_price = Float(required=True, min_value=0.0)
    valid_from = DateTime(required=True)
    valid_to = DateTime(required=True)


@ordering.command(part_of="FlashSale")
class EndFlashSale:
    flash_sale_id = Identifier(required=True)


@ordering.command_handler(part_of=FlashSale)
class ManageFlashSaleHandler:
    @handle(StartFlashSale)
    def start_flash_sale(self, command):
        sale = FlashSale.start(
            product_id=command.product_id,
            sale_price=command.sale_price,
            valid_from=command.valid_from,
            valid_to=command.valid_to,
        )
        current_domain.repository_for(FlashSale).add(sale)
        return str(sale.id)

    @handle(EndFlashSale)
    def end_flash_sale(self, command):
        repo = current_domain.repository_for(FlashSale)
        sale = repo.get(command.flash_sale_id)
        sale.end()
        repo.add(sale)
