"""Catalogue management: commands and handler."""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from ordering.catalogue.product import Product
from ordering.domain import ordering


@ordering.command(part_of="Product")
class RegisterProduct:
    sku = String(required=True, max_length=50)
    name = String(required=True, max_length=255)
    base_price = Float(required=True, min_value=0.01)
    unit = String(max_length=10)
    category = String(max_length=100)
    discount_label = String(max_length=50)


@ordering.command(part_of="Product")
class ChangeBasePrice:
    product_id = Identifier(required=True)
    new_price = Float(required=True)


@ordering.command(part_of="Product")
class ActivateProduct:
    product_id = Identifier(required=True)


@ordering.command(part_of="Product")
class DeactivateProduct:
    product_id = Identifier(required=True)


@ordering.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(RegisterProduct)
    def register_product(self, command):
        product = Product.register(
            sku=command.sku,
            name=command.name,
            base_price=command.base_price,
            unit=command.unit,
            category=command.category,
            discount_label=command.discount_label,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(ChangeBasePrice)
    def change_base_price(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.change_base_price(command.new_price)
        repo.add(product)

    @handle(ActivateProduct)
    def activate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.activate()
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deactivate()
        repo.add(product)
