"""Cart mutations: commands and handler.

Every handler returns the freshly priced ``CartView`` so callers never have to
re-read the cart after changing it.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.view import build_cart_view
from ordering.catalogue.product import Product
from ordering.customer.customer import Customer
from ordering.domain import logger, ordering
from ordering.exceptions import NotAuthenticated, ProductInactive
from ordering.pricing.catalog import PriceCatalog


@ordering.command(part_of="Cart")
class AddToCart:
    customer_id = Identifier()
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@ordering.command(part_of="Cart")
class UpdateCartItem:
    customer_id = Identifier()
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@ordering.command(part_of="Cart")
class RemoveFromCart:
    customer_id = Identifier()
    product_id = Identifier(required=True)


@ordering.command(part_of="Cart")
class ClearCart:
    customer_id = Identifier()


def _cart_for(customer_id):
    if not customer_id:
        raise NotAuthenticated()

    try:
        return current_domain.repository_for(Cart).get(customer_id)
    except ObjectNotFoundError:
        customer = current_domain.repository_for(Customer).get(customer_id)
        return Cart.create(customer.id)


def _orderable_product(product_id):
    product = current_domain.repository_for(Product).get(product_id)
    if not product.is_active:
        raise ProductInactive({"product_id": [f"Product {product.sku} is no longer available"]})
    return product


@ordering.command_handler(part_of=Cart)
class ManageCartHandler:
    def _save(self, cart):
        current_domain.repository_for(Cart).add(cart)
        return build_cart_view(cart, PriceCatalog())

    @handle(AddToCart)
    def add_to_cart(self, command):
        cart = _cart_for(command.customer_id)
        product = _orderable_product(command.product_id)
        cart.add_item(product.id, command.quantity)
        logger.info(
            "cart_item_added",
            customer_id=str(cart.customer_id),
            product_id=str(product.id),
            quantity=command.quantity,
        )
        return self._save(cart)

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        cart = _cart_for(command.customer_id)
        if command.quantity and cart.item_for(command.product_id) is None:
            _orderable_product(command.product_id)
        cart.update_item(command.product_id, command.quantity)
        return self._save(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        cart = _cart_for(command.customer_id)
        cart.remove_item(command.product_id)
        return self._save(cart)

    @handle(ClearCart)
    def clear_cart(self, command):
        cart = _cart_for(command.customer_id)
        cart.clear()
        return self._save(cart)
