"""Application tests for cart commands: live pricing through the domain."""

from decimal import Decimal

import pytest
from ordering.cart.cart import Cart
from ordering.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem
from ordering.cart.view import view_cart
from ordering.discount.management import UpdateDiscountGroup
from ordering.exceptions import InvalidQuantity, NotAuthenticated, ProductInactive
from protean import current_domain
from protean.exceptions import ObjectNotFoundError


@pytest.fixture()
def guld(make_group):
    return make_group(name="Guld", percentage=10.0)


@pytest.fixture()
def customer(make_customer, guld):
    return make_customer(group=guld)


@pytest.fixture()
def tomater(make_product):
    return make_product(sku="TOM-001", name="Tomater", base_price=100.0, unit="kg")


def _add(customer_id, product_id, quantity):
    return current_domain.process(
        AddToCart(customer_id=customer_id, product_id=product_id, quantity=quantity), asynchronous=False
    )


class TestAddToCart:
    def test_returns_priced_view(self, customer, tomater):
        view = _add(customer.id, tomater.id, 3)

        line = view.items[0]
        assert line.quantity == 3
        assert line.pricing.price == Decimal("90.00")
        assert line.item_total == Decimal("270.00")
        assert line.item_original_total == Decimal("300.00")
        assert line.item_savings == Decimal("30.00")
        assert view.total_items == 3
        assert view.total_price == Decimal("270.00")
        assert view.total_savings == Decimal("30.00")

    def test_cart_is_persisted_under_customer_id(self, customer, tomater):
        _add(customer.id, tomater.id, 2)

        cart = current_domain.repository_for(Cart).get(customer.id)
        assert cart.item_for(tomater.id).quantity == 2

    def test_requires_customer(self, tomater):
        with pytest.raises(NotAuthenticated):
            _add(None, tomater.id, 1)

    def test_unknown_customer(self, tomater):
        with pytest.raises(ObjectNotFoundError):
            _add("ghost", tomater.id, 1)

    def test_inactive_product_rejected(self, customer, tomater):
        tomater.deactivate()
        current_domain.repository_for(type(tomater)).add(tomater)

        with pytest.raises(ProductInactive):
            _add(customer.id, tomater.id, 1)

    def test_zero_quantity_rejected(self, customer, tomater):
        with pytest.raises(InvalidQuantity):
            _add(customer.id, tomater.id, 0)

        assert view_cart(customer.id).is_empty


class TestUpdateAndRemove:
    def test_update_sets_quantity(self, customer, tomater):
        _add(customer.id, tomater.id, 3)

        view = current_domain.process(
            UpdateCartItem(customer_id=customer.id, product_id=tomater.id, quantity=5), asynchronous=False
        )

        assert view.items[0].quantity == 5
        assert view.total_price == Decimal("450.00")

    def test_update_to_zero_removes(self, customer, tomater):
        _add(customer.id, tomater.id, 3)

        view = current_domain.process(
            UpdateCartItem(customer_id=customer.id, product_id=tomater.id, quantity=0), asynchronous=False
        )

        assert view.is_empty

    def test_remove_twice_is_harmless(self, customer, tomater):
        _add(customer.id, tomater.id, 3)
        command = RemoveFromCart(customer_id=customer.id, product_id=tomater.id)

        first = current_domain.process(command, asynchronous=False)
        second = current_domain.process(command, asynchronous=False)

        assert first.is_empty
        assert second.is_empty

    def test_clear(self, customer, tomater, make_product):
        agurk = make_product(sku="AGU-001", name="Agurk", base_price=8.0, unit="stk")
        _add(customer.id, tomater.id, 3)
        _add(customer.id, agurk.id, 10)

        view = current_domain.process(ClearCart(customer_id=customer.id), asynchronous=False)

        assert view.is_empty
        assert view.total_price == Decimal("0.00")


class TestLivePricing:
    def test_view_reflects_group_change_immediately(self, customer, tomater, guld):
        _add(customer.id, tomater.id, 3)

        current_domain.process(UpdateDiscountGroup(group_id=guld.id, percentage=20.0), asynchronous=False)

        view = view_cart(customer.id)
        assert view.items[0].pricing.price == Decimal("80.00")
        assert view.total_price == Decimal("240.00")

    def test_totals_equal_sum_of_lines(self, customer, tomater, make_product, make_flash_sale):
        ost = make_product(sku="OST-001", name="Ost", base_price=33.33, unit="kg")
        make_flash_sale(ost, 29.99)
        _add(customer.id, tomater.id, 3)
        _add(customer.id, ost.id, 7)

        view = view_cart(customer.id)

        assert view.total_price == sum(line.item_total for line in view.items)
        assert view.total_original_price == sum(line.item_original_total for line in view.items)
        assert view.total_savings == sum(line.item_savings for line in view.items)

    def test_line_priced_above_original_keeps_other_savings(self, customer, tomater, make_product, make_unique_offer):
        agurker = make_product(sku="AGU-001", name="Agurker", base_price=100.0, unit="stk")
        make_unique_offer(customer, agurker, 120.0)
        _add(customer.id, tomater.id, 1)
        _add(customer.id, agurker.id, 1)

        view = view_cart(customer.id)

        by_sku = {line.sku: line for line in view.items}
        assert by_sku["TOM-001"].item_savings == Decimal("10.00")
        assert by_sku["AGU-001"].item_total == Decimal("120.00")
        assert by_sku["AGU-001"].item_savings == Decimal("0.00")
        assert view.total_price == Decimal("210.00")
        assert view.total_original_price == Decimal("200.00")
        assert view.total_savings == Decimal("10.00")

    def test_lines_for_deleted_products_are_dropped(self, customer, tomater):
        _add(customer.id, tomater.id, 3)
        repo = current_domain.repository_for(Cart)
        cart = repo.get(customer.id)
        cart.add_item("prod-deleted", 1)
        repo.add(cart)

        view = view_cart(customer.id)

        assert [line.product_id for line in view.items] == [str(tomater.id)]

    def test_view_without_cart_is_empty(self, customer):
        view = view_cart(customer.id)

        assert view.is_empty
        assert view.total_items == 0

    def test_view_requires_customer(self):
        with pytest.raises(NotAuthenticated):
            view_cart(None)
