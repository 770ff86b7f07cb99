"""Shared BDD fixtures and step definitions for the Ordering domain."""

import json
from datetime import UTC, datetime

import pytest
from ordering.cart.cart import Cart
from ordering.cart.events import CartCleared, CartItemAdded, CartItemQuantitySet, CartItemRemoved
from ordering.order.events import OrderPlaced, OrderStatusChanged
from ordering.order.order import Order
from ordering.order.status import TransitionOrderStatus
from protean.exceptions import ValidationError
from protean.testing import given as given_
from pytest_bdd import given, parsers, then

_ORDER_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "OrderStatusChanged": OrderStatusChanged,
}

_CART_EVENT_CLASSES = {
    "CartItemAdded": CartItemAdded,
    "CartItemQuantitySet": CartItemQuantitySet,
    "CartItemRemoved": CartItemRemoved,
    "CartCleared": CartCleared,
}


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def order_id():
    return "ord-001"


@pytest.fixture()
def customer_id():
    return "cust-001"


@pytest.fixture()
def error():
    """Container for captured validation errors (used by cart tests)."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Event fixtures (past tense: what happened)
# ---------------------------------------------------------------------------
@pytest.fixture()
def order_placed(order_id, customer_id):
    placed_at = datetime.now(UTC)
    return OrderPlaced(
        order_id=order_id,
        order_number=f"{placed_at:%Y%m%d-%H%M%S}-{customer_id}-001",
        customer_id=customer_id,
        items=json.dumps(
            [
                {
                    "id": "item-1",
                    "product_id": "prod-001",
                    "product_name": "Tomater",
                    "sku": "TOM-001",
                    "unit": "kg",
                    "quantity": 3,
                    "pricing": {
                        "price": 90.0,
                        "original_price": 100.0,
                        "discount_type": "rabatGruppe",
                        "discount_label": "Guld rabat",
                        "discount_percentage": 10,
                        "show_strikethrough": True,
                    },
                    "item_total": 270.0,
                    "item_original_total": 300.0,
                    "item_savings": 30.0,
                }
            ]
        ),
        customer=json.dumps({"customer_id": customer_id, "company_name": "Café Nord ApS"}),
        total_items=3,
        subtotal=300.0,
        total_amount=270.0,
        total_savings=30.0,
        history_entry_id="hist-1",
        placed_at=placed_at,
    )


def _status_changed(order_placed, previous, new, entry):
    return OrderStatusChanged(
        order_id=order_placed.order_id,
        order_number=order_placed.order_number,
        customer_id=order_placed.customer_id,
        previous_status=previous,
        new_status=new,
        history_entry_id=entry,
        changed_at=datetime.now(UTC),
    )


@pytest.fixture()
def order_confirmed(order_placed):
    return _status_changed(order_placed, "order_placed", "order_confirmed", "hist-2")


@pytest.fixture()
def order_in_transit(order_placed):
    return _status_changed(order_placed, "order_confirmed", "in_transit", "hist-3")


@pytest.fixture()
def order_delivered(order_placed):
    return _status_changed(order_placed, "in_transit", "delivered", "hist-4")


@pytest.fixture()
def order_rejected(order_placed):
    return _status_changed(order_placed, "order_placed", "rejected", "hist-5")


# ---------------------------------------------------------------------------
# Command fixtures (imperative: what to do)
# ---------------------------------------------------------------------------
@pytest.fixture()
def transition_to(order_id):
    def _command(status, note=None):
        return TransitionOrderStatus(order_id=order_id, new_status=status, note=note)

    return _command


# ---------------------------------------------------------------------------
# Given steps: Order (event sourcing via protean.testing)
# ---------------------------------------------------------------------------
@given("an order was placed", target_fixture="order")
def _(order_placed):
    return given_(Order, order_placed)


@given("the order was confirmed", target_fixture="order")
def _(order, order_confirmed):
    return order.after(order_confirmed)


@given("the order is in transit", target_fixture="order")
def _(order, order_in_transit):
    return order.after(order_in_transit)


@given("the order was delivered", target_fixture="order")
def _(order, order_delivered):
    return order.after(order_delivered)


@given("the order was rejected", target_fixture="order")
def _(order, order_rejected):
    return order.after(order_rejected)


# ---------------------------------------------------------------------------
# Given steps: Cart
# ---------------------------------------------------------------------------
@given("an empty cart", target_fixture="cart")
def empty_cart(customer_id):
    cart = Cart.create(customer_id=customer_id)
    cart._events.clear()
    return cart


@given(parsers.cfparse('the cart holds {qty:d} of "{product_id}"'), target_fixture="cart")
def cart_with_item(cart, qty, product_id):
    cart.add_item(product_id, qty)
    cart._events.clear()
    return cart


# ---------------------------------------------------------------------------
# Then steps: Order (shared, plain assertions)
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def _(order, status):
    assert order.status == status


@then("the order action fails with a validation error")
def _(order):
    assert order.rejected
    assert isinstance(order.rejection, ValidationError)


@then(parsers.cfparse("an {event_type} order event is raised"))
def _(order, event_type):
    event_cls = _ORDER_EVENT_CLASSES[event_type]
    assert event_cls in order.events


# ---------------------------------------------------------------------------
# Then steps: Cart
# ---------------------------------------------------------------------------
@then("the cart action fails with a validation error")
def cart_action_fails(error):
    assert error["exc"] is not None, "Expected a validation error but none was raised"
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("a {event_type} cart event is raised"))
def cart_event_raised(cart, event_type):
    event_cls = _CART_EVENT_CLASSES[event_type]
    assert any(
        isinstance(e, event_cls) for e in cart._events
    ), f"No {event_type} event found. Events: {[type(e).__name__ for e in cart._events]}"


@then("no cart event is raised")
def no_cart_event(cart):
    assert cart._events == []
