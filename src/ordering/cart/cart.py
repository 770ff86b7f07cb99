"""Cart aggregate: a customer's live selection of products and quantities.

One cart per customer: the cart shares its identity with the customer. The
cart stores only products and quantities; prices are never stored here and
are resolved afresh on every view (see ``ordering.cart.view``).
"""

from datetime import UTC, datetime

from protean.fields import DateTime, HasMany, Identifier, Integer

from ordering.cart.events import CartCleared, CartItemAdded, CartItemQuantitySet, CartItemRemoved
from ordering.domain import ordering
from ordering.exceptions import InvalidQuantity


def _checked_quantity(quantity, minimum):
    if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < minimum:
        raise InvalidQuantity({"quantity": [f"Quantity must be a whole number of at least {minimum}"]})
    return quantity


@ordering.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    added_at = DateTime()
    updated_at = DateTime()


@ordering.aggregate
class Cart:
    customer_id = Identifier(required=True)
    items = HasMany(CartItem)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(id=str(customer_id), customer_id=customer_id, created_at=now, updated_at=now)

    def item_for(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    @property
    def total_quantity(self):
        return sum(i.quantity for i in self.items)

    # -------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity):
        """Insert the product, or increase its quantity if already in the cart."""
        _checked_quantity(quantity, minimum=1)

        now = datetime.now(UTC)
        existing = self.item_for(product_id)
        if existing:
            existing.quantity += quantity
            existing.updated_at = now
            new_quantity = existing.quantity
        else:
            self.add_items(CartItem(product_id=product_id, quantity=quantity, added_at=now, updated_at=now))
            new_quantity = quantity
        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                quantity_added=quantity,
                new_quantity=new_quantity,
            )
        )

    def update_item(self, product_id, quantity):
        """Set the quantity of a product; zero removes it."""
        _checked_quantity(quantity, minimum=0)
        if quantity == 0:
            self.remove_item(product_id)
            return

        now = datetime.now(UTC)
        existing = self.item_for(product_id)
        previous = existing.quantity if existing else None
        if existing:
            existing.quantity = quantity
            existing.updated_at = now
        else:
            self.add_items(CartItem(product_id=product_id, quantity=quantity, added_at=now, updated_at=now))
        self.updated_at = now

        self.raise_(
            CartItemQuantitySet(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                product_id=str(product_id),
                previous_quantity=previous,
                new_quantity=quantity,
            )
        )

    def remove_item(self, product_id):
        """Remove a product. Removing something not in the cart is a no-op."""
        existing = self.item_for(product_id)
        if existing is None:
            return False

        self.remove_items(existing)
        self.updated_at = datetime.now(UTC)
        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                product_id=str(product_id),
            )
        )
        return True

    def clear(self):
        count = len(self.items)
        if not count:
            return

        for item in list(self.items):
            self.remove_items(item)
        now = datetime.now(UTC)
        self.updated_at = now
        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                customer_id=str(self.customer_id),
                items_removed=count,
                cleared_at=now,
            )
        )
