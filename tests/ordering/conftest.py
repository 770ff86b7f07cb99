from datetime import UTC, datetime, timedelta

import pytest


@pytest.fixture(scope="session")
def _ordering_domain(request):
    """Initialize the ordering domain once per session."""
    from ordering.domain import ordering

    ordering.init()
    return ordering


@pytest.fixture(scope="session", autouse=True)
def setup_db(_ordering_domain):
    from ordering.utils.db import drop_db, setup_db

    setup_db(_ordering_domain)

    yield

    drop_db(_ordering_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_ordering_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _ordering_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


# ---------------------------------------------------------------------------
# Persisted reference data
# ---------------------------------------------------------------------------
@pytest.fixture()
def now():
    return datetime(2026, 3, 2, 10, 30, tzinfo=UTC)


@pytest.fixture()
def standard_group():
    from ordering.discount.discount_group import DiscountGroup
    from protean import current_domain

    return current_domain.repository_for(DiscountGroup).standard()


@pytest.fixture()
def make_group():
    from ordering.discount.discount_group import DiscountGroup
    from protean import current_domain

    def _make(name="Restaurant", percentage=10.0):
        group = DiscountGroup.create(name=name, percentage=percentage)
        current_domain.repository_for(DiscountGroup).add(group)
        return group

    return _make


@pytest.fixture()
def make_product():
    from ordering.catalogue.product import Product
    from protean import current_domain

    def _make(sku="TOM-001", name="Tomater", base_price=100.0, **kwargs):
        product = Product.register(sku=sku, name=name, base_price=base_price, **kwargs)
        current_domain.repository_for(Product).add(product)
        return product

    return _make


@pytest.fixture()
def make_customer(standard_group):
    from ordering.customer.customer import Customer
    from protean import current_domain

    def _make(group=None, company_name="Café Nord ApS", email="indkoeb@cafenord.dk"):
        customer = Customer.register(
            company_name=company_name,
            email=email,
            discount_group_id=(group or standard_group).id,
            contact_name="Mette Holm",
            cvr="12345678",
        )
        current_domain.repository_for(Customer).add(customer)
        return customer

    return _make


@pytest.fixture()
def make_unique_offer():
    from ordering.discount.unique_offer import UniqueOffer
    from protean import current_domain

    def _make(customer, product, fixed_price, **kwargs):
        offer = UniqueOffer.create(customer_id=customer.id, product_id=product.id, fixed_price=fixed_price, **kwargs)
        current_domain.repository_for(UniqueOffer).add(offer)
        return offer

    return _make


@pytest.fixture()
def make_flash_sale():
    from ordering.discount.flash_sale import FlashSale
    from protean import current_domain

    def _make(product, sale_price, valid_from=None, valid_to=None):
        starts = valid_from or datetime.now(UTC) - timedelta(hours=1)
        sale = FlashSale.start(
            product_id=product.id,
            sale_price=sale_price,
            valid_from=starts,
            valid_to=valid_to or starts + timedelta(days=2),
        )
        current_domain.repository_for(FlashSale).add(sale)
        return sale

    return _make


@pytest.fixture()
def make_group_price():
    from ordering.discount.offer_group_price import OfferGroupPrice
    from protean import current_domain

    def _make(product, group, price):
        override = OfferGroupPrice.create(product_id=product.id, discount_group_id=group.id, price=price)
        current_domain.repository_for(OfferGroupPrice).add(override)
        return override

    return _make
