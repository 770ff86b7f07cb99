"""Tests for order number formatting and parsing."""

from datetime import UTC, datetime

import pytest
from ordering.order.numbering import OrderNumber, OrderSequence, parse_order_number

PLACED_AT = datetime(2026, 3, 2, 9, 5, 7, tzinfo=UTC)


class TestOrderNumber:
    def test_format(self):
        number = OrderNumber(placed_at=PLACED_AT, customer_id="42", sequence=7)

        assert str(number) == "20260302-090507-42-007"

    def test_sequence_grows_past_three_digits(self):
        assert str(OrderNumber(placed_at=PLACED_AT, customer_id="42", sequence=1234)).endswith("-1234")

    def test_parse_with_uuid_customer(self):
        customer_id = "3f2b9c1e-8d4a-4e7b-9a55-0c1d2e3f4a5b"

        parsed = parse_order_number(f"20260302-090507-{customer_id}-012")

        assert parsed.customer_id == customer_id
        assert parsed.sequence == 12
        assert parsed.placed_at == PLACED_AT

    @pytest.mark.parametrize("value", ["", "20260302", "20260302-090507-42-abc", "hello-world-x-1"])
    def test_parse_rejects_garbage(self, value):
        with pytest.raises(ValueError):
            parse_order_number(value)


class TestOrderSequence:
    def test_next_value_increments(self):
        sequence = OrderSequence(id="order-number")

        assert sequence.next_value() == 1
        assert sequence.next_value() == 2
        assert sequence.last_value == 2
