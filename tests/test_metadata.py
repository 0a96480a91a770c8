"""Tests for the payment metadata payload."""

import warnings

import pytest

from ticketfee import (
    CartLineItem,
    CustomerInfo,
    compute_cart_totals,
    format_order_metadata,
)


@pytest.fixture
def customer():
    return {
        "firstName": "Ada",
        "lastName": "Okafor",
        "email": "ada@example.ng",
        "phone": "+2348012345678",
        "city": "Lagos",
        "state": "Lagos",
        "country": "Nigeria",
    }


class TestCustomerInfo:
    """Tests for CustomerInfo field names."""

    def test_wire_and_python_names(self, customer):
        from_wire = CustomerInfo.model_validate(customer)
        from_python = CustomerInfo(first_name="Ada", last_name="Okafor", email="ada@example.ng",
                                   phone="+2348012345678", city="Lagos", state="Lagos",
                                   country="Nigeria")
        assert from_wire == from_python
        assert from_wire.to_wire() == customer

    def test_missing_fields_are_none(self):
        assert CustomerInfo(email="a@b.ng").to_wire()["firstName"] is None


class TestFormatOrderMetadata:
    """Tests for format_order_metadata."""

    def test_top_level_keys(self, mixed_cart, customer):
        payload = format_order_metadata(compute_cart_totals(mixed_cart), customer, mixed_cart)
        assert set(payload) == {"customer_info", "order_breakdown", "items"}
        assert payload["customer_info"] == customer

    def test_order_breakdown(self, mixed_cart, customer, close):
        totals = compute_cart_totals(mixed_cart)
        breakdown = format_order_metadata(totals, customer, mixed_cart)["order_breakdown"]

        assert set(breakdown) == {
            "subtotal", "service_fee", "vat_amount", "total_fees",
            "final_total", "item_count", "has_mixed_tiers",
        }
        close(breakdown["subtotal"], 22000.0)
        close(breakdown["vat_amount"], 127.5)
        close(breakdown["final_total"], 23827.5)
        assert breakdown["item_count"] == 3
        assert breakdown["has_mixed_tiers"] is True

    def test_items_carry_computed_and_original_fields(self, mixed_cart, customer, close):
        totals = compute_cart_totals(mixed_cart)
        items = format_order_metadata(totals, customer, mixed_cart)["items"]

        assert len(items) == 2
        vip = items[1]
        assert vip["event_title"] == "Afrobeats Live"
        assert vip["tier_name"] == "VIP"
        assert vip["tier"] == "premium"
        close(vip["price_per_ticket"], 10000.0)
        close(vip["service_fee"], 1500.0)
        close(vip["vat"], 112.5)
        # Original cart fields are passed through unchanged
        assert vip["cartId"] == "cart-2"
        assert vip["eventId"] == "evt-afrobeats"
        assert vip["price"] == 1000000

        assert items[0]["tier"] == "small"

    def test_computed_keys_come_first(self, mixed_cart, customer):
        items = format_order_metadata(compute_cart_totals(mixed_cart), customer, mixed_cart)["items"]
        assert list(items[0])[:8] == [
            "event_title", "tier_name", "price_per_ticket", "quantity",
            "subtotal", "service_fee", "vat", "tier",
        ]

    def test_cart_fields_win_on_collision(self, customer):
        cart = [{"cartId": "a", "price": 200000, "quantity": 1, "subtotal": "client-side"}]
        items = format_order_metadata(compute_cart_totals(cart), customer, cart)["items"]
        assert items[0]["subtotal"] == "client-side"

    def test_merge_is_keyed_by_cart_id(self, mixed_cart, customer):
        """A reordered cart still lines up each row with its own item."""
        totals = compute_cart_totals(mixed_cart)
        reordered = list(reversed(mixed_cart))

        items = format_order_metadata(totals, customer, reordered)["items"]

        assert items[0]["cartId"] == "cart-1"
        assert items[0]["eventId"] == "evt-lagos-jazz"
        assert items[1]["cartId"] == "cart-2"
        assert items[1]["eventId"] == "evt-afrobeats"

    def test_filtered_cart_warns(self, mixed_cart, customer):
        totals = compute_cart_totals(mixed_cart)

        with pytest.warns(RuntimeWarning, match="cart-2"):
            items = format_order_metadata(totals, customer, mixed_cart[:1])["items"]

        assert len(items) == 2
        assert items[0]["eventId"] == "evt-lagos-jazz"
        assert "eventId" not in items[1]
        assert items[1]["tier"] == "premium"

    def test_no_warning_when_all_rows_match(self, mixed_cart, customer):
        totals = compute_cart_totals(mixed_cart)
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            format_order_metadata(totals, customer, mixed_cart)

    def test_line_item_models(self, customer):
        cart = [CartLineItem(cart_id="a", price=200000, event_title="Gig")]
        items = format_order_metadata(compute_cart_totals(cart), customer, cart)["items"]
        assert items[0]["cartId"] == "a"
        assert items[0]["eventTitle"] == "Gig"
        assert items[0]["event_title"] == "Gig"

    def test_fallback_to_id(self, customer):
        cart = [{"id": 17, "price": 200000}]
        items = format_order_metadata(compute_cart_totals(cart), customer, cart)["items"]
        assert items[0]["id"] == 17
        assert items[0]["price"] == 200000

    def test_lines_without_id_match_by_position(self, customer):
        cart = [
            {"price": 200000, "eventId": "e1"},
            {"cartId": "b", "price": 1000000, "eventId": "e2"},
            {"price": 50000, "eventId": "e3"},
        ]
        totals = compute_cart_totals(cart)

        with warnings.catch_warnings():
            warnings.simplefilter("error")
            items = format_order_metadata(totals, customer, cart)["items"]

        assert [item["eventId"] for item in items] == ["e1", "e2", "e3"]
        assert items[0]["price"] == 200000
        assert items[2]["tier"] == "small"

    def test_customer_model(self, mixed_cart, customer):
        info = CustomerInfo.model_validate(customer)
        payload = format_order_metadata(compute_cart_totals(mixed_cart), info, mixed_cart)
        assert payload["customer_info"]["firstName"] == "Ada"

    def test_empty_cart(self, customer):
        payload = format_order_metadata(compute_cart_totals([]), customer, [])
        assert payload["items"] == []
        assert payload["order_breakdown"]["final_total"] == 0.0
        assert payload["order_breakdown"]["has_mixed_tiers"] is False
