"""
Unit tests for the cart engine and like set.
"""

from decimal import Decimal

import pytest

from shopsmart.cart import (
    add_to_cart,
    cart_view,
    clear_cart,
    compute_total,
    decrement_line,
    increment_line,
    item_count,
    liked_products,
    remove_line,
    toggle_like,
)
from shopsmart.errors import UnknownProduct
from shopsmart.models import CartLine


def quantities(store):
    return {c.product_id: c.quantity for c in store.state.cart}


# ── tests ─────────────────────────────────────────────────────────────────────

class TestAddToCart:
    @pytest.mark.parametrize("n", [1, 2, 7])
    def test_repeated_adds_accumulate(self, store, n):
        for _ in range(n):
            add_to_cart(store, "p1")
        assert quantities(store) == {"p1": n}
        assert len(store.state.cart) == 1

    def test_distinct_products_get_their_own_lines(self, store):
        add_to_cart(store, "p1")
        add_to_cart(store, "p2")
        add_to_cart(store, "p1")
        assert [c.product_id for c in store.state.cart] == ["p1", "p2"]
        assert quantities(store) == {"p1": 2, "p2": 1}

    def test_unknown_product_rejected_and_cart_untouched(self, store, adapter):
        add_to_cart(store, "p1")
        with pytest.raises(UnknownProduct):
            add_to_cart(store, "nope")
        assert quantities(store) == {"p1": 1}
        assert adapter.load("cart") == [{"product_id": "p1", "quantity": 1}]

    def test_add_persists_cart(self, store, adapter):
        add_to_cart(store, "p2")
        add_to_cart(store, "p2")
        assert adapter.load("cart") == [{"product_id": "p2", "quantity": 2}]


class TestLineAdjustments:
    def test_increment_existing_line(self, store):
        add_to_cart(store, "p1")
        assert increment_line(store, "p1") is True
        assert quantities(store) == {"p1": 2}

    def test_increment_absent_line_is_noop(self, store):
        assert increment_line(store, "p1") is False
        assert store.state.cart == []

    def test_decrement_reduces_quantity(self, store):
        add_to_cart(store, "p1")
        add_to_cart(store, "p1")
        decrement_line(store, "p1")
        assert quantities(store) == {"p1": 1}

    def test_decrement_at_one_removes_line(self, store, adapter):
        add_to_cart(store, "p1")
        decrement_line(store, "p1")
        assert store.state.cart == []
        assert adapter.load("cart") == []

    def test_decrement_absent_line_is_noop(self, store):
        add_to_cart(store, "p2")
        assert decrement_line(store, "p1") is False
        assert quantities(store) == {"p2": 1}

    def test_remove_line(self, store):
        add_to_cart(store, "p1")
        add_to_cart(store, "p2")
        remove_line(store, "p1")
        assert quantities(store) == {"p2": 1}
        remove_line(store, "p1")  # absent: no-op
        assert quantities(store) == {"p2": 1}

    def test_clear_cart(self, store):
        add_to_cart(store, "p1")
        add_to_cart(store, "p3")
        clear_cart(store)
        assert store.state.cart == []
        assert item_count(store) == 0


class TestTotals:
    def test_total_sums_price_times_quantity(self, store):
        add_to_cart(store, "p1")  # 300
        add_to_cart(store, "p1")
        add_to_cart(store, "p2")  # 4500
        assert compute_total(store) == Decimal("5100.00")
        assert item_count(store) == 3

    def test_empty_cart_totals_zero(self, store):
        assert compute_total(store) == Decimal("0.00")

    def test_dangling_line_is_skipped(self, store):
        add_to_cart(store, "p2")
        store.state.cart.append(CartLine(product_id="gone", quantity=3))
        assert compute_total(store) == Decimal("4500.00")
        view = cart_view(store)
        assert [line.product.id for line in view.lines] == ["p2"]
        assert view.total == Decimal("4500.00")

    def test_cart_view_subtotals(self, store):
        add_to_cart(store, "p5")
        add_to_cart(store, "p5")
        view = cart_view(store)
        assert view.lines[0].subtotal == Decimal("1600.00")
        assert view.item_count == 2


class TestLikes:
    def test_toggle_adds_then_removes(self, store, adapter):
        assert toggle_like(store, "p3") is True
        assert store.state.likes == ["p3"]
        assert adapter.load("likes") == ["p3"]
        assert toggle_like(store, "p3") is False
        assert store.state.likes == []

    def test_like_needs_no_existing_product(self, store):
        assert toggle_like(store, "ghost") is True
        assert liked_products(store) == []

    def test_liked_products_resolve_in_like_order(self, store):
        toggle_like(store, "p4")
        toggle_like(store, "p1")
        assert [p.id for p in liked_products(store)] == ["p4", "p1"]
