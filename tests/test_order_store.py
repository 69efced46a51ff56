"""Tests for the in-memory order store."""

import pytest

from orders_api.orders import OrderStatus, OrderStore


class TestOrderStore:
    """Test cases for OrderStore class."""

    @pytest.fixture
    def store(self):
        return OrderStore()

    def test_ids_start_at_one_and_increase(self, store):
        orders = [store.add("Alice", ["x"], 10) for _ in range(5)]

        assert [o.id for o in orders] == [1, 2, 3, 4, 5]

    def test_new_orders_are_pending(self, store):
        order = store.add("Alice", ["x"], 10)

        assert order.status == OrderStatus.PENDING
        assert not order.is_completed
        assert order.created_at.endswith("Z")

    def test_list_preserves_insertion_order(self, store):
        for name in ("Charlie", "Alice", "Bob"):
            store.add(name, ["x"], 10)

        assert [o.customer for o in store.list()] == ["Charlie", "Alice", "Bob"]

    def test_list_returns_a_copy(self, store):
        store.add("Alice", ["x"], 10)

        store.list().clear()

        assert len(store) == 1

    def test_get_unknown_returns_none(self, store):
        assert store.get(1) is None

    def test_remove(self, store):
        first = store.add("Alice", ["x"], 10)
        second = store.add("Bob", ["y"], 20)

        removed = store.remove(first.id)

        assert removed is first
        assert store.list() == [second]
        assert store.remove(first.id) is None

    def test_ids_not_reused_after_remove(self, store):
        first = store.add("Alice", ["x"], 10)
        store.remove(first.id)

        assert store.add("Bob", ["y"], 20).id == 2

    def test_response_uses_camel_case_timestamp(self, store):
        body = store.add("Alice", ["x"], 10).to_response()

        assert set(body) == {"id", "customer", "items", "total", "status", "createdAt"}
        assert body["total"] == 10
