"""Tests for quantity steps, optimistic sets and debounced syncing."""

import pytest
from storefront.cart.line import Product
from storefront.stock.ledger import SizedStock


def _load(run, store):
    run(store.get_cart_items())


class TestChangeQuantity:
    def test_increment_within_stock(self, run, store, service, settle, hoodie):
        service.put_line(hoodie, 1, size="L")
        _load(run, store)

        assert run(store.change_quantity("hoodie-001-L", +1)) is True
        assert store.line("hoodie-001-L").quantity == 2
        settle()
        assert service.lines["hoodie-001-L"].quantity == 2

    def test_increment_past_stock_is_blocked(self, run, store, service, notifier, settle, hoodie):
        service.put_line(hoodie, 2, size="M")
        _load(run, store)

        assert run(store.change_quantity("hoodie-001-M", +1)) is False
        assert store.line("hoodie-001-M").quantity == 2
        assert notifier.errors == ["Only 2 item(s) available for size M"]
        settle()
        assert service.calls_to("update_quantity") == []

    def test_decrements_are_never_blocked_even_above_stock(self, run, store, service, notifier, settle):
        shrunk = Product(
            product_id="tee-001",
            price=10.0,
            stock=SizedStock(sizes=("M",), counts={"M": 3}),
        )
        service.put_line(shrunk, 5, size="M")
        _load(run, store)

        seen = []
        for _ in range(4):
            assert run(store.change_quantity("tee-001-M", -1)) is True
            seen.append(store.line("tee-001-M").quantity)
        assert seen == [4, 3, 2, 1]

        assert run(store.change_quantity("tee-001-M", -1)) is True
        assert store.line("tee-001-M") is None
        settle()
        assert notifier.errors == []
        assert "tee-001-M" not in service.lines

    def test_burst_of_clicks_sends_one_write(self, run, store, service, settle, mug):
        service.put_line(mug, 1)
        _load(run, store)

        async def clicks():
            for _ in range(4):
                await store.change_quantity("mug-001", +1)

        run(clicks())
        assert store.line("mug-001").quantity == 5
        settle()
        assert service.calls_to("update_quantity") == [
            {"method": "update_quantity", "item_key": "mug-001", "quantity": 5}
        ]


class TestUpdateQuantityOptimistic:
    def test_applies_locally_before_the_write(self, run, store, service, mug):
        service.put_line(mug, 1)
        _load(run, store)

        async def edit():
            applied = store.update_quantity_optimistic("mug-001", 4)
            assert store.line("mug-001").quantity == 4
            assert store.subtotal == pytest.approx(48.0)
            assert service.calls_to("update_quantity") == []
            assert store.pending_writes == ("mug-001",)
            return applied

        assert run(edit()) == 4

    def test_over_stock_is_clamped_with_notice(self, run, store, service, notifier, settle, hoodie):
        service.put_line(hoodie, 1, size="L")
        _load(run, store)

        async def edit():
            return store.update_quantity_optimistic("hoodie-001-L", 9)

        assert run(edit()) == 5
        assert store.line("hoodie-001-L").quantity == 5
        assert notifier.warnings == ["Quantity adjusted to 5 (only 5 available)"]
        settle()
        assert service.lines["hoodie-001-L"].quantity == 5

    @pytest.mark.parametrize("requested", [-4, 0, 1, 3, 5, 6, 40])
    def test_result_always_within_one_and_stock(self, run, store, service, hoodie, requested):
        service.put_line(hoodie, 2, size="L")
        _load(run, store)

        async def edit():
            store.update_quantity_optimistic("hoodie-001-L", requested)
            store.scheduler.cancel_all()

        run(edit())
        assert 1 <= store.line("hoodie-001-L").quantity <= 5

    def test_sold_out_size_clamps_to_one(self, run, store, service, hoodie):
        service.put_line(hoodie, 1, size="S")
        _load(run, store)

        async def edit():
            applied = store.update_quantity_optimistic("hoodie-001-S", 3)
            store.scheduler.cancel_all()
            return applied

        assert run(edit()) == 1

    def test_unknown_line(self, run, store):
        async def edit():
            return store.update_quantity_optimistic("nope", 3)

        assert run(edit()) is None


class TestUpdateQuantity:
    def test_zero_removes_line(self, run, store, service, mug):
        service.put_line(mug, 3)
        _load(run, store)

        assert run(store.update_quantity("mug-001", 0)) == 0
        assert store.cart == ()
        assert service.lines == {}

    def test_set_is_clamped_and_debounced(self, run, store, service, settle, hoodie):
        service.put_line(hoodie, 1, size="M")
        _load(run, store)

        assert run(store.update_quantity("hoodie-001-M", 7)) == 2
        assert service.calls_to("update_quantity") == []
        settle()
        assert service.lines["hoodie-001-M"].quantity == 2


class TestQuantitySyncFailures:
    def test_failed_write_notifies_and_resynchronises(self, run, store, service, notifier, settle, mug):
        service.put_line(mug, 1)
        _load(run, store)
        service.fail_next("update_quantity", status_code=500, message="Stock service down")

        async def edit():
            store.update_quantity_optimistic("mug-001", 3)

        run(edit())
        settle()

        assert notifier.errors == ["Stock service down"]
        assert store.line("mug-001").quantity == 1

    def test_stale_write_after_remove_is_silent(self, run, store, service, notifier, settle, mug):
        service.put_line(mug, 2)
        _load(run, store)

        async def edit_then_remove():
            store.update_quantity_optimistic("mug-001", 3)
            await store.remove_from_cart("mug-001")

        run(edit_then_remove())
        settle()

        assert [call["method"] for call in service.calls[-2:]] == ["remove_item", "update_quantity"]
        assert notifier.notices == []
        assert store.cart == ()

    def test_write_for_line_lost_server_side_refetches(self, run, store, service, notifier, settle, mug):
        service.put_line(mug, 2)
        _load(run, store)
        service.lines.clear()

        async def edit():
            store.update_quantity_optimistic("mug-001", 3)

        run(edit())
        settle()

        assert len(service.calls_to("fetch_cart")) == 2
        assert store.cart == ()
        assert notifier.notices == []

    def test_refetch_keeps_pending_local_quantities(self, run, store, service, mug, hoodie):
        service.put_line(mug, 1)
        service.put_line(hoodie, 1, size="L")
        _load(run, store)

        async def edit_then_refresh():
            store.update_quantity_optimistic("hoodie-001-L", 4)
            await store.get_cart_items()
            store.scheduler.cancel_all()

        run(edit_then_refresh())
        assert store.line("hoodie-001-L").quantity == 4
