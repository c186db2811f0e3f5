"""BDD tests for stock resolution and the add-to-cart stock gate."""

from pytest_bdd import parsers, scenarios, then, when
from storefront.stock.resolver import resolve_available_stock

scenarios("features/stock_resolution.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the customer adds {quantity:d} of "{product_id}" in size "{size}"'))
def add_sized(run, store, catalogue, quantity, product_id, size):
    run(store.add_to_cart(catalogue[product_id], selected_size=size, quantity=quantity))


@when(parsers.re(r'the customer adds (?P<quantity>\d+) of "(?P<product_id>[^"]+)"$'), converters={"quantity": int})
def add_unsized(run, store, catalogue, quantity, product_id):
    run(store.add_to_cart(catalogue[product_id], quantity=quantity))


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the available stock of "{product_id}" is undetermined'))
def stock_undetermined(catalogue, product_id):
    assert resolve_available_stock(catalogue[product_id]) is None


@then(parsers.cfparse('the available stock of "{product_id}" in size "{size}" is {available:d}'))
def stock_for_size(catalogue, product_id, size, available):
    assert resolve_available_stock(catalogue[product_id], size) == available


@then("the cart service received no add request")
def no_add_request(service):
    assert service.calls_to("add_item") == []
