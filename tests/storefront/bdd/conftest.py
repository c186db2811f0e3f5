"""Shared BDD fixtures and step definitions for the storefront cart."""

import pytest
from pytest_bdd import given, parsers, then, when
from storefront.cart.coupon import Coupon
from storefront.cart.line import Product
from storefront.stock.ledger import ScalarStock, SizedStock


def _parse_counts(counts: str) -> dict[str, int]:
    pairs = (entry.split(":") for entry in counts.split(","))
    return {size.strip(): int(count) for size, count in pairs}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def catalogue():
    """Products known to the scenario, by id."""
    return {}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{product_id}" priced {price:g} with {stock:d} in stock'))
def scalar_product(catalogue, service, product_id, price, stock):
    product = Product(product_id=product_id, name=product_id.title(), price=price, stock=ScalarStock(stock))
    catalogue[product_id] = service.register_product(product)


@given(parsers.cfparse('a product "{product_id}" priced {price:g} with sized stock "{counts}"'))
def sized_product(catalogue, service, product_id, price, counts):
    parsed = _parse_counts(counts)
    product = Product(
        product_id=product_id,
        name=product_id.title(),
        price=price,
        stock=SizedStock(sizes=tuple(parsed), counts=parsed),
    )
    catalogue[product_id] = service.register_product(product)


@given(parsers.re(r'the cart holds (?P<quantity>\d+) of "(?P<product_id>[^"]+)"$'), converters={"quantity": int})
def cart_holds(run, store, service, catalogue, quantity, product_id):
    service.put_line(catalogue[product_id], quantity)
    run(store.get_cart_items())


@given(parsers.cfparse('the cart holds {quantity:d} of "{product_id}" in size "{size}"'))
def cart_holds_sized(run, store, service, catalogue, quantity, product_id, size):
    service.put_line(catalogue[product_id], quantity, size=size)
    run(store.get_cart_items())


@given(parsers.cfparse('a coupon "{code}" for {percentage:g} percent off orders of at least {minimum:g}'))
def coupon_offered(service, code, percentage, minimum):
    service.register_coupon(Coupon(code=code, discount_percentage=percentage, minimum_amount=minimum))


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the customer removes "{item_key}"'))
def remove_line(run, store, item_key):
    run(store.remove_from_cart(item_key))


@when("the pending writes settle")
def pending_writes_settle(settle):
    settle()


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the cart line "{item_key}" has quantity {quantity:d}'))
def line_has_quantity(store, item_key, quantity):
    assert store.line(item_key) is not None
    assert store.line(item_key).quantity == quantity


@then(parsers.cfparse('the cart has no line "{item_key}"'))
def no_such_line(store, item_key):
    assert store.line(item_key) is None


@then(parsers.cfparse('the server cart has no line "{item_key}"'))
def server_has_no_line(service, item_key):
    assert item_key not in service.lines


@then("no error is shown")
def no_error_shown(notifier):
    assert notifier.errors == []


@then(parsers.cfparse('the error "{message}" is shown'))
def error_shown(notifier, message):
    assert message in notifier.errors


@then(parsers.cfparse('the warning "{message}" is shown'))
def warning_shown(notifier, message):
    assert message in notifier.warnings


@then(parsers.cfparse("the cart total is {total:g}"))
def cart_total_is(store, total):
    assert store.total == pytest.approx(total)
