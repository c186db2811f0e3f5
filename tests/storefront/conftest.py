import asyncio

import pytest
from protean.integrations.pytest import DomainFixture
from storefront.cart.line import Product
from storefront.cart.store import CartStore
from storefront.notify.fake_notifier import RecordingNotifier
from storefront.service.fake_adapter import FakeCartService
from storefront.stock.ledger import ScalarStock, SizedStock

SYNC_DELAY = 0.01


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront import session
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    # cart_session must not initialise the domain a second time
    session._domain_initialized = True
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield


# ---------------------------------------------------------------------------
# Event loop
# ---------------------------------------------------------------------------
@pytest.fixture()
def loop():
    loop = asyncio.new_event_loop()
    yield loop
    loop.run_until_complete(loop.shutdown_asyncgens())
    loop.close()


@pytest.fixture()
def run(loop):
    """Run a coroutine to completion on the test's loop."""
    return loop.run_until_complete


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
@pytest.fixture()
def mug():
    return Product(product_id="mug-001", name="Enamel Mug", price=12.0, stock=ScalarStock(10))


@pytest.fixture()
def hoodie():
    return Product(
        product_id="hoodie-001",
        name="Zip Hoodie",
        price=30.0,
        stock=SizedStock(sizes=("S", "M", "L"), counts={"S": 0, "M": 2, "L": 5}),
    )


# ---------------------------------------------------------------------------
# Store and collaborators
# ---------------------------------------------------------------------------
@pytest.fixture()
def service():
    return FakeCartService()


@pytest.fixture()
def notifier():
    return RecordingNotifier()


@pytest.fixture()
def store(service, notifier):
    return CartStore(service, notifier, sync_delay=SYNC_DELAY)


@pytest.fixture()
def settle(run, store):
    """Let every debounce window elapse and wait for the writes it fired."""

    def _settle():
        run(asyncio.sleep(store.scheduler.delay * 4))
        run(store.scheduler.drain())

    return _settle
