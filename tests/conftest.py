import pytest

from testrabbit_core import Broker


@pytest.fixture
def broker():
    return Broker()


@pytest.fixture
def connected(broker):
    """A connected broker with channel 1 open."""
    broker.connect()
    broker.channel_open(1)
    return broker


@pytest.fixture
def orders(connected):
    """Exchange "order" with queue "new-orders" bound on "order.new"."""
    connected.exchange_declare(1, "order")
    connected.queue_declare(1, "new-orders")
    connected.queue_bind(1, "new-orders", "order", "order.new")
    return connected
