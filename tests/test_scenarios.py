"""End-to-end usage as an application test would drive the broker."""

import pytest

from testrabbit_core import Broker, UnknownChannelError


@pytest.fixture
def order_broker():
    broker = Broker()
    broker.connect()
    broker.channel_open(1)
    broker.exchange_declare(1, "order")
    broker.queue_declare(1, "new-orders")
    return broker


def test_publish_and_recv(order_broker):
    order_broker.queue_bind(1, "new-orders", "order", "order.new")
    order_broker.publish(1, "order.new", "hello!", {"exchange": "order"})
    order_broker.consume(1, "new-orders")

    message = order_broker.recv()
    assert message.body == "hello!"
    assert message.delivery_tag == 1


def test_star_and_hash_patterns(order_broker):
    order_broker.queue_bind(1, "new-orders", "order", "order.*")
    order_broker.publish(1, "order.new", "one", {"exchange": "order"})
    order_broker.publish(1, "order.new.extra", "two", {"exchange": "order"})
    assert order_broker.message_count("new-orders") == 1

    order_broker.queue_declare(1, "deep")
    order_broker.queue_bind(1, "deep", "order", "order.#")
    order_broker.publish(1, "order.new.extra", "three", {"exchange": "order"})
    assert order_broker.get(1, "deep").body == "three"


def test_transaction_commit(order_broker):
    order_broker.queue_bind(1, "new-orders", "order", "order.new")
    order_broker.tx_select(1)
    order_broker.publish(1, "order.new", "buffered", {"exchange": "order"})
    assert order_broker.get(1, "new-orders") is None

    order_broker.tx_commit(1)
    assert order_broker.get(1, "new-orders").body == "buffered"


def test_get_on_empty_queue(order_broker):
    assert order_broker.get(1, "new-orders") is None


def test_publish_on_closed_channel(order_broker):
    order_broker.channel_close(1)
    with pytest.raises(UnknownChannelError):
        order_broker.publish(1, "order.new", "x", {"exchange": "order"})
