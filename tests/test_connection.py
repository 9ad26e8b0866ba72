"""Tests for connection, channel bookkeeping and broker configuration."""

import pytest

from testrabbit_core import (
    Broker,
    BrokerConfig,
    BrokerConnectionError,
    NotConnectedError,
    UnknownChannelError,
)


class TestConnect:
    def test_connect(self, broker):
        assert not broker.is_connected()
        assert broker.connect() is True
        assert broker.is_connected()
        assert broker.connected

    def test_connect_is_idempotent(self, broker):
        broker.connect()
        broker.connect()
        assert broker.is_connected()

    def test_not_connectable(self):
        broker = Broker(connectable=False)
        with pytest.raises(BrokerConnectionError):
            broker.connect()
        assert not broker.is_connected()

    def test_connection_error_is_builtin_connection_error(self):
        broker = Broker(connectable=False)
        with pytest.raises(ConnectionError):
            broker.connect()

    def test_connectable_can_be_flipped(self, broker):
        broker.connectable = False
        with pytest.raises(BrokerConnectionError):
            broker.connect()
        broker.connectable = True
        broker.connect()
        assert broker.is_connected()

    def test_disconnect(self, broker):
        broker.connect()
        broker.disconnect()
        assert not broker.is_connected()

    def test_disconnect_when_not_connected(self, broker):
        with pytest.raises(NotConnectedError) as exc_info:
            broker.disconnect()
        assert exc_info.value.operation == "disconnect"

    def test_context_manager(self):
        with Broker() as broker:
            assert broker.is_connected()
        assert not broker.is_connected()

    def test_context_manager_after_manual_disconnect(self):
        with Broker() as broker:
            broker.disconnect()
        assert not broker.is_connected()


class TestConfig:
    def test_defaults(self):
        config = BrokerConfig()
        assert config.connectable is True
        assert config.debug is False
        assert config.default_exchange == "amq.direct"
        assert config.consume_defaults == {"no_local": False, "no_ack": True, "exclusive": False}

    def test_overrides_do_not_mutate_given_config(self):
        config = BrokerConfig()
        broker = Broker(config, debug=True)
        assert broker.debug is True
        assert config.debug is False

    def test_unknown_override_rejected(self):
        with pytest.raises(TypeError):
            Broker(no_such_option=True)


class TestChannels:
    def test_open_requires_connection(self, broker):
        with pytest.raises(NotConnectedError):
            broker.channel_open(1)

    def test_reopen_is_noop(self, connected):
        connected.channel_open(1)
        assert connected.get_stats().channels == 1

    def test_close(self, connected):
        connected.channel_close(1)
        assert connected.get_stats().channels == 0

    def test_close_unknown_channel(self, connected):
        with pytest.raises(UnknownChannelError) as exc_info:
            connected.channel_close(2)
        assert exc_info.value.channel == 2

    def test_close_twice(self, connected):
        connected.channel_close(1)
        with pytest.raises(UnknownChannelError):
            connected.channel_close(1)

    def test_close_requires_connection(self, connected):
        connected.disconnect()
        with pytest.raises(NotConnectedError):
            connected.channel_close(1)

    def test_channels_survive_reconnect(self, connected):
        connected.disconnect()
        connected.connect()
        connected.queue_declare(1, "q")
        assert connected.list_queues() == ["q"]

    def test_non_integer_channel_ids(self, connected):
        connected.channel_open("events")
        connected.queue_declare("events", "q")
        assert connected.list_queues() == ["q"]
