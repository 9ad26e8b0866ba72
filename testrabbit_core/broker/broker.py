"""TestRabbit Broker - In-Process Broker Stand-In.

This module provides the broker object that tests talk to in place of a
real AMQP client connection. It keeps every channel, exchange, queue,
binding and transaction in memory and answers synchronously.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Hashable, List, Optional, Set

from testrabbit_core.broker.exchange import Exchange, ExchangeConfig
from testrabbit_core.broker.transaction import Transaction
from testrabbit_core.exceptions import (
    BrokerConnectionError,
    NoQueueSelectedError,
    NoTransactionError,
    NotConnectedError,
    TransactionAlreadyStartedError,
    UnknownBindingError,
    UnknownChannelError,
    UnknownExchangeError,
    UnknownQueueError,
    UnsupportedOptionError,
)
from testrabbit_core.queue.base import Queue, QueueConfig
from testrabbit_core.queue.message import Message

logger = logging.getLogger(__name__)


def _default_consume_options() -> Dict[str, bool]:
    return {"no_local": False, "no_ack": True, "exclusive": False}


@dataclass
class BrokerConfig:
    """Broker configuration.

    Attributes:
        name: Broker name, used in log lines
        connectable: If False every connect() fails, emulating a dead broker
        debug: Log every routing match of a publish
        default_exchange: Exchange used by publish() when none is given
        consume_defaults: Options consume() merges the caller's options over
    """

    name: str = "testrabbit"
    connectable: bool = True
    debug: bool = False
    default_exchange: str = "amq.direct"
    consume_defaults: Dict[str, bool] = field(default_factory=_default_consume_options)


@dataclass
class BrokerStats:
    """Broker statistics."""

    connected: bool = False
    channels: int = 0
    exchanges: int = 0
    queues: int = 0
    bindings: int = 0
    messages_published: int = 0
    messages_routed: int = 0
    messages_delivered: int = 0
    transactions_committed: int = 0
    transactions_rolled_back: int = 0


class Broker:
    """In-memory stand-in for an AMQP broker connection.

    Features:
    - Connection and channel bookkeeping
    - Exchange, queue and binding declaration
    - Wildcard routing of published messages
    - Per-channel publish transactions
    - Polling retrieval with get() and recv()

    Exchanges, queues and bindings are broker-wide. Channels only gate
    access to them.
    """

    def __init__(self, config: Optional[BrokerConfig] = None, **overrides: Any):
        """Initialize broker.

        Args:
            config: Broker configuration
            **overrides: BrokerConfig fields to override, e.g. connectable=False
        """
        self.config = replace(config or BrokerConfig(), **overrides)

        self._connected = False
        self._channels: Set[Hashable] = set()
        self._exchanges: Dict[str, Exchange] = {}
        self._queues: Dict[str, Queue] = {}
        self._transactions: Dict[Hashable, Transaction] = {}
        self._current_queue: Optional[str] = None
        self._delivery_tag = 0

        self._lock = threading.RLock()

        self._stats = {
            "messages_published": 0,
            "messages_routed": 0,
            "messages_delivered": 0,
            "transactions_committed": 0,
            "transactions_rolled_back": 0,
        }

    @property
    def connectable(self) -> bool:
        """Whether connect() succeeds."""
        return self.config.connectable

    @connectable.setter
    def connectable(self, value: bool) -> None:
        self.config.connectable = value

    @property
    def debug(self) -> bool:
        """Whether routing matches are logged."""
        return self.config.debug

    @debug.setter
    def debug(self, value: bool) -> None:
        self.config.debug = value

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def delivery_tag(self) -> int:
        """Last delivery tag handed out, 0 before the first retrieval."""
        return self._delivery_tag

    @property
    def current_queue(self) -> Optional[str]:
        """Queue selected by the last consume() call."""
        return self._current_queue

    # Guards

    def _require_connected(self, operation: str) -> None:
        if not self._connected:
            raise NotConnectedError(operation)

    def _require_channel(self, channel: Hashable, operation: str) -> None:
        self._require_connected(operation)
        if channel not in self._channels:
            raise UnknownChannelError(channel)

    def _require_queue(self, name: str) -> Queue:
        queue = self._queues.get(name)
        if queue is None:
            raise UnknownQueueError(name)
        return queue

    def _require_exchange(self, name: str) -> Exchange:
        exchange = self._exchanges.get(name)
        if exchange is None:
            raise UnknownExchangeError(name)
        return exchange

    def _exchange_for(self, options: Optional[Dict[str, Any]]) -> str:
        name = (options or {}).get("exchange")
        return self.config.default_exchange if name is None else name

    def _next_delivery_tag(self) -> int:
        self._delivery_tag += 1
        return self._delivery_tag

    # Connection Management

    def connect(self) -> bool:
        """Connect to the broker.

        Raises:
            BrokerConnectionError: If the broker is not connectable
        """
        with self._lock:
            if not self.config.connectable:
                raise BrokerConnectionError(self.config.name)
            if not self._connected:
                self._connected = True
                logger.info(f"Connected to broker {self.config.name}")
            return True

    def disconnect(self) -> None:
        """Disconnect from the broker.

        Open channels, topology and pending messages are kept.
        """
        with self._lock:
            self._require_connected("disconnect")
            self._connected = False
            logger.info(f"Disconnected from broker {self.config.name}")

    def is_connected(self) -> bool:
        """Check whether the broker is connected."""
        return self._connected

    # Channel Management

    def channel_open(self, channel: Hashable) -> None:
        """Open a channel. Opening an open channel does nothing."""
        with self._lock:
            self._require_connected("channel_open")
            if channel not in self._channels:
                self._channels.add(channel)
                logger.info(f"Opened channel {channel!r}")

    def channel_close(self, channel: Hashable) -> None:
        """Close a channel.

        A transaction pending on the channel is left in place.
        """
        with self._lock:
            self._require_channel(channel, "channel_close")
            self._channels.discard(channel)
            logger.info(f"Closed channel {channel!r}")

    # Exchange Management

    def exchange_declare(
        self,
        channel: Hashable,
        exchange: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Declare an exchange.

        Re-declaring an exchange keeps its bindings.

        Args:
            channel: Open channel
            exchange: Exchange name
            options: Declare options, stored but unused
        """
        with self._lock:
            self._require_channel(channel, "exchange_declare")
            if exchange in self._exchanges:
                return

            self._exchanges[exchange] = Exchange(
                ExchangeConfig(name=exchange, options=dict(options or {}))
            )
            logger.info(f"Declared exchange: {exchange}")

    def exchange_delete(self, channel: Hashable, exchange: str) -> None:
        """Delete an exchange together with its bindings."""
        with self._lock:
            self._require_channel(channel, "exchange_delete")
            self._require_exchange(exchange)
            del self._exchanges[exchange]
            logger.info(f"Deleted exchange: {exchange}")

    # Queue Management

    def queue_declare(
        self,
        channel: Hashable,
        queue: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Declare a queue.

        Re-declaring a queue keeps its pending messages.

        Args:
            channel: Open channel
            queue: Queue name
            options: Declare options, stored but unused

        Returns:
            The queue name
        """
        with self._lock:
            self._require_channel(channel, "queue_declare")
            if queue not in self._queues:
                self._queues[queue] = Queue(
                    config=QueueConfig(name=queue, options=dict(options or {}))
                )
                logger.info(f"Declared queue: {queue}")
            return queue

    def queue_delete(self, channel: Hashable, queue: str) -> int:
        """Delete a queue and every binding that targets it.

        Returns:
            Number of pending messages discarded
        """
        with self._lock:
            self._require_channel(channel, "queue_delete")
            q = self._require_queue(queue)

            for exchange in self._exchanges.values():
                exchange.unbind_queue(queue)

            if self._current_queue == queue:
                self._current_queue = None

            del self._queues[queue]
            logger.info(f"Deleted queue: {queue}")
            return len(q)

    def purge(self, channel: Hashable, queue: str) -> int:
        """Remove all pending messages from a queue.

        Returns:
            Number of messages purged
        """
        with self._lock:
            self._require_channel(channel, "purge")
            count = self._require_queue(queue).purge()
            logger.info(f"Purged {count} message(s) from queue {queue}")
            return count

    # Binding Management

    def queue_bind(
        self,
        channel: Hashable,
        queue: str,
        exchange: str,
        routing_key: str,
    ) -> None:
        """Bind a queue to an exchange with a routing key pattern.

        Binding a pattern that is already bound on the exchange moves it
        to the new queue.

        Args:
            channel: Open channel
            queue: Destination queue
            exchange: Source exchange
            routing_key: Pattern, may contain # or * wildcards
        """
        with self._lock:
            self._require_channel(channel, "queue_bind")
            self._require_queue(queue)
            self._require_exchange(exchange).bind(queue, routing_key)

    def queue_unbind(
        self,
        channel: Hashable,
        queue: str,
        exchange: str,
        routing_key: str,
    ) -> None:
        """Remove the binding for a routing key pattern.

        Raises:
            UnknownBindingError: If the pattern is not bound on the exchange
        """
        with self._lock:
            self._require_channel(channel, "queue_unbind")
            self._require_queue(queue)
            if self._require_exchange(exchange).unbind(routing_key) is None:
                raise UnknownBindingError(exchange, routing_key)

    # Message Publishing

    def publish(
        self,
        channel: Hashable,
        routing_key: str,
        body: Any,
        options: Optional[Dict[str, Any]] = None,
        props: Optional[Dict[str, Any]] = None,
    ) -> int:
        """Publish a message.

        On a channel in a transaction the call is only buffered and
        nothing is checked until commit.

        Args:
            channel: Open channel
            routing_key: Routing key
            body: Message payload
            options: {"exchange": name}, defaults to the configured exchange
            props: Message properties, echoed back on delivery

        Returns:
            Number of queues the message was delivered to, 0 when buffered
        """
        with self._lock:
            transaction = self._transactions.get(channel)
            if transaction is not None:
                transaction.add(routing_key, body, options, props)
                logger.debug(f"Buffered publish of {routing_key} on channel {channel!r}")
                return 0

            self._require_channel(channel, "publish")
            return self._route(routing_key, body, options, props)

    def _route(
        self,
        routing_key: str,
        body: Any,
        options: Optional[Dict[str, Any]],
        props: Optional[Dict[str, Any]],
    ) -> int:
        exchange_name = self._exchange_for(options)
        exchange = self._require_exchange(exchange_name)

        targets = exchange.route(routing_key)
        for queue_name in targets:
            message = Message.create(
                body=body,
                routing_key=routing_key,
                exchange=exchange_name,
                props=props,
            )
            self._queues[queue_name].push(message)
            if self.config.debug:
                logger.info(f"Routed {routing_key} to {queue_name}")

        self._stats["messages_published"] += 1
        self._stats["messages_routed"] += len(targets)
        return len(targets)

    # Transactions

    def tx_select(self, channel: Hashable) -> None:
        """Start buffering publishes on a channel."""
        with self._lock:
            self._require_channel(channel, "tx_select")
            if channel in self._transactions:
                raise TransactionAlreadyStartedError(channel)
            self._transactions[channel] = Transaction(channel)
            logger.info(f"Started transaction on channel {channel!r}")

    def tx_commit(self, channel: Hashable) -> int:
        """Route every buffered publish in order and end the transaction.

        Exchanges are checked for all buffered publishes before any of
        them is routed. If one is missing nothing is routed and the
        transaction stays open.

        Returns:
            Number of publishes replayed
        """
        with self._lock:
            self._require_channel(channel, "tx_commit")
            transaction = self._transactions.get(channel)
            if transaction is None:
                raise NoTransactionError(channel)

            for pending in transaction:
                self._require_exchange(self._exchange_for(pending.options))

            for pending in transaction:
                self._route(pending.routing_key, pending.body, pending.options, pending.props)

            del self._transactions[channel]
            self._stats["transactions_committed"] += 1
            logger.info(
                f"Committed transaction on channel {channel!r} "
                f"({len(transaction)} publish(es))"
            )
            return len(transaction)

    def tx_rollback(self, channel: Hashable) -> int:
        """Discard every buffered publish and end the transaction.

        Returns:
            Number of publishes discarded
        """
        with self._lock:
            self._require_channel(channel, "tx_rollback")
            transaction = self._transactions.pop(channel, None)
            if transaction is None:
                raise NoTransactionError(channel)

            self._stats["transactions_rolled_back"] += 1
            logger.info(
                f"Rolled back transaction on channel {channel!r} "
                f"({len(transaction)} publish(es) discarded)"
            )
            return len(transaction)

    def in_transaction(self, channel: Hashable) -> bool:
        """Check whether a channel has an open transaction."""
        return channel in self._transactions

    # Consuming

    def consume(
        self,
        channel: Hashable,
        queue: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> str:
        """Select the queue later recv() calls read from.

        Only one queue is selected broker-wide; a later consume() replaces
        the selection.

        Args:
            channel: Open channel
            queue: Queue to read from
            options: no_local and exclusive are ignored, no_ack must be true

        Returns:
            The consumer tag, always empty

        Raises:
            UnsupportedOptionError: If no_ack is false
        """
        with self._lock:
            self._require_channel(channel, "consume")
            self._require_queue(queue)

            effective = {
                **_default_consume_options(),
                **self.config.consume_defaults,
                **(options or {}),
            }
            if not effective["no_ack"]:
                raise UnsupportedOptionError("no_ack", effective["no_ack"])

            self._current_queue = queue
            logger.info(f"Consuming from queue {queue} on channel {channel!r}")
            return ""

    def get(
        self,
        channel: Hashable,
        queue: str,
        options: Optional[Dict[str, Any]] = None,
    ) -> Optional[Message]:
        """Fetch the oldest message from a queue.

        Args:
            channel: Open channel
            queue: Queue name
            options: Accepted for API parity, unused

        Returns:
            The message, or None if the queue is empty
        """
        with self._lock:
            self._require_channel(channel, "get")
            message = self._require_queue(queue).pop()
            if message is None:
                return None

            self._stats["messages_delivered"] += 1
            return message.stamp_get(self._next_delivery_tag())

    def recv(self) -> Optional[Message]:
        """Fetch the oldest message from the consumed queue without blocking.

        Returns:
            The message, or None if the queue is empty

        Raises:
            NoQueueSelectedError: If consume() was never called
        """
        with self._lock:
            self._require_connected("recv")
            if self._current_queue is None:
                raise NoQueueSelectedError()

            message = self._require_queue(self._current_queue).pop()
            if message is None:
                return None

            self._stats["messages_delivered"] += 1
            return message.stamp_recv(self._next_delivery_tag())

    # Inspection

    def message_count(self, queue: str) -> int:
        """Number of messages pending in a queue."""
        with self._lock:
            return len(self._require_queue(queue))

    def list_queues(self) -> List[str]:
        """List all queue names."""
        with self._lock:
            return sorted(self._queues)

    def list_exchanges(self) -> List[str]:
        """List all exchange names."""
        with self._lock:
            return sorted(self._exchanges)

    def list_bindings(self, exchange: str) -> Dict[str, str]:
        """Pattern to queue name mapping of an exchange."""
        with self._lock:
            return self._require_exchange(exchange).get_bindings()

    def get_stats(self) -> BrokerStats:
        """Get broker statistics."""
        with self._lock:
            return BrokerStats(
                connected=self._connected,
                channels=len(self._channels),
                exchanges=len(self._exchanges),
                queues=len(self._queues),
                bindings=sum(len(e.get_bindings()) for e in self._exchanges.values()),
                **self._stats,
            )

    def __enter__(self) -> "Broker":
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self._connected:
            self.disconnect()


__all__ = [
    "Broker",
    "BrokerConfig",
    "BrokerStats",
]
