"""TestRabbit - In-Process AMQP Broker for Tests.

TestRabbit stands in for an AMQP client connection so application tests
can exercise publish/consume code without a live broker. Everything is
held in memory and every call answers synchronously.

Architecture Overview:
┌─────────────────────────────────────────────────────────────────────────┐
│                            TestRabbit                                   │
├─────────────────────────────────────────────────────────────────────────┤
│  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐  ┌─────────────┐   │
│  │  Channels   │  │  Exchanges  │  │   Queues    │  │  Consumers  │   │
│  │             │──▶│             │──▶│             │──▶│             │   │
│  │ • Open      │  │ • Declare   │  │ • Declare   │  │ • consume   │   │
│  │ • Close     │  │ • Bind      │  │ • FIFO      │  │ • get       │   │
│  │ • tx_*      │  │ • Route     │  │ • Purge     │  │ • recv      │   │
│  └─────────────┘  └─────────────┘  └─────────────┘  └─────────────┘   │
├─────────────────────────────────────────────────────────────────────────┤
│  ┌───────────────────────────────────────────────────────────────────┐ │
│  │                        Broker Module                              │ │
│  │  • Broker - Connection, topology, publish and retrieval          │ │
│  │  • Exchange - Topic-style routing over its bindings              │ │
│  │  • BindingKey - Compiled # / * wildcard matcher                  │ │
│  │  • Transaction - Per-channel publish buffer                      │ │
│  └───────────────────────────────────────────────────────────────────┘ │
│  ┌───────────────────────────────────────────────────────────────────┐ │
│  │                        Queue Module                               │ │
│  │  • Message - Body, routing key, exchange, props, delivery fields │ │
│  │  • Queue - FIFO message storage                                  │ │
│  └───────────────────────────────────────────────────────────────────┘ │
└─────────────────────────────────────────────────────────────────────────┘

Example:
    broker = Broker()
    broker.connect()
    broker.channel_open(1)
    broker.exchange_declare(1, "order")
    broker.queue_declare(1, "new-orders")
    broker.queue_bind(1, "new-orders", "order", "order.*")
    broker.publish(1, "order.new", "hello!", {"exchange": "order"})
    broker.consume(1, "new-orders")
    broker.recv().body  # "hello!"

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

# Queue components
from testrabbit_core.queue.message import Message
from testrabbit_core.queue.base import Queue, QueueConfig

# Broker components
from testrabbit_core.broker.broker import Broker, BrokerConfig, BrokerStats
from testrabbit_core.broker.exchange import Exchange, ExchangeConfig
from testrabbit_core.broker.binding import Binding, BindingKey, BindingTable
from testrabbit_core.broker.transaction import PendingPublish, Transaction

# Errors
from testrabbit_core.exceptions import (
    BrokerError,
    BrokerConnectionError,
    NotConnectedError,
    UnknownChannelError,
    UnknownQueueError,
    UnknownExchangeError,
    UnknownBindingError,
    TransactionAlreadyStartedError,
    NoTransactionError,
    NoQueueSelectedError,
    UnsupportedOptionError,
)

__version__ = "1.0.0"
__author__ = "BlackRoad OS"
__license__ = "Proprietary"

__all__ = [
    # Version
    "__version__",
    # Queue
    "Message",
    "Queue",
    "QueueConfig",
    # Broker
    "Broker",
    "BrokerConfig",
    "BrokerStats",
    "Exchange",
    "ExchangeConfig",
    "Binding",
    "BindingKey",
    "BindingTable",
    "PendingPublish",
    "Transaction",
    # Errors
    "BrokerError",
    "BrokerConnectionError",
    "NotConnectedError",
    "UnknownChannelError",
    "UnknownQueueError",
    "UnknownExchangeError",
    "UnknownBindingError",
    "TransactionAlreadyStartedError",
    "NoTransactionError",
    "NoQueueSelectedError",
    "UnsupportedOptionError",
]
