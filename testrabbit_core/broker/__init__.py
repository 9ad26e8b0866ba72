"""TestRabbit Broker Module - Routing, Bindings & Transactions.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from testrabbit_core.broker.broker import Broker, BrokerConfig, BrokerStats
from testrabbit_core.broker.exchange import Exchange, ExchangeConfig
from testrabbit_core.broker.binding import Binding, BindingKey, BindingTable
from testrabbit_core.broker.transaction import PendingPublish, Transaction

__all__ = [
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
]
