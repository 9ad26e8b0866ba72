"""TestRabbit Exceptions - Broker Error Taxonomy.

Every failure raised by the broker derives from :class:`BrokerError` and
carries the identifiers involved, so tests can branch on the error kind
instead of parsing messages.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from typing import Any, Hashable, Optional


class BrokerError(Exception):
    """Base broker error."""


class BrokerConnectionError(BrokerError, ConnectionError):
    """Raised when connecting to a broker configured as unreachable."""

    def __init__(self, name: str = ""):
        self.name = name
        super().__init__(f"Unable to connect to broker {name!r}" if name else "Unable to connect")


class NotConnectedError(BrokerError):
    """Raised when an operation needs a connection and there is none."""

    def __init__(self, operation: Optional[str] = None):
        self.operation = operation
        if operation:
            super().__init__(f"Not connected (during {operation})")
        else:
            super().__init__("Not connected")


class UnknownChannelError(BrokerError, LookupError):
    """Raised for a channel that was never opened or is already closed."""

    def __init__(self, channel: Hashable):
        self.channel = channel
        super().__init__(f"Unknown channel: {channel!r}")


class UnknownQueueError(BrokerError, LookupError):
    """Raised for a queue that was never declared."""

    def __init__(self, queue: str):
        self.queue = queue
        super().__init__(f"Unknown queue: {queue!r}")


class UnknownExchangeError(BrokerError, LookupError):
    """Raised for an exchange that was never declared."""

    def __init__(self, exchange: str):
        self.exchange = exchange
        super().__init__(f"Unknown exchange: {exchange!r}")


class UnknownBindingError(BrokerError, LookupError):
    """Raised when unbinding a pattern that is not bound on the exchange."""

    def __init__(self, exchange: str, routing_key: str):
        self.exchange = exchange
        self.routing_key = routing_key
        super().__init__(f"Unknown binding: {routing_key!r} on exchange {exchange!r}")


class TransactionAlreadyStartedError(BrokerError):
    """Raised by ``tx_select`` on a channel that is already in a transaction."""

    def __init__(self, channel: Hashable):
        self.channel = channel
        super().__init__(f"Transaction already started on channel {channel!r}")


class NoTransactionError(BrokerError):
    """Raised by ``tx_commit``/``tx_rollback`` without a prior ``tx_select``."""

    def __init__(self, channel: Hashable):
        self.channel = channel
        super().__init__(f"No transaction started on channel {channel!r}")


class NoQueueSelectedError(BrokerError):
    """Raised by ``recv`` before any ``consume`` call."""

    def __init__(self):
        super().__init__("No queue selected, call consume() first")


class UnsupportedOptionError(BrokerError, ValueError):
    """Raised when an option asks for behaviour the broker does not emulate."""

    def __init__(self, option: str, value: Any):
        self.option = option
        self.value = value
        super().__init__(f"Unsupported option {option}={value!r}")


__all__ = [
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
