"""TestRabbit Exchange - Topic-Style Message Exchange.

Every declared exchange routes by matching the routing key against the
patterns bound to it. There is no direct, fanout or headers variant.

Routing key patterns support:
- * matches exactly one word
- # matches any sequence of characters, dots included
- . separates words

Example patterns:
- "order.*" matches "order.new", not "order.new.extra"
- "order.#" matches "order.new" and "order.new.extra"

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from testrabbit_core.broker.binding import Binding, BindingTable

logger = logging.getLogger(__name__)


@dataclass
class ExchangeConfig:
    """Exchange configuration.

    Attributes:
        name: Exchange name
        options: Declare options, kept for inspection only
    """

    name: str
    options: Dict[str, Any] = field(default_factory=dict)


class Exchange:
    """A named routing point owning its bindings."""

    def __init__(self, config: ExchangeConfig):
        """Initialize exchange.

        Args:
            config: Exchange configuration
        """
        self.config = config
        self._bindings = BindingTable(config.name)
        self._stats = {
            "messages_routed": 0,
            "messages_dropped": 0,
        }

    @property
    def name(self) -> str:
        """Get exchange name."""
        return self.config.name

    def bind(self, queue_name: str, pattern: str) -> Optional[str]:
        """Bind a queue to this exchange.

        Args:
            queue_name: Queue to bind
            pattern: Binding pattern

        Returns:
            Queue previously bound under the same pattern, if any
        """
        previous = self._bindings.add(queue_name, pattern)
        logger.info(f"Bound queue {queue_name} to exchange {self.name} with key {pattern!r}")
        return previous

    def unbind(self, pattern: str) -> Optional[Binding]:
        """Remove the binding for a pattern.

        Returns:
            The removed binding, or None if the pattern was not bound
        """
        binding = self._bindings.remove(pattern)
        if binding is not None:
            logger.info(f"Unbound queue {binding.queue_name} from exchange {self.name}")
        return binding

    def unbind_queue(self, queue_name: str) -> int:
        """Remove all bindings targeting a queue."""
        return self._bindings.remove_queue(queue_name)

    def route(self, routing_key: str) -> List[str]:
        """Route a routing key to queues.

        One entry is returned per matching binding, so a queue reached
        through two patterns appears twice.

        Args:
            routing_key: Routing key of the published message

        Returns:
            List of queue names to deliver to
        """
        queues = [b.queue_name for b in self._bindings.find_matching(routing_key)]

        if queues:
            self._stats["messages_routed"] += 1
        else:
            self._stats["messages_dropped"] += 1

        return queues

    def get_bindings(self) -> Dict[str, str]:
        """Pattern to queue name mapping."""
        return self._bindings.to_dict()

    def get_stats(self) -> Dict[str, Any]:
        """Get exchange statistics."""
        return {
            "name": self.name,
            "bindings": len(self._bindings),
            **self._stats,
        }


__all__ = [
    "Exchange",
    "ExchangeConfig",
]
