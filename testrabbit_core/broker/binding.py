"""TestRabbit Binding - Exchange-Queue Bindings.

This module compiles binding patterns into matchers and keeps the
per-exchange table of bindings.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional

logger = logging.getLogger(__name__)

# Replacement for each wildcard, applied to the unescaped pattern pieces
MULTI_WORD = ".*"
SINGLE_WORD = r"[^.]+"


@dataclass
class BindingKey:
    """A binding pattern with wildcard support.

    Supports AMQP-style wildcards:
    - # matches any run of characters, dots included
    - * matches exactly one dot-free word
    - . separates words

    Only one kind of wildcard is expanded per pattern. When a pattern
    holds a ``#`` every ``#`` is expanded and any ``*`` is kept as a
    literal character. Patterns without wildcards match only themselves
    and are compared as plain strings.
    """

    pattern: str
    _regex: Optional[re.Pattern] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        self._regex = self._compile()

    def _compile(self) -> Optional[re.Pattern]:
        """Compile pattern to a regex, or None for a literal pattern."""
        if "#" in self.pattern:
            wildcard, replacement = "#", MULTI_WORD
        elif "*" in self.pattern:
            wildcard, replacement = "*", SINGLE_WORD
        else:
            return None

        pieces = [re.escape(piece) for piece in self.pattern.split(wildcard)]
        return re.compile(replacement.join(pieces), re.DOTALL)

    def matches(self, routing_key: str) -> bool:
        """Check if a routing key matches this pattern.

        Args:
            routing_key: Key to match

        Returns:
            True if the whole key matches
        """
        if self._regex is None:
            return routing_key == self.pattern
        return self._regex.fullmatch(routing_key) is not None


@dataclass
class Binding:
    """A binding between an exchange and a queue.

    Attributes:
        exchange_name: Source exchange
        queue_name: Target queue
        pattern: Literal binding pattern as given to queue_bind
    """

    exchange_name: str
    queue_name: str
    pattern: str = ""
    _key: Optional[BindingKey] = field(default=None, repr=False, compare=False)

    def __post_init__(self):
        self._key = BindingKey(self.pattern)

    @property
    def key(self) -> BindingKey:
        """Compiled matcher for this binding."""
        return self._key

    def matches(self, routing_key: str) -> bool:
        """Check if routing key matches this binding."""
        return self._key.matches(routing_key)


class BindingTable:
    """Bindings of a single exchange, keyed by literal pattern.

    One pattern maps to exactly one queue. Binding a pattern again
    replaces its destination.
    """

    def __init__(self, exchange_name: str):
        self.exchange_name = exchange_name
        self._bindings: Dict[str, Binding] = {}

    def add(self, queue_name: str, pattern: str) -> Optional[str]:
        """Bind a pattern to a queue.

        Args:
            queue_name: Destination queue
            pattern: Binding pattern

        Returns:
            The queue the pattern was previously bound to, if any
        """
        previous = self._bindings.get(pattern)
        self._bindings[pattern] = Binding(
            exchange_name=self.exchange_name,
            queue_name=queue_name,
            pattern=pattern,
        )
        if previous is not None and previous.queue_name != queue_name:
            logger.info(
                f"Rebound {pattern!r} on {self.exchange_name} from "
                f"{previous.queue_name} to {queue_name}"
            )
        return previous.queue_name if previous else None

    def remove(self, pattern: str) -> Optional[Binding]:
        """Remove the binding for a pattern.

        Returns:
            The removed binding, or None if the pattern was not bound
        """
        return self._bindings.pop(pattern, None)

    def remove_queue(self, queue_name: str) -> int:
        """Remove every binding that targets a queue.

        Returns:
            Number of bindings removed
        """
        doomed = [p for p, b in self._bindings.items() if b.queue_name == queue_name]
        for pattern in doomed:
            del self._bindings[pattern]
        return len(doomed)

    def find_matching(self, routing_key: str) -> List[Binding]:
        """Bindings whose pattern matches a routing key, in bind order."""
        return [b for b in self._bindings.values() if b.matches(routing_key)]

    def to_dict(self) -> Dict[str, str]:
        """Pattern to queue name mapping."""
        return {pattern: b.queue_name for pattern, b in self._bindings.items()}

    def __contains__(self, pattern: object) -> bool:
        return pattern in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __iter__(self) -> Iterator[Binding]:
        return iter(list(self._bindings.values()))


__all__ = [
    "Binding",
    "BindingKey",
    "BindingTable",
]
