"""TestRabbit Transaction - Per-Channel Publish Buffering.

While a channel is in a transaction its publishes are recorded here
unrouted, and replayed in order on commit.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, Hashable, Iterator, List, Optional


@dataclass
class PendingPublish:
    """The arguments of a publish call waiting for commit."""

    routing_key: str
    body: Any
    options: Dict[str, Any] = field(default_factory=dict)
    props: Dict[str, Any] = field(default_factory=dict)


class Transaction:
    """Ordered buffer of publishes for one channel."""

    def __init__(self, channel: Hashable):
        self.channel = channel
        self._pending: List[PendingPublish] = []

    def add(
        self,
        routing_key: str,
        body: Any,
        options: Optional[Dict[str, Any]] = None,
        props: Optional[Dict[str, Any]] = None,
    ) -> PendingPublish:
        """Record a publish call.

        Body, options and props are snapshotted at call time.
        """
        pending = PendingPublish(
            routing_key=routing_key,
            body=deepcopy(body),
            options=dict(options or {}),
            props=deepcopy(props) if props else {},
        )
        self._pending.append(pending)
        return pending

    def __iter__(self) -> Iterator[PendingPublish]:
        return iter(list(self._pending))

    def __len__(self) -> int:
        return len(self._pending)

    def __repr__(self) -> str:
        return f"Transaction(channel={self.channel!r}, pending={len(self._pending)})"


__all__ = ["PendingPublish", "Transaction"]
