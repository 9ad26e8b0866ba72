"""TestRabbit Message - Core Message Type.

This module defines the message record stored in queues and handed back
by ``get`` and ``recv``.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass
class Message:
    """A queued message.

    Only ``body``, ``routing_key``, ``exchange`` and ``props`` are stored
    while the message waits in a queue. The delivery fields are stamped
    when the message is retrieved.

    Attributes:
        body: Message payload, opaque to the broker
        routing_key: Routing key it was published with
        exchange: Exchange it was published to
        props: Publisher supplied properties, echoed back verbatim
        delivery_tag: Broker-wide retrieval counter value
        redelivered: Always False, redelivery is not tracked
        message_count: Always 0, backlog is not computed
        consumer_tag: Set to "" by ``recv``
        content_type: Set to "" by ``get``
    """

    body: Any = None
    routing_key: str = ""
    exchange: str = ""
    props: Dict[str, Any] = field(default_factory=dict)

    # Populated on retrieval
    delivery_tag: Optional[int] = None
    redelivered: bool = False
    message_count: int = 0
    consumer_tag: Optional[str] = None
    content_type: Optional[str] = None

    @classmethod
    def create(
        cls,
        body: Any,
        routing_key: str,
        exchange: str,
        props: Optional[Dict[str, Any]] = None,
    ) -> "Message":
        """Create a new message for enqueueing.

        Body and props are deep-copied so later changes by the publisher,
        or by whoever receives a sibling copy, do not leak into this one.
        """
        return cls(
            body=deepcopy(body),
            routing_key=routing_key,
            exchange=exchange,
            props=deepcopy(props) if props else {},
        )

    def copy(self) -> "Message":
        """Return an independent copy of this message."""
        return deepcopy(self)

    def stamp_get(self, delivery_tag: int) -> "Message":
        """Fill in the delivery fields reported by ``get``."""
        self.delivery_tag = delivery_tag
        self.content_type = ""
        self.redelivered = False
        self.message_count = 0
        return self

    def stamp_recv(self, delivery_tag: int) -> "Message":
        """Fill in the delivery fields reported by ``recv``."""
        self.delivery_tag = delivery_tag
        self.consumer_tag = ""
        return self

    def to_dict(self) -> Dict[str, Any]:
        """Convert message to dictionary.

        Delivery fields that were never stamped are left out.
        """
        result: Dict[str, Any] = {
            "body": self.body,
            "routing_key": self.routing_key,
            "exchange": self.exchange,
            "props": dict(self.props),
        }
        if self.delivery_tag is not None:
            result["delivery_tag"] = self.delivery_tag
            result["redelivered"] = self.redelivered
            result["message_count"] = self.message_count
        if self.consumer_tag is not None:
            result["consumer_tag"] = self.consumer_tag
        if self.content_type is not None:
            result["content_type"] = self.content_type
        return result

    def __repr__(self) -> str:
        return (
            f"Message(routing_key={self.routing_key!r}, exchange={self.exchange!r}, "
            f"delivery_tag={self.delivery_tag!r})"
        )


__all__ = ["Message"]
