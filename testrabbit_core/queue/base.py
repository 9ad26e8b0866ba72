"""TestRabbit Queue - FIFO Message Storage.

This module provides the queue held by the broker for each declared
queue name. Messages are stored in strict FIFO order and handed out as
independent copies.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Deque, Dict, List, Optional

from testrabbit_core.queue.message import Message

logger = logging.getLogger(__name__)


@dataclass
class QueueConfig:
    """Queue configuration.

    Attributes:
        name: Queue name
        options: Declare options, kept for inspection only
    """

    name: str
    options: Dict[str, Any] = field(default_factory=dict)


class Queue:
    """FIFO message queue."""

    def __init__(self, config: Optional[QueueConfig] = None, name: Optional[str] = None):
        """Initialize queue.

        Args:
            config: Queue configuration
            name: Queue name (if config not provided)
        """
        if config is None:
            if name is None:
                raise ValueError("Either config or name must be provided")
            config = QueueConfig(name=name)

        self.config = config
        self._messages: Deque[Message] = deque()

    @property
    def name(self) -> str:
        """Get queue name."""
        return self.config.name

    def push(self, message: Message) -> None:
        """Append a message to the tail of the queue."""
        self._messages.append(message)
        logger.debug(f"Enqueued message on {self.name} ({len(self._messages)} pending)")

    def pop(self) -> Optional[Message]:
        """Remove and return the oldest message, or None if empty."""
        if not self._messages:
            return None
        message = self._messages.popleft()
        logger.debug(f"Dequeued message from {self.name} ({len(self._messages)} pending)")
        return message

    def purge(self) -> int:
        """Remove all messages.

        Returns:
            Number of messages removed
        """
        count = len(self._messages)
        self._messages.clear()
        return count

    def peek_all(self) -> List[Message]:
        """Copies of the pending messages, oldest first."""
        return [message.copy() for message in self._messages]

    def __len__(self) -> int:
        return len(self._messages)

    def __repr__(self) -> str:
        return f"Queue(name={self.name!r}, pending={len(self._messages)})"


__all__ = ["Queue", "QueueConfig"]
