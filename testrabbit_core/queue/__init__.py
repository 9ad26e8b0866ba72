"""TestRabbit Queue Module - Messages & FIFO Storage.

Copyright (c) 2024-2026 BlackRoad OS, Inc. All rights reserved.
"""

from testrabbit_core.queue.message import Message
from testrabbit_core.queue.base import Queue, QueueConfig

__all__ = [
    "Message",
    "Queue",
    "QueueConfig",
]
