"""
Live collection subscriptions.
Each delivery is a full snapshot that replaces the subscriber's view;
a snapshot not newer than the last one delivered is dropped.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)


@dataclass
class CollectionSnapshot:
    collection: str
    version: int
    documents: list[dict] = field(default_factory=list)


SnapshotCallback = Callable[[CollectionSnapshot], Coroutine[Any, Any, None]]


class Subscription:
    """One consumer's live view of one collection"""

    def __init__(self, collection: str, callback: SnapshotCallback, on_close=None):
        self.collection = collection
        self.active = True
        self.last_version = -1
        self._callback = callback
        self._on_close = on_close
        # one delivery at a time per subscription
        self._lock = asyncio.Lock()

    async def deliver(self, snapshot: CollectionSnapshot) -> bool:
        async with self._lock:
            if not self.active or snapshot.version <= self.last_version:
                return False
            self.last_version = snapshot.version
            try:
                await self._callback(snapshot)
            except Exception as e:
                logger.error(f"Subscriber for {self.collection} failed on v{snapshot.version}: {e}")
                return False
            return True

    def unsubscribe(self):
        if not self.active:
            return
        self.active = False
        if self._on_close is not None:
            self._on_close(self)
