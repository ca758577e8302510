"""
Async change-notification bus: pub/sub between the store and live views
- Redis Streams when reachable, otherwise one asyncio.Queue per topic
- Handlers for a topic run one at a time, in publish order
"""

import asyncio
import json
import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)

# Every collection publishes "<collection>.changed" after a successful write
COLLECTION_TOPICS = [
    "shipments.changed",
    "products.changed",
    "vehicles.changed",
    "categories.changed",
    "messages.changed",
    "agents.changed",
    "settings.changed",
]

# async callable(topic, data)
Handler = Callable[[str, dict], Coroutine[Any, Any, None]]

QUEUE_SIZE = 10000


def topic_for(collection: str) -> str:
    return f"{collection}.changed"


class AsyncEventBus:
    """
    Topic-based event bus.

    Usage:
        bus = AsyncEventBus(redis_url="redis://localhost:6379")
        await bus.subscribe("shipments.changed", handler)
        await bus.start()
        await bus.publish("shipments.changed", {"collection": "shipments", "version": 3})

    An empty redis_url skips Redis entirely (tests, single-process dev).
    """

    def __init__(self, redis_url: str = "redis://localhost:6379"):
        self._redis_url = redis_url
        self._redis = None
        self._use_redis = False

        self._handlers: dict[str, list[Handler]] = defaultdict(list)
        self._queues: dict[str, asyncio.Queue] = {}
        self._consumers: dict[str, asyncio.Task] = {}
        self._running = False

    @property
    def is_redis(self) -> bool:
        return self._use_redis

    @property
    def is_running(self) -> bool:
        return self._running

    async def _try_connect_redis(self):
        if not self._redis_url:
            logger.info("AsyncEventBus: no REDIS_URL, in-memory mode")
            return
        try:
            import redis.asyncio as aioredis
            self._redis = aioredis.from_url(self._redis_url, decode_responses=True)
            await self._redis.ping()
            self._use_redis = True
            logger.info("AsyncEventBus: connected to Redis")
        except Exception as e:
            logger.warning(f"AsyncEventBus: Redis unavailable ({e}), in-memory mode")
            self._redis = None
            self._use_redis = False

    def _queue(self, topic: str) -> asyncio.Queue:
        if topic not in self._queues:
            self._queues[topic] = asyncio.Queue(maxsize=QUEUE_SIZE)
        return self._queues[topic]

    def _ensure_consumer(self, topic: str):
        """Start a consumer for topic once the bus is running."""
        if not self._running or topic in self._consumers:
            return
        if self._use_redis:
            coro, name = self._redis_consumer(topic), f"redis-consumer-{topic}"
        else:
            self._queue(topic)
            coro, name = self._inmemory_consumer(topic), f"inmemory-consumer-{topic}"
        self._consumers[topic] = asyncio.create_task(coro, name=name)

    async def subscribe(self, topic: str, handler: Handler):
        """Register handler for topic. Works before or after start()."""
        self._handlers[topic].append(handler)
        self._ensure_consumer(topic)
        logger.debug(f"Subscribed: {topic} → {handler.__qualname__}")

    async def unsubscribe(self, topic: str, handler: Handler):
        handlers = self._handlers.get(topic, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, topic: str, data: dict):
        if self._use_redis and self._redis:
            try:
                serialized = {k: json.dumps(v) if isinstance(v, (dict, list)) else str(v)
                              for k, v in data.items()}
                serialized["_timestamp"] = datetime.now(timezone.utc).isoformat()
                await self._redis.xadd(topic, serialized, maxlen=1000)
                return
            except Exception as e:
                logger.error(f"Redis publish failed ({topic}): {e}")
        self._enqueue_inmemory(topic, data)

    def _enqueue_inmemory(self, topic: str, data: dict):
        queue = self._queue(topic)
        try:
            queue.put_nowait(data)
        except asyncio.QueueFull:
            # drop the oldest; a newer change notice supersedes it
            try:
                queue.get_nowait()
            except asyncio.QueueEmpty:
                pass
            queue.put_nowait(data)

    async def _inmemory_consumer(self, topic: str):
        queue = self._queue(topic)
        while self._running:
            try:
                data = await asyncio.wait_for(queue.get(), timeout=1.0)
                await self._dispatch(topic, data)
            except asyncio.TimeoutError:
                continue
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"In-memory consumer error ({topic}): {e}")
                await asyncio.sleep(0.1)

    async def _redis_consumer(self, topic: str):
        last_id = "$"  # only messages published from now on
        while self._running:
            try:
                results = await self._redis.xread({topic: last_id}, count=10, block=1000)
                for _stream, messages in results:
                    for msg_id, msg_data in messages:
                        last_id = msg_id
                        data = {k: v for k, v in msg_data.items() if k != "_timestamp"}
                        for k, v in data.items():
                            try:
                                data[k] = json.loads(v)
                            except (json.JSONDecodeError, TypeError):
                                pass
                        await self._dispatch(topic, data)
            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"Redis consumer error ({topic}): {e}")
                await asyncio.sleep(1.0)

    async def _dispatch(self, topic: str, data: dict):
        for handler in list(self._handlers.get(topic, [])):
            try:
                await handler(topic, data)
            except Exception as e:
                logger.error(f"Handler error ({topic}, {handler.__qualname__}): {e}")

    async def start(self):
        await self._try_connect_redis()
        self._running = True
        for topic in set(COLLECTION_TOPICS) | set(self._handlers):
            self._ensure_consumer(topic)
        logger.info(
            f"AsyncEventBus started: {len(self._consumers)} consumers "
            f"({'Redis' if self._use_redis else 'in-memory'})"
        )

    async def stop(self):
        self._running = False
        for task in self._consumers.values():
            task.cancel()
        if self._consumers:
            await asyncio.gather(*self._consumers.values(), return_exceptions=True)
        self._consumers = {}

        if self._redis:
            await self._redis.aclose()
            self._redis = None

        logger.info("AsyncEventBus stopped")
