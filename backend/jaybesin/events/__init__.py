"""
Event package
- Async pub/sub bus carrying collection change notices
- Redis Streams with in-memory fallback
"""

from jaybesin.events.event_bus import AsyncEventBus, COLLECTION_TOPICS, topic_for

__all__ = ["AsyncEventBus", "COLLECTION_TOPICS", "topic_for"]
