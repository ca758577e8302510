"""
Document store over SQLAlchemy: CRUD and live snapshots per collection
- Collections: shipments, products, vehicles, categories, messages, agents
  plus the single config/global settings document ("settings")
- Blocking DB work runs in the default executor, one session per operation
- Writes are bounded by WRITE_TIMEOUT_SECONDS; every failure surfaces as
  PersistenceError, nothing is retried here
- A timed-out write may still commit: the caller gets WriteOutcomeUnknown and,
  if the write lands later, subscribers are notified then
- Unique-index violations surface as DuplicateKeyError
- After each successful write a "<collection>.changed" notice goes out on the
  event bus and subscribers receive a fresh full snapshot
"""

from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from datetime import datetime, timezone
from functools import partial

from sqlalchemy import desc, inspect
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from jaybesin.config import settings as app_settings
from jaybesin.core.shipment_record import compute_totals
from jaybesin.events.event_bus import AsyncEventBus, topic_for
from jaybesin.models import (
    Agent, Category, Message, Product, Shipment, SiteSettingsDocument, Vehicle,
)
from jaybesin.models.site_settings import GLOBAL_SETTINGS_KEY
from jaybesin.schemas.settings import SiteSettings
from jaybesin.store.subscriptions import CollectionSnapshot, SnapshotCallback, Subscription

logger = logging.getLogger(__name__)

COLLECTIONS = {
    "shipments": Shipment,
    "products": Product,
    "vehicles": Vehicle,
    "categories": Category,
    "messages": Message,
    "agents": Agent,
}

SETTINGS_COLLECTION = "settings"

# Listed newest first; the rest in insertion order
NEWEST_FIRST = {"shipments", "messages"}

# Never changed through update()
PROTECTED_FIELDS = {"id", "created_at"}


class PersistenceError(RuntimeError):
    """A store operation failed (network, permission, timeout, missing document)."""

    def __init__(self, operation: str, collection: str, message: str, not_found: bool = False):
        self.operation = operation
        self.collection = collection
        self.not_found = not_found
        super().__init__(f"{operation} on {collection} failed: {message}")


class WriteOutcomeUnknown(PersistenceError):
    """The write timed out but may still commit; re-read before retrying."""


class DuplicateKeyError(PersistenceError):
    """A unique index (e.g. shipments.tracking_number) rejected the write."""


def to_document(obj) -> dict:
    """ORM row → plain dict of its columns."""
    return {attr.key: getattr(obj, attr.key) for attr in inspect(obj).mapper.column_attrs}


def _columns(model) -> set[str]:
    return {attr.key for attr in inspect(model).column_attrs}


def _refresh_shipment_cache(row: Shipment):
    totals = compute_totals(row.items, row.rate_per_cbm, row.shipping_fee)
    row.total_volume = totals.total_volume
    row.total_cost = totals.total_cost
    row.last_updated = datetime.now(timezone.utc)


class DocumentStore:
    """
    Collection-oriented store.

    Usage:
        store = DocumentStore(SessionLocal, event_bus)
        await store.start()
        doc_id = await store.create("shipments", payload)
        sub = await store.subscribe("shipments", on_snapshot)
    """

    def __init__(
        self,
        session_factory,
        event_bus: AsyncEventBus | None = None,
        write_timeout: float | None = None,
    ):
        self._session_factory = session_factory
        self._bus = event_bus
        self._write_timeout = write_timeout or app_settings.WRITE_TIMEOUT_SECONDS
        self._versions: dict[str, int] = defaultdict(int)
        self._subscriptions: dict[str, list[Subscription]] = defaultdict(list)
        self._late_writes: set[asyncio.Future] = set()
        self._started = False

    # ── lifecycle ──

    async def start(self):
        """Listen for change notices on the bus (no-op without a bus)."""
        if self._bus is None or self._started:
            return
        for collection in [*COLLECTIONS, SETTINGS_COLLECTION]:
            await self._bus.subscribe(topic_for(collection), self._on_change)
        self._started = True

    async def stop(self):
        await self.wait_late_writes()
        if self._bus is not None and self._started:
            for collection in [*COLLECTIONS, SETTINGS_COLLECTION]:
                await self._bus.unsubscribe(topic_for(collection), self._on_change)
        self._started = False
        for subs in self._subscriptions.values():
            for sub in subs:
                sub.active = False
        self._subscriptions.clear()

    # ── helpers ──

    def _model(self, operation: str, collection: str):
        model = COLLECTIONS.get(collection)
        if model is None:
            raise PersistenceError(operation, collection, "unknown collection")
        return model

    def _check_fields(self, operation: str, collection: str, model, fields: dict):
        unknown = set(fields) - _columns(model)
        if unknown:
            raise PersistenceError(operation, collection, f"unknown fields {sorted(unknown)}")

    async def _run(self, operation: str, collection: str, fn, *args, write: bool = False):
        loop = asyncio.get_running_loop()
        future = loop.run_in_executor(None, partial(fn, *args))
        try:
            if not write:
                return await future
            # the write keeps running after a timeout; its future stays uncancelled
            return await asyncio.wait_for(asyncio.shield(future), self._write_timeout)
        except PersistenceError:
            raise
        except asyncio.TimeoutError as e:
            logger.error(f"{operation} on {collection} timed out after {self._write_timeout}s")
            self._track_late_write(operation, collection, future)
            raise WriteOutcomeUnknown(
                operation, collection, f"timed out after {self._write_timeout}s, outcome unknown",
            ) from e
        except IntegrityError as e:
            logger.warning(f"{operation} on {collection} rejected: {e.orig}")
            raise DuplicateKeyError(operation, collection, str(e.orig)) from e
        except SQLAlchemyError as e:
            logger.error(f"{operation} on {collection} failed: {e}")
            raise PersistenceError(operation, collection, str(e)) from e

    def _track_late_write(self, operation: str, collection: str, future: asyncio.Future):
        """Notify subscribers if a timed-out write commits after all."""
        self._late_writes.add(future)

        def _finished(done: asyncio.Future):
            self._late_writes.discard(done)
            if done.cancelled():
                return
            error = done.exception()
            if error is not None:
                logger.error(f"Late {operation} on {collection} failed: {error}")
                return
            logger.warning(f"Late {operation} on {collection} committed after its timeout")
            task = done.get_loop().create_task(self._notify(collection))
            self._late_writes.add(task)
            task.add_done_callback(self._late_writes.discard)

        future.add_done_callback(_finished)

    async def wait_late_writes(self):
        """Wait until every timed-out write has settled and been announced."""
        while self._late_writes:
            await asyncio.gather(*self._late_writes, return_exceptions=True)

    # ── blocking operations (executor) ──

    def _list_sync(self, collection: str) -> list[dict]:
        model = self._model("list", collection)
        db = self._session_factory()
        try:
            query = db.query(model)
            if collection in NEWEST_FIRST:
                query = query.order_by(desc(model.created_at))
            return [to_document(row) for row in query.all()]
        finally:
            db.close()

    def _get_sync(self, collection: str, doc_id: str) -> dict | None:
        model = self._model("get", collection)
        db = self._session_factory()
        try:
            row = db.get(model, doc_id)
            return to_document(row) if row is not None else None
        finally:
            db.close()

    def _exists_sync(self, collection: str, field: str, value) -> bool:
        model = self._model("exists", collection)
        if field not in _columns(model):
            raise PersistenceError("exists", collection, f"unknown field {field}")
        db = self._session_factory()
        try:
            return db.query(model.id).filter(getattr(model, field) == value).first() is not None
        finally:
            db.close()

    def _create_sync(self, collection: str, data: dict) -> str:
        model = self._model("create", collection)
        self._check_fields("create", collection, model, data)
        db = self._session_factory()
        try:
            row = model(**{k: v for k, v in data.items() if k not in PROTECTED_FIELDS})
            if isinstance(row, Shipment):
                _refresh_shipment_cache(row)
            db.add(row)
            db.commit()
            return row.id
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _update_sync(self, collection: str, doc_id: str, fields: dict):
        model = self._model("update", collection)
        self._check_fields("update", collection, model, fields)
        db = self._session_factory()
        try:
            row = db.get(model, doc_id)
            if row is None:
                raise PersistenceError("update", collection, f"no document {doc_id}", not_found=True)
            self._merge(row, fields)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _bulk_update_sync(self, collection: str, ids: list[str], fields: dict) -> int:
        """All named documents change in one transaction, or none do."""
        model = self._model("bulk_update", collection)
        self._check_fields("bulk_update", collection, model, fields)
        wanted = set(ids)
        db = self._session_factory()
        try:
            rows = db.query(model).filter(model.id.in_(wanted)).all()
            missing = wanted - {row.id for row in rows}
            if missing:
                raise PersistenceError(
                    "bulk_update", collection, f"no documents {sorted(missing)}", not_found=True,
                )
            for row in rows:
                self._merge(row, fields)
            db.commit()
            return len(rows)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _delete_sync(self, collection: str, doc_id: str):
        model = self._model("delete", collection)
        db = self._session_factory()
        try:
            row = db.get(model, doc_id)
            if row is None:
                raise PersistenceError("delete", collection, f"no document {doc_id}", not_found=True)
            db.delete(row)
            db.commit()
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _delete_where_sync(self, collection: str, field: str, value) -> int:
        model = self._model("delete_where", collection)
        if field not in _columns(model):
            raise PersistenceError("delete_where", collection, f"unknown field {field}")
        db = self._session_factory()
        try:
            rows = db.query(model).filter(getattr(model, field) == value).all()
            for row in rows:
                db.delete(row)
            db.commit()
            return len(rows)
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def _load_settings_sync(self) -> SiteSettings:
        db = self._session_factory()
        try:
            doc = db.get(SiteSettingsDocument, GLOBAL_SETTINGS_KEY)
            return SiteSettings(**(doc.data if doc is not None else {}))
        finally:
            db.close()

    def _merge_settings_sync(self, fields: dict) -> SiteSettings:
        """Read-modify-merge-write inside one transaction; unnamed fields survive."""
        db = self._session_factory()
        try:
            doc = db.get(SiteSettingsDocument, GLOBAL_SETTINGS_KEY)
            if doc is None:
                doc = SiteSettingsDocument(key=GLOBAL_SETTINGS_KEY, data={})
                db.add(doc)
            merged = {**(doc.data or {}), **fields}
            result = SiteSettings(**merged)
            doc.data = merged
            db.commit()
            return result
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    @staticmethod
    def _merge(row, fields: dict):
        for key, value in fields.items():
            if key in PROTECTED_FIELDS:
                continue
            setattr(row, key, value)
        if isinstance(row, Shipment):
            _refresh_shipment_cache(row)

    # ── public async API ──

    async def list(self, collection: str) -> list[dict]:
        if collection == SETTINGS_COLLECTION:
            return [(await self.load_settings()).model_dump()]
        return await self._run("list", collection, self._list_sync, collection)

    async def get(self, collection: str, doc_id: str) -> dict | None:
        return await self._run("get", collection, self._get_sync, collection, doc_id)

    async def exists(self, collection: str, field: str, value) -> bool:
        return await self._run("exists", collection, self._exists_sync, collection, field, value)

    async def create(self, collection: str, data: dict) -> str:
        doc_id = await self._run("create", collection, self._create_sync, collection, data, write=True)
        logger.info(f"Created {collection}/{doc_id}")
        await self._notify(collection)
        return doc_id

    async def update(self, collection: str, doc_id: str, fields: dict):
        """Merge: only the named fields change, last write wins."""
        await self._run("update", collection, self._update_sync, collection, doc_id, fields, write=True)
        logger.info(f"Updated {collection}/{doc_id}: {sorted(fields)}")
        await self._notify(collection)

    async def bulk_update(self, collection: str, ids: list[str], fields: dict) -> int:
        if not ids:
            return 0
        count = await self._run(
            "bulk_update", collection, self._bulk_update_sync, collection, list(ids), fields, write=True,
        )
        logger.info(f"Bulk updated {count} {collection}: {sorted(fields)}")
        await self._notify(collection)
        return count

    async def delete(self, collection: str, doc_id: str):
        await self._run("delete", collection, self._delete_sync, collection, doc_id, write=True)
        logger.info(f"Deleted {collection}/{doc_id}")
        await self._notify(collection)

    async def delete_where(self, collection: str, field: str, value) -> int:
        count = await self._run(
            "delete_where", collection, self._delete_where_sync, collection, field, value, write=True,
        )
        logger.info(f"Deleted {count} {collection} where {field}={value!r}")
        await self._notify(collection)
        return count

    async def load_settings(self) -> SiteSettings:
        return await self._run("load", SETTINGS_COLLECTION, self._load_settings_sync)

    async def push_settings(self, fields: dict) -> SiteSettings:
        result = await self._run(
            "push", SETTINGS_COLLECTION, self._merge_settings_sync, fields, write=True,
        )
        logger.info(f"Settings pushed: {sorted(fields)}")
        await self._notify(SETTINGS_COLLECTION)
        return result

    # ── live snapshots ──

    async def subscribe(self, collection: str, callback: SnapshotCallback) -> Subscription:
        """Deliver the current snapshot now and a new one after every change."""
        if collection != SETTINGS_COLLECTION:
            self._model("subscribe", collection)
        subscription = Subscription(collection, callback, on_close=self._remove)
        self._subscriptions[collection].append(subscription)
        await subscription.deliver(await self._snapshot(collection, self._versions[collection]))
        return subscription

    def _remove(self, subscription: Subscription):
        subs = self._subscriptions.get(subscription.collection, [])
        if subscription in subs:
            subs.remove(subscription)

    async def _snapshot(self, collection: str, version: int) -> CollectionSnapshot:
        return CollectionSnapshot(
            collection=collection,
            version=version,
            documents=await self.list(collection),
        )

    async def _notify(self, collection: str):
        self._versions[collection] += 1
        notice = {"collection": collection, "version": self._versions[collection]}
        if self._bus is not None and self._bus.is_running:
            await self._bus.publish(topic_for(collection), notice)
        else:
            await self._on_change(topic_for(collection), notice)

    async def _on_change(self, topic: str, data: dict):
        collection = data.get("collection")
        subs = list(self._subscriptions.get(collection, []))
        if not subs:
            return
        try:
            snapshot = await self._snapshot(collection, int(data.get("version", 0)))
        except PersistenceError as e:
            logger.error(f"Snapshot read for {collection} failed: {e}")
            return
        for sub in subs:
            await sub.deliver(snapshot)
