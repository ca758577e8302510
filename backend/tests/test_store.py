"""Tests for the document store and live snapshots."""

import asyncio
import time

import pytest

from jaybesin.core.shipment_record import build_shipment_payload
from jaybesin.events.event_bus import AsyncEventBus
from jaybesin.store.document_store import (
    DocumentStore, DuplicateKeyError, PersistenceError, WriteOutcomeUnknown,
)


def _payload(tracking_number, cbm=1.0, **form):
    return build_shipment_payload({
        "tracking_number": tracking_number,
        "consignee_name": "Kwame",
        "rate_per_cbm": 100,
        "items": [{"description": "Boxes", "cbm": cbm}],
        **form,
    })


class TestCrud:
    def test_create_and_get(self, store):
        async def scenario():
            doc_id = await store.create("shipments", _payload("JB-CN-000001"))
            return doc_id, await store.get("shipments", doc_id)

        doc_id, doc = asyncio.run(scenario())
        assert doc["id"] == doc_id
        assert doc["tracking_number"] == "JB-CN-000001"
        assert doc["total_cost"] == pytest.approx(100.0)
        assert doc["created_at"] is not None

    def test_list_newest_first(self, store):
        async def scenario():
            await store.create("shipments", _payload("JB-CN-000001"))
            time.sleep(0.01)
            await store.create("shipments", _payload("JB-CN-000002"))
            return await store.list("shipments")

        docs = asyncio.run(scenario())
        assert [d["tracking_number"] for d in docs] == ["JB-CN-000002", "JB-CN-000001"]

    def test_update_merges_and_refreshes_cache(self, store):
        async def scenario():
            doc_id = await store.create("shipments", _payload("JB-CN-000001"))
            await store.update("shipments", doc_id, {"items": [{"cbm": 3.0}]})
            return await store.get("shipments", doc_id)

        doc = asyncio.run(scenario())
        assert doc["tracking_number"] == "JB-CN-000001"
        assert doc["consignee_name"] == "Kwame"
        assert doc["total_volume"] == pytest.approx(3.0)
        assert doc["total_cost"] == pytest.approx(300.0)

    def test_update_missing_document(self, store):
        with pytest.raises(PersistenceError) as exc:
            asyncio.run(store.update("shipments", "nope", {"status": "Order Initiated"}))
        assert exc.value.not_found

    def test_unknown_collection(self, store):
        with pytest.raises(PersistenceError):
            asyncio.run(store.list("invoices"))

    def test_unknown_field_rejected(self, store):
        with pytest.raises(PersistenceError):
            asyncio.run(store.create("products", {"name": "Fan", "colour": "red"}))

    def test_exists(self, store):
        async def scenario():
            await store.create("shipments", _payload("JB-CN-000001"))
            return (
                await store.exists("shipments", "tracking_number", "JB-CN-000001"),
                await store.exists("shipments", "tracking_number", "JB-CN-999999"),
            )

        assert asyncio.run(scenario()) == (True, False)

    def test_tracking_number_is_unique(self, store):
        async def scenario():
            await store.create("shipments", _payload("JB-CN-000001"))
            await store.create("shipments", _payload("JB-CN-000001", consignee_name="Esi"))

        with pytest.raises(DuplicateKeyError):
            asyncio.run(scenario())
        docs = asyncio.run(store.list("shipments"))
        assert [d["consignee_name"] for d in docs] == ["Kwame"]

    def test_delete_where(self, store):
        async def scenario():
            await store.create("categories", {"name": "SOLAR"})
            await store.create("categories", {"name": "SOLAR"})
            await store.create("categories", {"name": "FURNITURE"})
            count = await store.delete_where("categories", "name", "SOLAR")
            return count, await store.list("categories")

        count, remaining = asyncio.run(scenario())
        assert count == 2
        assert [c["name"] for c in remaining] == ["FURNITURE"]


class TestBulkUpdate:
    def test_all_updated(self, store):
        async def scenario():
            ids = [await store.create("shipments", _payload(f"JB-CN-00000{i}")) for i in range(3)]
            count = await store.bulk_update("shipments", ids, {"status": "Vessel Departed Origin"})
            return count, await store.list("shipments")

        count, docs = asyncio.run(scenario())
        assert count == 3
        assert {d["status"] for d in docs} == {"Vessel Departed Origin"}

    def test_missing_id_applies_nothing(self, store):
        async def scenario():
            doc_id = await store.create("shipments", _payload("JB-CN-000001"))
            with pytest.raises(PersistenceError):
                await store.bulk_update("shipments", [doc_id, "missing"], {"status": "Vessel Departed Origin"})
            return await store.get("shipments", doc_id)

        assert asyncio.run(scenario())["status"] == "Order Initiated"

    def test_empty_selection(self, store):
        assert asyncio.run(store.bulk_update("shipments", [], {"status": "x"})) == 0


class TestSettings:
    def test_defaults_when_absent(self, store):
        settings = asyncio.run(store.load_settings())
        assert settings.currency_rate == 15.8

    def test_push_merges(self, store):
        async def scenario():
            await store.push_settings({"bank_name": "GCB Bank"})
            await store.push_settings({"currency_rate": 16.2})
            return await store.load_settings()

        settings = asyncio.run(scenario())
        assert settings.bank_name == "GCB Bank"
        assert settings.currency_rate == 16.2


class TestSubscriptions:
    def test_initial_and_change_snapshots(self, store):
        received = []

        async def on_snapshot(snapshot):
            received.append((snapshot.version, [d["name"] for d in snapshot.documents]))

        async def scenario():
            await store.create("categories", {"name": "SOLAR"})
            subscription = await store.subscribe("categories", on_snapshot)
            await store.create("categories", {"name": "FURNITURE"})
            subscription.unsubscribe()
            await store.create("categories", {"name": "TEXTILES"})

        asyncio.run(scenario())
        assert received == [(1, ["SOLAR"]), (2, ["SOLAR", "FURNITURE"])]

    def test_stale_snapshot_dropped(self, store):
        received = []

        async def on_snapshot(snapshot):
            received.append(snapshot.version)

        async def scenario():
            subscription = await store.subscribe("products", on_snapshot)
            await store.create("products", {"name": "Fan"})
            await store.create("products", {"name": "Lamp"})
            delivered = await subscription.deliver(await store._snapshot("products", 1))
            return delivered

        assert asyncio.run(scenario()) is False
        assert received == [0, 1, 2]

    def test_failing_subscriber_does_not_break_writes(self, store):
        async def broken(snapshot):
            raise RuntimeError("view crashed")

        async def scenario():
            await store.subscribe("products", broken)
            return await store.create("products", {"name": "Fan"})

        assert asyncio.run(scenario())

    def test_changes_through_event_bus(self, session_factory):
        received = []

        async def on_snapshot(snapshot):
            received.append(len(snapshot.documents))

        async def scenario():
            bus = AsyncEventBus(redis_url="")
            store = DocumentStore(session_factory, bus, write_timeout=5.0)
            await store.start()
            await bus.start()
            await store.subscribe("vehicles", on_snapshot)
            await store.create("vehicles", {"name": "Toyota Hilux"})
            for _ in range(50):
                if len(received) == 2:
                    break
                await asyncio.sleep(0.02)
            await store.stop()
            await bus.stop()

        asyncio.run(scenario())
        assert received == [0, 1]


class TestTimeout:
    def test_slow_write_raises(self, session_factory):
        def slow_factory():
            time.sleep(0.5)
            return session_factory()

        store = DocumentStore(slow_factory, write_timeout=0.05)

        async def scenario():
            try:
                await store.create("categories", {"name": "SOLAR"})
            finally:
                await store.wait_late_writes()

        with pytest.raises(WriteOutcomeUnknown, match="timed out"):
            asyncio.run(scenario())

    def test_late_commit_reaches_subscribers(self, session_factory):
        def slow_factory():
            time.sleep(0.2)
            return session_factory()

        store = DocumentStore(slow_factory, write_timeout=0.05)
        received = []

        async def on_snapshot(snapshot):
            received.append((snapshot.version, [d["name"] for d in snapshot.documents]))

        async def scenario():
            await store.subscribe("categories", on_snapshot)
            with pytest.raises(WriteOutcomeUnknown) as exc:
                await store.create("categories", {"name": "SOLAR"})
            assert isinstance(exc.value, PersistenceError)
            await store.wait_late_writes()

        asyncio.run(scenario())
        assert received == [(0, []), (1, ["SOLAR"])]
