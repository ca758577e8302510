"""Tests for the admin workflow controller."""

import asyncio
import random
import re

import pytest

from jaybesin.core.shipment_record import ShipmentValidationError
from jaybesin.store.document_store import PersistenceError
from jaybesin.workflow import AdminWorkflowController, FormMode, FormType


class FixedSequence(random.Random):
    """randint returns the queued values in order."""

    def __init__(self, values):
        super().__init__(0)
        self._values = list(values)

    def randint(self, a, b):
        return self._values.pop(0)


class SpyStore:
    """Records calls; used where no store call may happen."""

    def __init__(self):
        self.calls = []

    def __getattr__(self, name):
        async def _record(*args, **kwargs):
            self.calls.append(name)
        return _record


@pytest.fixture
def controller(store):
    return AdminWorkflowController(store, tracking_domain="jaybesin.com")


class TestOpenForm:
    def test_manifest_defaults(self, controller):
        form = controller.open_form(FormType.MANIFEST, FormMode.CREATE)
        assert re.fullmatch(r"JB-CN-\d{6}", form["tracking_number"])
        assert form["status"] == "Order Initiated"
        assert form["rate_per_cbm"] == 450.0
        assert form["shipping_fee"] == 0.0
        assert len(form["items"]) == 1

    def test_edit_copies_record(self, controller):
        existing = {"id": "abc", "name": "Fan"}
        form = controller.open_form("product", "edit", existing)
        assert form == existing
        assert form is not existing


class TestSubmitManifest:
    def test_create_with_notification(self, controller, store, shipment_form):
        result = asyncio.run(controller.submit(FormType.MANIFEST, FormMode.CREATE, shipment_form))
        stored = asyncio.run(store.get("shipments", result.id))
        assert stored["tracking_number"] == "JB-CN-100203"
        assert stored["total_cost"] == pytest.approx(1625.0)
        assert result.notification.phone == "233205550102"
        assert "Total%20Due%3A%20%241625.00" in result.notification.link

    def test_no_phone_no_notification(self, controller, shipment_form):
        shipment_form["consignee_phone"] = ""
        result = asyncio.run(controller.submit(FormType.MANIFEST, FormMode.CREATE, shipment_form))
        assert result.notification is None

    def test_validation_blocks_store(self, shipment_form):
        spy = SpyStore()
        controller = AdminWorkflowController(spy)
        shipment_form["consignee_name"] = ""
        with pytest.raises(ShipmentValidationError):
            asyncio.run(controller.submit(FormType.MANIFEST, FormMode.CREATE, shipment_form))
        assert spy.calls == []

    def test_colliding_tracking_number_regenerated(self, store, shipment_form):
        controller = AdminWorkflowController(store, rng=FixedSequence([100203, 424242]))
        first = asyncio.run(controller.submit(FormType.MANIFEST, FormMode.CREATE, dict(shipment_form)))
        second = asyncio.run(controller.submit(FormType.MANIFEST, FormMode.CREATE, dict(shipment_form)))
        assert first.entity["tracking_number"] == "JB-CN-100203"
        assert second.entity["tracking_number"] == "JB-CN-424242"
        numbers = {d["tracking_number"] for d in asyncio.run(store.list("shipments"))}
        assert len(numbers) == 2

    def test_concurrent_submits_get_distinct_numbers(self, store, shipment_form):
        controller = AdminWorkflowController(store, rng=FixedSequence([654321]))
        first = {**shipment_form, "tracking_number": "JB-CN-123456"}
        second = {**shipment_form, "tracking_number": "JB-CN-123456", "consignee_name": "Yaw Boateng"}

        async def scenario():
            return await asyncio.gather(
                controller.submit(FormType.MANIFEST, FormMode.CREATE, first),
                controller.submit(FormType.MANIFEST, FormMode.CREATE, second),
            )

        results = asyncio.run(scenario())
        stored = sorted(d["tracking_number"] for d in asyncio.run(store.list("shipments")))
        assert stored == ["JB-CN-123456", "JB-CN-654321"]
        assert sorted(r.entity["tracking_number"] for r in results) == stored

    def test_gives_up_after_max_attempts(self, store, shipment_form):
        controller = AdminWorkflowController(store, max_tracking_attempts=2,
                                             rng=FixedSequence([100203, 100203, 100203]))
        asyncio.run(controller.submit(FormType.MANIFEST, FormMode.CREATE, dict(shipment_form)))
        with pytest.raises(PersistenceError):
            asyncio.run(controller.submit(FormType.MANIFEST, FormMode.CREATE, dict(shipment_form)))

    def test_edit_updates_in_place(self, controller, store, shipment_form):
        created = asyncio.run(controller.submit(FormType.MANIFEST, FormMode.CREATE, shipment_form))
        shipment_form["status"] = "Arrived at TEMA Port"
        shipment_form["tracking_number"] = ""
        asyncio.run(controller.submit(FormType.MANIFEST, FormMode.EDIT, shipment_form, created.id))
        docs = asyncio.run(store.list("shipments"))
        assert len(docs) == 1
        assert docs[0]["status"] == "Arrived at TEMA Port"
        assert docs[0]["tracking_number"] == "JB-CN-100203"

    def test_edit_to_taken_number_rejected(self, controller, shipment_form):
        asyncio.run(controller.submit(FormType.MANIFEST, FormMode.CREATE, dict(shipment_form)))
        other = asyncio.run(controller.submit(
            FormType.MANIFEST, FormMode.CREATE, {**shipment_form, "tracking_number": "JB-CN-777777"},
        ))
        with pytest.raises(ShipmentValidationError):
            asyncio.run(controller.submit(FormType.MANIFEST, FormMode.EDIT, dict(shipment_form), other.id))


class TestSubmitCatalog:
    def test_product_edit_is_update(self, controller, store):
        created = asyncio.run(controller.submit("product", "create", {"name": "Fan", "price": 20}))
        asyncio.run(controller.submit("product", "edit", {"name": "Fan", "price": 25}, created.id))
        products = asyncio.run(store.list("products"))
        assert [(p["id"], p["price"]) for p in products] == [(created.id, 25.0)]

    def test_vehicle_create_and_delete(self, controller, store):
        created = asyncio.run(controller.submit(FormType.VEHICLE, FormMode.CREATE, {"name": "RAV4"}))
        asyncio.run(controller.delete(FormType.VEHICLE, created.id))
        assert asyncio.run(store.list("vehicles")) == []

    def test_edit_needs_id(self, controller):
        with pytest.raises(ShipmentValidationError):
            asyncio.run(controller.submit(FormType.PRODUCT, FormMode.EDIT, {"name": "Fan"}))


class TestBulkApply:
    def test_moves_all_selected(self, controller, store, shipment_form):
        ids = [
            asyncio.run(controller.submit(
                FormType.MANIFEST, FormMode.CREATE, {**shipment_form, "tracking_number": f"JB-CN-00000{i}"},
            )).id
            for i in range(3)
        ]
        assert asyncio.run(controller.bulk_apply(ids[:2], "Vessel Departed Origin")) == 2
        statuses = {d["tracking_number"]: d["status"] for d in asyncio.run(store.list("shipments"))}
        assert statuses == {
            "JB-CN-000000": "Vessel Departed Origin",
            "JB-CN-000001": "Vessel Departed Origin",
            "JB-CN-000002": "Order Initiated",
        }

    def test_unknown_stage_rejected_before_store(self):
        spy = SpyStore()
        with pytest.raises(ShipmentValidationError):
            asyncio.run(AdminWorkflowController(spy).bulk_apply(["a"], "Lost"))
        assert spy.calls == []
