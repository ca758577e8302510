"""Tests for the shipment record model."""

import random
import re
from datetime import date

import pytest

from jaybesin.core.shipment_record import (
    SHIPMENT_SCHEMA_VERSION, CargoItem, Shipment, ShipmentValidationError,
    build_shipment_payload, compute_totals, generate_manual_reference,
    generate_tracking_number, projected_commission, safe_number, sanitize_agent,
    sanitize_category, sanitize_message, sanitize_product, validate_shipment_form,
)


class TestTotals:
    def test_volume_and_cost(self):
        totals = compute_totals([{"cbm": 1.5}, {"cbm": 2.0}], 450, 50)
        assert totals.total_volume == pytest.approx(3.5)
        assert totals.total_cost == pytest.approx(1625.00)

    def test_invalid_cbm_counts_as_zero(self):
        totals = compute_totals([{"cbm": "abc"}, {"cbm": None}, {"cbm": 2}], 100, 0)
        assert totals.total_volume == 2.0
        assert totals.total_cost == 200.0

    def test_no_items_is_fee_only(self):
        assert compute_totals([], 450, 25).total_cost == 25.0
        assert compute_totals(None, 450, 0).total_volume == 0.0

    def test_rounded(self):
        totals = compute_totals([{"cbm": 0.1}, {"cbm": 0.2}], 3, 0).rounded()
        assert totals.total_volume == 0.3
        assert totals.total_cost == 0.9

    def test_safe_number(self):
        assert safe_number("12.5") == 12.5
        assert safe_number("") == 0.0
        assert safe_number(float("nan")) == 0.0


class TestShipment:
    def test_totals_derived_not_cached(self):
        shipment = Shipment.from_document({
            "items": [{"cbm": 1.5}, {"cbm": 2.0}],
            "rate_per_cbm": 450,
            "shipping_fee": 50,
            "total_volume": 99,
            "total_cost": 9999,
        })
        assert shipment.total_volume == pytest.approx(3.5)
        assert shipment.total_cost == pytest.approx(1625.0)

    def test_missing_fields_take_defaults(self):
        shipment = Shipment.from_document({"tracking_number": "JB-CN-1"})
        assert shipment.status == "Order Initiated"
        assert shipment.origin == "Guangzhou, China"
        assert shipment.items == []

    def test_item_cost_uses_own_rate(self):
        item = CargoItem(cbm=2.0, rate=300)
        assert item.total_cost == 600
        assert CargoItem(cbm=2.0).total_cost == 0.0


class TestIdentifiers:
    def test_tracking_number_format(self):
        rng = random.Random(7)
        for _ in range(20):
            assert re.fullmatch(r"JB-CN-\d{6}", generate_tracking_number(rng))

    def test_manual_reference_format(self):
        assert re.fullmatch(r"MAN-\d{6}", generate_manual_reference(random.Random(3)))


class TestValidation:
    def test_valid_form(self, shipment_form):
        validate_shipment_form(shipment_form)

    def test_missing_consignee(self, shipment_form):
        shipment_form["consignee_name"] = "  "
        with pytest.raises(ShipmentValidationError) as exc:
            validate_shipment_form(shipment_form)
        assert "consignee_name" in exc.value.errors

    def test_negative_values_listed(self, shipment_form):
        shipment_form["rate_per_cbm"] = -1
        shipment_form["items"][1]["cbm"] = -0.5
        with pytest.raises(ShipmentValidationError) as exc:
            validate_shipment_form(shipment_form)
        assert set(exc.value.errors) == {"rate_per_cbm", "items[1].cbm"}

    def test_unknown_stage(self, shipment_form):
        shipment_form["status"] = "Teleported"
        with pytest.raises(ShipmentValidationError):
            validate_shipment_form(shipment_form)


class TestPayload:
    def test_no_none_values(self):
        payload = build_shipment_payload({"consignee_name": "Kofi"}, today=date(2026, 5, 4))
        assert all(value is not None for value in payload.values())
        assert payload["date_received"] == "2026-05-04"
        assert payload["status"] == "Order Initiated"
        assert payload["schema_version"] == SHIPMENT_SCHEMA_VERSION

    def test_cache_recomputed(self, shipment_form):
        shipment_form["total_cost"] = 1
        payload = build_shipment_payload(shipment_form)
        assert payload["total_volume"] == pytest.approx(3.5)
        assert payload["total_cost"] == pytest.approx(1625.0)

    def test_blank_consignee_defaulted(self):
        assert build_shipment_payload({})["consignee_name"] == "Unknown Client"


class TestSiblingRecords:
    def test_category_upper_cased(self):
        assert sanitize_category(" solar ") == {"name": "SOLAR"}

    def test_empty_category_rejected(self):
        with pytest.raises(ShipmentValidationError):
            sanitize_category("")

    def test_product_defaults(self):
        product = sanitize_product({"name": "Fan", "price": "19.99"})
        assert product["price"] == 19.99
        assert product["category"] == "Uncategorized"
        assert product["is_landed_cost"] is False

    def test_message_requires_text(self):
        with pytest.raises(ShipmentValidationError):
            sanitize_message({"name": "Ama"})
        assert sanitize_message({"message": "Hi"})["status"] == "unread"

    def test_agent_commission(self):
        assert projected_commission(10) == 200
        assert projected_commission(60) == 60 * 20 + 500
        agent = sanitize_agent({"name": "Yaw", "email": "yaw@example.com", "volume": "60"},
                               today=date(2026, 1, 2))
        assert agent["projected_commission"] == 1700
        assert agent["status"] == "Pending Review"

    def test_agent_requires_contact(self):
        with pytest.raises(ShipmentValidationError) as exc:
            sanitize_agent({})
        assert set(exc.value.errors) == {"name", "email"}
