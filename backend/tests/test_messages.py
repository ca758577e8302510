"""Tests for outbound message templates."""

from jaybesin.core.messages import (
    CartLine, checkout_receipt, clean_phone, deep_link, shipment_notice,
    shipment_notification, shipment_update, vehicle_inquiry,
)


class TestDeepLink:
    def test_phone_digits_only(self):
        assert clean_phone("+233 (24) 555-0101") == "233245550101"
        assert clean_phone(None) == ""

    def test_text_is_url_encoded(self):
        assert deep_link("+233 24 555", "Hi there & bye") == (
            "https://wa.me/23324555?text=Hi%20there%20%26%20bye"
        )


class TestShipmentMessages:
    def test_notice(self, make_shipment):
        shipment = make_shipment("JB-CN-100203", cbms=(1.0,), rate_per_cbm=100)
        assert shipment_notice(shipment, "jaybesin.com") == (
            "Hello, your shipment JB-CN-100203 has been received. "
            "Status: Order Initiated. Total Due: $100.00. Track at: jaybesin.com"
        )

    def test_update(self, make_shipment):
        shipment = make_shipment("JB-CN-100203", "Ama Owusu", cbms=(1.5, 2.0), shipping_fee=50,
                                 status="Arrived at TEMA Port")
        assert shipment_update(shipment) == (
            "Hello Ama Owusu, update on shipment JB-CN-100203. "
            "Current Status: Arrived at TEMA Port. Total: $1625.00."
        )

    def test_notification_needs_phone(self, make_shipment):
        assert shipment_notification(make_shipment(consignee_phone=""), "jaybesin.com") is None

    def test_notification_link(self, make_shipment):
        notification = shipment_notification(
            make_shipment(consignee_phone="+233 20 555 0102"), "jaybesin.com",
        )
        assert notification.phone == "233205550102"
        assert notification.link.startswith("https://wa.me/233205550102?text=Hello%2C%20your%20shipment")


class TestCatalogMessages:
    def test_checkout_receipt(self):
        text = checkout_receipt([CartLine("Solar Panel", 95, 2), CartLine("Fan", 19.5, 1)])
        lines = text.splitlines()
        assert "1. Solar Panel (x2) - $190.00" in lines
        assert "2. Fan (x1) - $19.50" in lines
        assert "*TOTAL VALUE: $209.50*" in lines
        assert lines[-1] == "Please confirm availability and shipping costs."

    def test_vehicle_inquiry_kinds(self):
        vehicle = {"name": "Toyota RAV4", "year": "2019", "vin": "", "price": 16800}
        order = vehicle_inquiry(vehicle, "order")
        inspection = vehicle_inquiry(vehicle, "inspection")
        assert "VIN: N/A" in order
        assert "proforma invoice" in order
        assert "inspection report" in inspection
