"""
Outbound message templates and WhatsApp deep links.
Pure string building; delivery is the customer's messaging app (fire-and-forget).
"""

import re
from dataclasses import dataclass
from urllib.parse import quote

from jaybesin.core.shipment_record import Shipment, safe_number

WHATSAPP_BASE = "https://wa.me"

SHIPMENT_NOTICE = (
    "Hello, your shipment {tracking_number} has been received. "
    "Status: {status}. Total Due: ${total_cost}. Track at: {domain}"
)

SHIPMENT_UPDATE = (
    "Hello {consignee_name}, update on shipment {tracking_number}. "
    "Current Status: {status}. Total: ${total_cost}."
)

CONTACT_GREETING = "Hello Jay-Besin, I have a logistics inquiry."

RULE = "--------------------------------"


@dataclass(frozen=True)
class Notification:
    phone: str
    message: str
    link: str


@dataclass
class CartLine:
    name: str
    price: float
    qty: int = 1

    @property
    def line_total(self) -> float:
        return safe_number(self.price) * max(int(self.qty), 0)


def clean_phone(phone: str | None) -> str:
    """Digits only, as wa.me expects."""
    return re.sub(r"\D", "", str(phone or ""))


def deep_link(phone: str | None, text: str) -> str:
    return f"{WHATSAPP_BASE}/{clean_phone(phone)}?text={quote(text)}"


def shipment_notice(shipment: Shipment, domain: str) -> str:
    return SHIPMENT_NOTICE.format(
        tracking_number=shipment.tracking_number,
        status=shipment.status,
        total_cost=f"{shipment.total_cost:.2f}",
        domain=domain,
    )


def shipment_update(shipment: Shipment) -> str:
    return SHIPMENT_UPDATE.format(
        consignee_name=shipment.consignee_name,
        tracking_number=shipment.tracking_number,
        status=shipment.status,
        total_cost=f"{shipment.total_cost:.2f}",
    )


def shipment_notification(shipment: Shipment, domain: str) -> Notification | None:
    """Notice for a newly received shipment; None when there is no usable phone."""
    phone = clean_phone(shipment.consignee_phone)
    if not phone:
        return None
    message = shipment_notice(shipment, domain)
    return Notification(phone=phone, message=message, link=deep_link(phone, message))


def checkout_receipt(cart: list[CartLine]) -> str:
    lines = ["*NEW ORDER - JAYBESIN MART*", RULE]
    for i, item in enumerate(cart, start=1):
        lines.append(f"{i}. {item.name} (x{item.qty}) - ${item.line_total:.2f}")
    total = sum(item.line_total for item in cart)
    lines.append(RULE)
    lines.append(f"*TOTAL VALUE: ${total:.2f}*")
    lines.append("")
    lines.append("Please confirm availability and shipping costs.")
    return "\n".join(lines)


def vehicle_inquiry(vehicle: dict, kind: str = "order") -> str:
    """kind is "order" (proforma request) or anything else (inspection request)."""
    lines = [
        "*AUTO INQUIRY - JAYBESIN*",
        RULE,
        f"Vehicle: {vehicle.get('name', '')}",
        f"Year: {vehicle.get('year', '')}",
        f"VIN: {vehicle.get('vin') or 'N/A'}",
        f"Price: ${vehicle.get('price', 0)}",
        RULE,
    ]
    if kind == "order":
        lines.append("I am interested in purchasing this vehicle. Please provide the proforma invoice.")
    else:
        lines.append("I would like to request a detailed inspection report for this vehicle.")
    return "\n".join(lines)
