"""
Shipment record model
- CargoItem / Shipment domain objects with derived totals
- Sanitised persistence payloads for every collection
- Tracking number generation

Totals are always derived from the current items and rate fields. The
total_volume / total_cost values written to the store are a cache refreshed
on every write and never read back as truth.
"""

import math
import random
from dataclasses import dataclass, field
from datetime import date, datetime, timezone

from jaybesin.core.stages import INITIAL_STAGE, is_valid_stage

SHIPMENT_SCHEMA_VERSION = 2

DEFAULT_ORIGIN = "Guangzhou, China"
DEFAULT_DESTINATION = "Accra, Ghana"
DEFAULT_MODE = "Sea Freight"
DEFAULT_CONSIGNEE = "Unknown Client"

TRACKING_PREFIX = "JB-CN"
MANUAL_PREFIX = "MAN"

# Agent commission: base USD per CBM plus a flat bonus above the volume threshold
AGENT_BASE_RATE = 20
AGENT_BONUS_THRESHOLD_CBM = 50
AGENT_BONUS = 500


class ShipmentValidationError(ValueError):
    """Form failed validation; nothing was sent to the store."""

    def __init__(self, errors: dict[str, str]):
        self.errors = errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))


def safe_number(value) -> float:
    """Parse a number the way form input arrives; anything invalid becomes 0."""
    if isinstance(value, bool):
        return float(value)
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(parsed) or math.isinf(parsed):
        return 0.0
    return parsed


def _text(value, default: str = "") -> str:
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _parse_timestamp(value) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            return None
    return None


@dataclass
class CargoItem:
    """One cargo line owned by a shipment"""
    description: str = ""
    quantity: int = 1
    cbm: float = 0.0
    weight: float = 0.0
    rate: float | None = None

    @property
    def total_cost(self) -> float:
        """cbm × rate; 0 when the line carries no rate of its own."""
        if self.rate is None:
            return 0.0
        return self.cbm * self.rate

    @classmethod
    def from_dict(cls, data: dict) -> "CargoItem":
        rate = data.get("rate")
        return cls(
            description=_text(data.get("description")),
            quantity=int(safe_number(data.get("quantity", 1))),
            cbm=safe_number(data.get("cbm")),
            weight=safe_number(data.get("weight")),
            rate=None if rate in (None, "") else safe_number(rate),
        )

    def to_dict(self) -> dict:
        data = {
            "description": self.description,
            "quantity": self.quantity,
            "cbm": self.cbm,
            "weight": self.weight,
        }
        if self.rate is not None:
            data["rate"] = self.rate
            data["total_cost"] = self.total_cost
        return data


@dataclass(frozen=True)
class Totals:
    total_volume: float
    total_cost: float

    def rounded(self) -> "Totals":
        """Two-decimal values for display; the unrounded ones stay authoritative."""
        return Totals(round(self.total_volume, 2), round(self.total_cost, 2))


def _as_item(item) -> CargoItem:
    if isinstance(item, CargoItem):
        return item
    if isinstance(item, dict):
        return CargoItem.from_dict(item)
    return CargoItem()


def compute_totals(items, rate_per_cbm, shipping_fee) -> Totals:
    """
    total_volume = Σ cbm (invalid cbm counts as 0)
    total_cost = total_volume × rate_per_cbm + shipping_fee
    """
    volumes = []
    for item in items or []:
        if isinstance(item, CargoItem):
            volumes.append(item.cbm)
        elif isinstance(item, dict):
            volumes.append(safe_number(item.get("cbm")))
    total_volume = math.fsum(volumes)
    total_cost = total_volume * safe_number(rate_per_cbm) + safe_number(shipping_fee)
    return Totals(total_volume=total_volume, total_cost=total_cost)


@dataclass
class Shipment:
    """Shipment as read from the store, with live-derived totals"""
    id: str | None = None
    tracking_number: str = ""
    status: str = INITIAL_STAGE
    origin: str = DEFAULT_ORIGIN
    destination: str = DEFAULT_DESTINATION
    mode: str = DEFAULT_MODE
    consignee_name: str = ""
    consignee_phone: str = ""
    consignee_address: str = ""
    container_id: str = ""
    date_received: str = ""
    rate_per_cbm: float = 0.0
    shipping_fee: float = 0.0
    items: list[CargoItem] = field(default_factory=list)
    created_at: datetime | None = None
    last_updated: datetime | None = None

    @property
    def totals(self) -> Totals:
        return compute_totals(self.items, self.rate_per_cbm, self.shipping_fee)

    @property
    def total_volume(self) -> float:
        return self.totals.total_volume

    @property
    def total_cost(self) -> float:
        return self.totals.total_cost

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def sort_key(self) -> datetime:
        """created_at as naive UTC; records without one sort last."""
        ts = self.created_at
        if ts is None:
            return datetime.min
        if ts.tzinfo is not None:
            ts = ts.astimezone(timezone.utc).replace(tzinfo=None)
        return ts

    @classmethod
    def from_document(cls, doc: dict) -> "Shipment":
        """Build from a stored document; missing fields take their defaults."""
        return cls(
            id=doc.get("id"),
            tracking_number=_text(doc.get("tracking_number")),
            status=_text(doc.get("status"), INITIAL_STAGE),
            origin=_text(doc.get("origin"), DEFAULT_ORIGIN),
            destination=_text(doc.get("destination"), DEFAULT_DESTINATION),
            mode=_text(doc.get("mode"), DEFAULT_MODE),
            consignee_name=_text(doc.get("consignee_name")),
            consignee_phone=_text(doc.get("consignee_phone")),
            consignee_address=_text(doc.get("consignee_address")),
            container_id=_text(doc.get("container_id")),
            date_received=_text(doc.get("date_received")),
            rate_per_cbm=safe_number(doc.get("rate_per_cbm")),
            shipping_fee=safe_number(doc.get("shipping_fee")),
            items=[_as_item(i) for i in (doc.get("items") or [])],
            created_at=_parse_timestamp(doc.get("created_at")),
            last_updated=_parse_timestamp(doc.get("last_updated")),
        )


def generate_tracking_number(rng: random.Random | None = None) -> str:
    """JB-CN-###### with a random six-digit suffix. Uniqueness is checked by the caller."""
    rng = rng or random
    return f"{TRACKING_PREFIX}-{rng.randint(100000, 999999)}"


def generate_manual_reference(rng: random.Random | None = None) -> str:
    rng = rng or random
    return f"{MANUAL_PREFIX}-{rng.randint(100000, 999999)}"


def validate_shipment_form(form: dict) -> None:
    """Raise ShipmentValidationError listing every problem in the form."""
    errors: dict[str, str] = {}

    if not _text(form.get("consignee_name")):
        errors["consignee_name"] = "Consignee name is required"

    status = form.get("status")
    if status not in (None, "") and not is_valid_stage(status):
        errors["status"] = f"Unknown stage: {status}"

    for key in ("rate_per_cbm", "shipping_fee"):
        if safe_number(form.get(key)) < 0:
            errors[key] = "Must not be negative"

    for idx, raw in enumerate(form.get("items") or []):
        item = _as_item(raw)
        if item.quantity < 0:
            errors[f"items[{idx}].quantity"] = "Must not be negative"
        if item.cbm < 0:
            errors[f"items[{idx}].cbm"] = "Must not be negative"
        if item.rate is not None and item.rate < 0:
            errors[f"items[{idx}].rate"] = "Must not be negative"

    if errors:
        raise ShipmentValidationError(errors)


def build_shipment_payload(form: dict, today: date | None = None) -> dict:
    """
    Sanitised shipment document ready for the store.
    Every field gets a concrete value (the store never receives None) and
    the totals cache is recomputed from the items.
    """
    today = today or date.today()
    items = [_as_item(i) for i in (form.get("items") or [])]
    rate_per_cbm = safe_number(form.get("rate_per_cbm"))
    shipping_fee = safe_number(form.get("shipping_fee"))
    totals = compute_totals(items, rate_per_cbm, shipping_fee)

    return {
        "tracking_number": _text(form.get("tracking_number")),
        "date_received": _text(form.get("date_received"), today.isoformat()),
        "status": _text(form.get("status"), INITIAL_STAGE),
        "origin": _text(form.get("origin"), DEFAULT_ORIGIN),
        "destination": _text(form.get("destination"), DEFAULT_DESTINATION),
        "mode": _text(form.get("mode"), DEFAULT_MODE),
        "consignee_name": _text(form.get("consignee_name"), DEFAULT_CONSIGNEE),
        "consignee_phone": _text(form.get("consignee_phone")),
        "consignee_address": _text(form.get("consignee_address")),
        "container_id": _text(form.get("container_id")),
        "rate_per_cbm": rate_per_cbm,
        "shipping_fee": shipping_fee,
        "items": [i.to_dict() for i in items],
        "total_volume": totals.total_volume,
        "total_cost": totals.total_cost,
        "schema_version": SHIPMENT_SCHEMA_VERSION,
    }


# ── Sibling collections ──

def sanitize_product(form: dict) -> dict:
    return {
        "name": _text(form.get("name"), "Untitled"),
        "description": _text(form.get("description")),
        "price": safe_number(form.get("price")),
        "image": _text(form.get("image")),
        "category": _text(form.get("category"), "Uncategorized"),
        "is_landed_cost": bool(form.get("is_landed_cost")),
    }


def sanitize_vehicle(form: dict) -> dict:
    return {
        "name": _text(form.get("name")),
        "vin": _text(form.get("vin")),
        "engine": _text(form.get("engine")),
        "year": _text(form.get("year"), str(date.today().year)),
        "price": safe_number(form.get("price")),
        "shipping": _text(form.get("shipping")),
        "documentation": _text(form.get("documentation")),
        "description": _text(form.get("description")),
        "images": [str(i) for i in (form.get("images") or []) if i],
        "category": _text(form.get("category"), "SUV"),
        "fuel": _text(form.get("fuel"), "Gasoline"),
        "condition": _text(form.get("condition"), "Used"),
    }


def sanitize_category(name) -> dict:
    formatted = _text(name).upper()
    if not formatted:
        raise ShipmentValidationError({"name": "Category name is required"})
    return {"name": formatted}


def sanitize_message(form: dict) -> dict:
    if not _text(form.get("message")):
        raise ShipmentValidationError({"message": "Message text is required"})
    return {
        "name": _text(form.get("name"), "Anonymous"),
        "email": _text(form.get("email")),
        "phone": _text(form.get("phone")),
        "subject": _text(form.get("subject"), "General Inquiry"),
        "message": _text(form.get("message")),
        "status": "unread",
    }


def projected_commission(volume) -> float:
    cbm = safe_number(volume)
    bonus = AGENT_BONUS if cbm > AGENT_BONUS_THRESHOLD_CBM else 0
    return cbm * AGENT_BASE_RATE + bonus


def sanitize_agent(form: dict, today: date | None = None) -> dict:
    errors = {}
    if not _text(form.get("name")):
        errors["name"] = "Name is required"
    if not _text(form.get("email")):
        errors["email"] = "Email is required"
    if errors:
        raise ShipmentValidationError(errors)

    today = today or date.today()
    return {
        "name": _text(form.get("name")),
        "email": _text(form.get("email")),
        "city": _text(form.get("city")),
        "focus": _text(form.get("focus"), "General Cargo"),
        "volume": _text(form.get("volume")),
        "projected_commission": projected_commission(form.get("volume")),
        "date": today.isoformat(),
        "status": "Pending Review",
    }
