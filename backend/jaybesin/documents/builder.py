"""
Billing document builder: invoice, bill of lading, packing list, container manifest.
Documents are built on demand, rendered, and discarded; nothing is written
back to the store. The exchange rate and issuer details are copied from the
settings at build time, so a preview and its printout always agree.
"""

import enum
import logging
import math
from dataclasses import dataclass, field
from datetime import date

from jaybesin.core.containers import ContainerGroup
from jaybesin.core.shipment_record import (
    CargoItem, Shipment, generate_manual_reference, safe_number,
)
from jaybesin.schemas.settings import SiteSettings

logger = logging.getLogger(__name__)

MANIFEST_CONSIGNEE = "Container Manifest"
MANIFEST_ADDRESS = "Logistics Terminal Port"
FEE_DESCRIPTION = "Shipping & handling"
DEFAULT_DESCRIPTION = "General Cargo"


class DocumentGenerationError(ValueError):
    """A document could not be built completely."""


class DocType(str, enum.Enum):
    INVOICE = "COMMERCIAL INVOICE"
    BILL_OF_LADING = "BILL OF LADING"
    PACKING_LIST = "PACKING LIST"
    MANIFEST = "CONTAINER MANIFEST"


class Currency(str, enum.Enum):
    USD = "USD"
    GHS = "GHS"


CURRENCY_PREFIX = {
    Currency.USD: "$",
    Currency.GHS: "GHS ",
}


def convert(amount_usd: float, currency: Currency, exchange_rate: float) -> float:
    """USD → target currency."""
    return amount_usd * exchange_rate if currency == Currency.GHS else amount_usd


def to_usd(amount: float, currency: Currency, exchange_rate: float) -> float:
    return amount / exchange_rate if currency == Currency.GHS else amount


def format_money(amount: float, currency: Currency) -> str:
    """Two decimals with thousands separators: $1,625.00 / GHS 1,580.00"""
    sign = "-" if amount < 0 else ""
    return f"{sign}{CURRENCY_PREFIX[Currency(currency)]}{abs(amount):,.2f}"


@dataclass(frozen=True)
class IssuerDetails:
    """Settings copied into the document when it is built"""
    company_name: str
    company_address: str
    company_email: str
    company_phone: str
    logo_url: str
    primary_color: str
    bank_name: str
    account_name: str
    account_number: str
    terms_and_conditions: str
    footer_text: str

    @classmethod
    def from_settings(cls, settings: SiteSettings) -> "IssuerDetails":
        return cls(
            company_name=settings.company_name,
            company_address=settings.company_address,
            company_email=settings.company_email,
            company_phone=settings.company_phone,
            logo_url=settings.logo_url,
            primary_color=settings.primary_color,
            bank_name=settings.bank_name,
            account_name=settings.account_name,
            account_number=settings.account_number,
            terms_and_conditions=settings.terms_and_conditions,
            footer_text=settings.footer_text,
        )


@dataclass(frozen=True)
class Consignee:
    name: str
    phone: str = ""
    address: str = ""


@dataclass(frozen=True)
class LineItem:
    description: str
    quantity: int
    cbm: float
    rate: float | None
    total_cost: float  # USD
    amount: float  # in the document currency


@dataclass
class Document:
    doc_type: DocType
    reference_id: str
    consignee: Consignee
    currency: Currency
    exchange_rate: float
    issuer: IssuerDetails
    origin: str = "-"
    destination: str = "-"
    mode: str = "-"
    container_id: str = ""
    items: list[LineItem] = field(default_factory=list)
    issued_on: date = field(default_factory=date.today)

    @property
    def subtotal(self) -> float:
        return math.fsum(item.amount for item in self.items)

    @property
    def subtotal_usd(self) -> float:
        return math.fsum(item.total_cost for item in self.items)

    @property
    def total_volume(self) -> float:
        return math.fsum(item.cbm for item in self.items)

    @property
    def total_quantity(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def filename(self) -> str:
        return f"{self.doc_type.value.replace(' ', '_')}_{self.reference_id or 'DRAFT'}.pdf"


def _check_settings(settings: SiteSettings, currency: Currency):
    missing = [
        name for name in ("company_name", "bank_name", "account_name", "account_number")
        if not str(getattr(settings, name, "") or "").strip()
    ]
    if missing:
        raise DocumentGenerationError(f"Settings incomplete, missing: {', '.join(missing)}")
    if currency == Currency.GHS and safe_number(settings.currency_rate) <= 0:
        raise DocumentGenerationError("A positive USD→GHS exchange rate is required for GHS documents")


def _line(description, quantity, cbm, rate, total_cost, currency, exchange_rate) -> LineItem:
    return LineItem(
        description=description or DEFAULT_DESCRIPTION,
        quantity=quantity,
        cbm=cbm,
        rate=rate,
        total_cost=total_cost,
        amount=convert(total_cost, currency, exchange_rate),
    )


def _shipment_lines(shipment: Shipment, currency: Currency, exchange_rate: float) -> list[LineItem]:
    """Lines priced at the shipment rate, plus the fee, so they sum to shipment.total_cost.
    The fee line has no quantity or volume, so the totals row counts cargo only.
    """
    if shipment.items is None:
        raise DocumentGenerationError(f"Shipment {shipment.tracking_number or shipment.id} has no item list")
    if not shipment.items and not shipment.shipping_fee:
        raise DocumentGenerationError(f"Shipment {shipment.tracking_number or shipment.id} has no items to bill")

    rate = shipment.rate_per_cbm
    lines = [
        _line(item.description, item.quantity, item.cbm, rate, item.cbm * rate, currency, exchange_rate)
        for item in shipment.items
    ]
    if shipment.shipping_fee:
        lines.append(_line(FEE_DESCRIPTION, 0, 0.0, None, shipment.shipping_fee, currency, exchange_rate))
    return lines


def _container_lines(group: ContainerGroup, currency: Currency, exchange_rate: float) -> list[LineItem]:
    """One line per shipment; the rate is left blank where a fee makes rate x volume differ from the amount."""
    if not group.items:
        raise DocumentGenerationError(f"Container {group.id} has no shipments")
    return [
        _line(
            f"{s.tracking_number} - {s.consignee_name}".strip(" -"),
            s.total_quantity,
            s.total_volume,
            s.rate_per_cbm if not s.shipping_fee else None,
            s.total_cost,
            currency,
            exchange_rate,
        )
        for s in group.items
    ]


def build_document(
    source: Shipment | ContainerGroup,
    doc_type: DocType,
    currency: Currency,
    settings: SiteSettings,
    issued_on: date | None = None,
) -> Document:
    """Build a complete document or raise DocumentGenerationError."""
    doc_type, currency = DocType(doc_type), Currency(currency)
    _check_settings(settings, currency)
    exchange_rate = safe_number(settings.currency_rate) if currency == Currency.GHS else 1.0
    issuer = IssuerDetails.from_settings(settings)

    if isinstance(source, ContainerGroup):
        document = Document(
            doc_type=doc_type,
            reference_id=source.id,
            consignee=Consignee(MANIFEST_CONSIGNEE, "", MANIFEST_ADDRESS),
            currency=currency,
            exchange_rate=exchange_rate,
            issuer=issuer,
            container_id=source.id,
            origin=source.items[0].origin if source.items else "-",
            destination=source.items[0].destination if source.items else "-",
            mode=source.items[0].mode if source.items else "-",
            items=_container_lines(source, currency, exchange_rate),
        )
    elif isinstance(source, Shipment):
        document = Document(
            doc_type=doc_type,
            reference_id=source.tracking_number,
            consignee=Consignee(
                source.consignee_name or "Cash Customer",
                source.consignee_phone,
                source.consignee_address,
            ),
            currency=currency,
            exchange_rate=exchange_rate,
            issuer=issuer,
            origin=source.origin or "-",
            destination=source.destination or "-",
            mode=source.mode or "-",
            container_id=source.container_id,
            items=_shipment_lines(source, currency, exchange_rate),
        )
    else:
        raise DocumentGenerationError(f"Cannot build a document from {type(source).__name__}")

    if issued_on is not None:
        document.issued_on = issued_on
    logger.info(
        f"Built {doc_type.value} {document.reference_id}: "
        f"{len(document.items)} lines, {format_money(document.subtotal, currency)}"
    )
    return document


def build_manual_document(
    data: dict,
    doc_type: DocType,
    currency: Currency,
    settings: SiteSettings,
    issued_on: date | None = None,
) -> Document:
    """Free-form document; each line is priced cbm × its own rate."""
    doc_type, currency = DocType(doc_type), Currency(currency)
    _check_settings(settings, currency)
    if data.get("items") is None:
        raise DocumentGenerationError("Manual document has no item list")

    exchange_rate = safe_number(settings.currency_rate) if currency == Currency.GHS else 1.0
    items = [CargoItem.from_dict(raw) for raw in data["items"]]
    if not items:
        raise DocumentGenerationError("Manual document needs at least one item")

    document = Document(
        doc_type=doc_type,
        reference_id=str(data.get("reference_id") or generate_manual_reference()),
        consignee=Consignee(
            str(data.get("consignee_name") or "Cash Customer"),
            str(data.get("consignee_phone") or ""),
            str(data.get("consignee_address") or ""),
        ),
        currency=currency,
        exchange_rate=exchange_rate,
        issuer=IssuerDetails.from_settings(settings),
        origin=str(data.get("origin") or "China Hub"),
        destination=str(data.get("destination") or "Ghana Terminal"),
        mode=str(data.get("mode") or "Sea Freight"),
        container_id=str(data.get("container_id") or ""),
        items=[
            _line(i.description, i.quantity, i.cbm, i.rate or 0.0, i.total_cost, currency, exchange_rate)
            for i in items
        ],
    )
    if issued_on is not None:
        document.issued_on = issued_on
    return document
