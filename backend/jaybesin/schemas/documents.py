"""
Billing document Pydantic schemas
"""

from datetime import date
from typing import Literal

from pydantic import BaseModel

from jaybesin.documents.builder import Currency, DocType
from jaybesin.schemas.shipments import CargoItemIn


class DocumentRequest(BaseModel):
    source_type: Literal["shipment", "container"] = "shipment"
    source_id: str  # shipment id or container id
    doc_type: DocType = DocType.INVOICE
    currency: Currency = Currency.USD


class ManualDocumentRequest(BaseModel):
    reference_id: str = ""
    consignee_name: str = ""
    consignee_phone: str = ""
    consignee_address: str = ""
    origin: str = ""
    destination: str = ""
    mode: str = ""
    container_id: str = ""
    items: list[CargoItemIn] | None = None
    doc_type: DocType = DocType.INVOICE
    currency: Currency = Currency.USD


class LineItemResponse(BaseModel):
    description: str
    quantity: int
    cbm: float
    rate: float | None
    total_cost: float
    amount: float
    amount_formatted: str


class DocumentResponse(BaseModel):
    doc_type: DocType
    reference_id: str
    filename: str
    issued_on: date
    currency: Currency
    exchange_rate: float
    consignee_name: str
    consignee_phone: str
    consignee_address: str
    origin: str
    destination: str
    mode: str
    container_id: str
    items: list[LineItemResponse]
    total_volume: float
    subtotal: float
    subtotal_formatted: str
