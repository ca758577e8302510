"""
Shipment / tracking Pydantic schemas
"""

from datetime import datetime
from pydantic import BaseModel

from jaybesin.schemas.common import NotificationResponse


class CargoItemIn(BaseModel):
    description: str = ""
    quantity: int = 1
    cbm: float = 0.0
    weight: float = 0.0
    rate: float | None = None


class ShipmentForm(BaseModel):
    """Admin manifest form; blanks are defaulted by the record model."""
    tracking_number: str = ""
    date_received: str = ""
    status: str = ""
    origin: str = ""
    destination: str = ""
    mode: str = ""
    consignee_name: str = ""
    consignee_phone: str = ""
    consignee_address: str = ""
    container_id: str = ""
    rate_per_cbm: float = 0.0
    shipping_fee: float = 0.0
    items: list[CargoItemIn] = []


class CargoItemResponse(BaseModel):
    description: str
    quantity: int
    cbm: float
    weight: float
    rate: float | None = None
    total_cost: float


class ShipmentResponse(BaseModel):
    id: str | None
    tracking_number: str
    status: str
    progress: int
    origin: str
    destination: str
    mode: str
    consignee_name: str
    consignee_phone: str
    consignee_address: str
    container_id: str
    date_received: str
    rate_per_cbm: float
    shipping_fee: float
    items: list[CargoItemResponse] = []
    total_volume: float  # derived, 2 dp
    total_cost: float  # derived, USD, 2 dp
    created_at: datetime | None = None
    last_updated: datetime | None = None


class ShipmentListResponse(BaseModel):
    total: int
    shipments: list[ShipmentResponse]


class SubmitResponse(BaseModel):
    id: str
    entity: dict
    notification: NotificationResponse | None = None


class BulkStatusRequest(BaseModel):
    ids: list[str]
    status: str


class BulkStatusResponse(BaseModel):
    updated: int
    status: str


class ContainerGroupResponse(BaseModel):
    id: str
    count: int
    total_vol: float
    total_cost: float
    tracking_numbers: list[str]


class DashboardStatsResponse(BaseModel):
    active_packages: int
    total_volume: float
    total_revenue: float
    inbox_count: int
    container_count: int


class StageStepResponse(BaseModel):
    index: int
    label: str
    completed: bool
    current: bool


class StagesResponse(BaseModel):
    version: int
    stages: list[str]


class PublicShipment(BaseModel):
    """What the public tracker may show (no phone, no pricing)."""
    tracking_number: str
    status: str
    origin: str
    destination: str
    mode: str
    consignee_name: str
    container_id: str
    total_volume: float
    last_updated: datetime | None = None


class TrackingResponse(BaseModel):
    status: str  # idle | found | not_found
    matched_by: str | None = None
    progress: int = 0
    timeline: list[StageStepResponse] = []
    shipment: PublicShipment | None = None
