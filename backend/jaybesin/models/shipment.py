"""
shipments table: one consignee's cargo on its way from China to Ghana
- items is a JSON list owned by the row (deleted with it)
- total_volume / total_cost are a cache refreshed on every write
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Float, DateTime, JSON

from jaybesin.database import Base


def new_id() -> str:
    return uuid.uuid4().hex


class Shipment(Base):
    __tablename__ = "shipments"

    id = Column(String(32), primary_key=True, default=new_id)
    tracking_number = Column(String(20), nullable=False, default="", unique=True)  # "JB-CN-123456"
    status = Column(String(60), nullable=False, default="")
    origin = Column(String(100), nullable=False, default="")
    destination = Column(String(100), nullable=False, default="")
    mode = Column(String(40), nullable=False, default="")
    consignee_name = Column(String(120), nullable=False, default="")
    consignee_phone = Column(String(40), nullable=False, default="")
    consignee_address = Column(String(200), nullable=False, default="")
    container_id = Column(String(40), nullable=False, default="", index=True)
    date_received = Column(String(10), nullable=False, default="")  # ISO date
    rate_per_cbm = Column(Float, nullable=False, default=0.0)  # USD
    shipping_fee = Column(Float, nullable=False, default=0.0)  # USD
    items = Column(JSON, nullable=False, default=list)
    total_volume = Column(Float, nullable=False, default=0.0)  # cache, CBM
    total_cost = Column(Float, nullable=False, default=0.0)  # cache, USD
    schema_version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    last_updated = Column(
        DateTime,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
