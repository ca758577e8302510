"""
vehicles table: vehicle sourcing showroom
"""

from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, Text, DateTime, JSON

from jaybesin.database import Base
from jaybesin.models.shipment import new_id


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(120), nullable=False, default="")
    vin = Column(String(40), nullable=False, default="")
    engine = Column(String(60), nullable=False, default="")
    year = Column(String(4), nullable=False, default="")
    price = Column(Float, nullable=False, default=0.0)  # USD
    shipping = Column(String(120), nullable=False, default="")
    documentation = Column(String(120), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    images = Column(JSON, nullable=False, default=list)  # URLs
    category = Column(String(40), nullable=False, default="SUV")
    fuel = Column(String(20), nullable=False, default="Gasoline")
    condition = Column(String(20), nullable=False, default="Used")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
