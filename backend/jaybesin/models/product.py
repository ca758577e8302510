"""
products table: sourcing mart inventory
"""

from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, Boolean, Text, DateTime

from jaybesin.database import Base
from jaybesin.models.shipment import new_id


class Product(Base):
    __tablename__ = "products"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(120), nullable=False, default="")
    description = Column(Text, nullable=False, default="")
    price = Column(Float, nullable=False, default=0.0)  # USD
    image = Column(Text, nullable=False, default="")  # URL
    category = Column(String(60), nullable=False, default="")
    is_landed_cost = Column(Boolean, nullable=False, default=False)  # price includes shipping/duties
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
