"""
categories table: product categories ({name} only)
"""

from datetime import datetime, timezone

from sqlalchemy import Column, String, DateTime

from jaybesin.database import Base
from jaybesin.models.shipment import new_id


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(60), nullable=False)  # upper-cased, e.g. "ELECTRONICS"
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
