"""
agents table: sourcing agent applications
"""

from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, DateTime

from jaybesin.database import Base
from jaybesin.models.shipment import new_id


class Agent(Base):
    __tablename__ = "agents"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(120), nullable=False, default="")
    email = Column(String(120), nullable=False, default="")
    city = Column(String(80), nullable=False, default="")
    focus = Column(String(60), nullable=False, default="General Cargo")
    volume = Column(String(40), nullable=False, default="")  # applicant's own estimate, free text
    projected_commission = Column(Float, nullable=False, default=0.0)  # USD
    date = Column(String(10), nullable=False, default="")
    status = Column(String(30), nullable=False, default="Pending Review")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
