"""
messages table: contact form inbox
"""

from datetime import datetime, timezone

from sqlalchemy import Column, String, Text, DateTime

from jaybesin.database import Base
from jaybesin.models.shipment import new_id


class Message(Base):
    __tablename__ = "messages"

    id = Column(String(32), primary_key=True, default=new_id)
    name = Column(String(120), nullable=False, default="")
    email = Column(String(120), nullable=False, default="")
    phone = Column(String(40), nullable=False, default="")
    subject = Column(String(120), nullable=False, default="")
    message = Column(Text, nullable=False, default="")
    status = Column(String(20), nullable=False, default="unread")
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
