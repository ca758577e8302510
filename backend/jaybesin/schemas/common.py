"""
Shared Pydantic schemas
"""

from datetime import datetime
from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
    db_connected: bool
    redis_connected: bool
    stages_version: int
    timestamp: datetime


class MessageResponse(BaseModel):
    message: str
    detail: str | None = None


class NotificationResponse(BaseModel):
    phone: str
    message: str
    link: str


class IdResponse(BaseModel):
    id: str
