"""
SQLAlchemy ORM model package
- Every model is imported here so it registers on Base.metadata.
"""

from jaybesin.models.shipment import Shipment
from jaybesin.models.product import Product
from jaybesin.models.vehicle import Vehicle
from jaybesin.models.category import Category
from jaybesin.models.message import Message
from jaybesin.models.agent import Agent
from jaybesin.models.site_settings import SiteSettingsDocument
from jaybesin.models.user import User

__all__ = [
    "Shipment",
    "Product",
    "Vehicle",
    "Category",
    "Message",
    "Agent",
    "SiteSettingsDocument",
    "User",
]
