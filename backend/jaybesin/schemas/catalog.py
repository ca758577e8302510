"""
Sourcing mart / vehicle showroom / inbox Pydantic schemas
"""

from typing import Literal

from pydantic import BaseModel


class ProductIn(BaseModel):
    name: str = ""
    description: str = ""
    price: float = 0.0
    image: str = ""
    category: str = ""
    is_landed_cost: bool = False


class VehicleIn(BaseModel):
    name: str = ""
    vin: str = ""
    engine: str = ""
    year: str = ""
    price: float = 0.0
    shipping: str = ""
    documentation: str = ""
    description: str = ""
    images: list[str] = []
    category: str = ""
    fuel: str = ""
    condition: str = ""


class CategoryIn(BaseModel):
    name: str


class CartLineIn(BaseModel):
    name: str
    price: float
    qty: int = 1


class CheckoutRequest(BaseModel):
    items: list[CartLineIn]


class DeepLinkResponse(BaseModel):
    message: str
    link: str


class CheckoutResponse(DeepLinkResponse):
    total: float


class VehicleInquiryRequest(BaseModel):
    kind: Literal["order", "inspection"] = "order"


class ContactMessageIn(BaseModel):
    name: str = ""
    email: str = ""
    phone: str = ""
    subject: str = ""
    message: str = ""


class AgentApplicationIn(BaseModel):
    name: str = ""
    email: str = ""
    city: str = ""
    focus: str = ""
    volume: str = ""


class MessageStatusUpdate(BaseModel):
    status: Literal["unread", "read", "archived"]


class UserRoleUpdate(BaseModel):
    email: str = ""
    role: Literal["viewer", "admin", "super_admin"]
