"""
Catalog API: sourcing mart products, vehicle showroom, categories
- public reads + WhatsApp checkout / inquiry links
- admin writes under /api/admin/catalog
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from jaybesin.api.deps import get_controller, get_store, require_admin
from jaybesin.core.messages import CartLine, checkout_receipt, deep_link, vehicle_inquiry
from jaybesin.core.shipment_record import ShipmentValidationError, sanitize_category
from jaybesin.schemas.catalog import (
    CategoryIn, CheckoutRequest, CheckoutResponse, DeepLinkResponse, ProductIn,
    VehicleIn, VehicleInquiryRequest,
)
from jaybesin.schemas.common import MessageResponse
from jaybesin.schemas.shipments import SubmitResponse
from jaybesin.store.document_store import DocumentStore
from jaybesin.workflow.admin_controller import AdminWorkflowController, FormMode, FormType

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/catalog", tags=["catalog"])
admin_router = APIRouter(
    prefix="/api/admin/catalog",
    tags=["admin-catalog"],
    dependencies=[Depends(require_admin)],
)


# ── public ──

@router.get("/products")
async def list_products(category: str | None = None, store: DocumentStore = Depends(get_store)):
    products = await store.list("products")
    if category:
        products = [p for p in products if p["category"].upper() == category.upper()]
    return products


@router.get("/vehicles")
async def list_vehicles(store: DocumentStore = Depends(get_store)):
    return await store.list("vehicles")


@router.get("/categories", response_model=list[str])
async def list_categories(store: DocumentStore = Depends(get_store)):
    return [c["name"] for c in await store.list("categories")]


@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(request: CheckoutRequest, store: DocumentStore = Depends(get_store)):
    """Cart → order receipt + link to the shop's WhatsApp"""
    if not request.items:
        raise HTTPException(422, "Cart is empty")
    cart = [CartLine(name=i.name, price=i.price, qty=i.qty) for i in request.items]
    settings = await store.load_settings()
    message = checkout_receipt(cart)
    return CheckoutResponse(
        message=message,
        link=deep_link(settings.shop_phone, message),
        total=round(sum(line.line_total for line in cart), 2),
    )


@router.post("/vehicles/{vehicle_id}/inquiry", response_model=DeepLinkResponse)
async def inquire_vehicle(
    vehicle_id: str,
    request: VehicleInquiryRequest,
    store: DocumentStore = Depends(get_store),
):
    vehicle = await store.get("vehicles", vehicle_id)
    if vehicle is None:
        raise HTTPException(404, f"Vehicle {vehicle_id} not found")
    settings = await store.load_settings()
    message = vehicle_inquiry(vehicle, request.kind)
    return DeepLinkResponse(message=message, link=deep_link(settings.shop_phone, message))


# ── admin ──

def _submit_response(result) -> SubmitResponse:
    return SubmitResponse(id=result.id, entity=result.entity)


@admin_router.get("/form/{form_type}")
def blank_form(form_type: FormType, controller: AdminWorkflowController = Depends(get_controller)):
    return controller.open_form(form_type, FormMode.CREATE)


@admin_router.post("/products", response_model=SubmitResponse, status_code=201)
async def create_product(form: ProductIn, controller: AdminWorkflowController = Depends(get_controller)):
    return _submit_response(await controller.submit(FormType.PRODUCT, FormMode.CREATE, form.model_dump()))


@admin_router.put("/products/{product_id}", response_model=SubmitResponse)
async def update_product(
    product_id: str,
    form: ProductIn,
    controller: AdminWorkflowController = Depends(get_controller),
):
    result = await controller.submit(FormType.PRODUCT, FormMode.EDIT, form.model_dump(), product_id)
    return _submit_response(result)


@admin_router.delete("/products/{product_id}", response_model=MessageResponse)
async def delete_product(product_id: str, controller: AdminWorkflowController = Depends(get_controller)):
    await controller.delete(FormType.PRODUCT, product_id)
    return MessageResponse(message="deleted", detail=product_id)


@admin_router.post("/vehicles", response_model=SubmitResponse, status_code=201)
async def create_vehicle(form: VehicleIn, controller: AdminWorkflowController = Depends(get_controller)):
    return _submit_response(await controller.submit(FormType.VEHICLE, FormMode.CREATE, form.model_dump()))


@admin_router.put("/vehicles/{vehicle_id}", response_model=SubmitResponse)
async def update_vehicle(
    vehicle_id: str,
    form: VehicleIn,
    controller: AdminWorkflowController = Depends(get_controller),
):
    result = await controller.submit(FormType.VEHICLE, FormMode.EDIT, form.model_dump(), vehicle_id)
    return _submit_response(result)


@admin_router.delete("/vehicles/{vehicle_id}", response_model=MessageResponse)
async def delete_vehicle(vehicle_id: str, controller: AdminWorkflowController = Depends(get_controller)):
    await controller.delete(FormType.VEHICLE, vehicle_id)
    return MessageResponse(message="deleted", detail=vehicle_id)


@admin_router.post("/categories", response_model=MessageResponse, status_code=201)
async def create_category(request: CategoryIn, store: DocumentStore = Depends(get_store)):
    category = sanitize_category(request.name)
    if await store.exists("categories", "name", category["name"]):
        raise ShipmentValidationError({"name": f"{category['name']} already exists"})
    await store.create("categories", category)
    return MessageResponse(message="created", detail=category["name"])


@admin_router.delete("/categories/{name}", response_model=MessageResponse)
async def delete_category(name: str, store: DocumentStore = Depends(get_store)):
    """Every category document with this name goes"""
    count = await store.delete_where("categories", "name", name.strip().upper())
    if count == 0:
        raise HTTPException(404, f"Category {name} not found")
    return MessageResponse(message="deleted", detail=f"{name} ({count})")
