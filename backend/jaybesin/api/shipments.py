"""
Admin shipment API: manifest CRUD, bulk status, CRM search,
container rollups and the dashboard counters
"""

from fastapi import APIRouter, Depends, HTTPException, Query

from jaybesin.api.deps import get_controller, get_store, load_shipments, require_admin
from jaybesin.core.containers import aggregate, dashboard_stats
from jaybesin.core.messages import deep_link, shipment_update
from jaybesin.core.shipment_record import Shipment
from jaybesin.core.stages import progress_percent
from jaybesin.core.tracking import search
from jaybesin.schemas.common import MessageResponse, NotificationResponse
from jaybesin.schemas.shipments import (
    BulkStatusRequest, BulkStatusResponse, CargoItemResponse, ContainerGroupResponse,
    DashboardStatsResponse, ShipmentForm, ShipmentListResponse, ShipmentResponse,
    SubmitResponse,
)
from jaybesin.store.document_store import DocumentStore
from jaybesin.workflow.admin_controller import (
    AdminWorkflowController, FormMode, FormType, SubmitResult,
)

router = APIRouter(
    prefix="/api/admin/shipments",
    tags=["admin-shipments"],
    dependencies=[Depends(require_admin)],
)


def _build_shipment_response(shipment: Shipment) -> ShipmentResponse:
    """Shipment → ShipmentResponse (totals derived from the items)"""
    totals = shipment.totals.rounded()
    return ShipmentResponse(
        id=shipment.id,
        tracking_number=shipment.tracking_number,
        status=shipment.status,
        progress=progress_percent(shipment.status),
        origin=shipment.origin,
        destination=shipment.destination,
        mode=shipment.mode,
        consignee_name=shipment.consignee_name,
        consignee_phone=shipment.consignee_phone,
        consignee_address=shipment.consignee_address,
        container_id=shipment.container_id,
        date_received=shipment.date_received,
        rate_per_cbm=shipment.rate_per_cbm,
        shipping_fee=shipment.shipping_fee,
        items=[
            CargoItemResponse(
                description=item.description,
                quantity=item.quantity,
                cbm=item.cbm,
                weight=item.weight,
                rate=item.rate,
                total_cost=round(item.total_cost, 2),
            )
            for item in shipment.items
        ],
        total_volume=totals.total_volume,
        total_cost=totals.total_cost,
        created_at=shipment.created_at,
        last_updated=shipment.last_updated,
    )


def _build_submit_response(result: SubmitResult) -> SubmitResponse:
    notification = None
    if result.notification is not None:
        notification = NotificationResponse(
            phone=result.notification.phone,
            message=result.notification.message,
            link=result.notification.link,
        )
    return SubmitResponse(id=result.id, entity=result.entity, notification=notification)


async def _get_shipment(store: DocumentStore, shipment_id: str) -> Shipment:
    doc = await store.get("shipments", shipment_id)
    if doc is None:
        raise HTTPException(404, f"Shipment {shipment_id} not found")
    return Shipment.from_document(doc)


@router.get("", response_model=ShipmentListResponse)
async def list_shipments(
    q: str = Query("", description="Tracking number, consignee or container substring"),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    store: DocumentStore = Depends(get_store),
):
    """CRM list, newest first"""
    shipments = search(q, await load_shipments(store))
    shipments.sort(key=lambda s: s.sort_key, reverse=True)
    return ShipmentListResponse(
        total=len(shipments),
        shipments=[_build_shipment_response(s) for s in shipments[offset:offset + limit]],
    )


@router.get("/form")
def blank_form(controller: AdminWorkflowController = Depends(get_controller)):
    """Defaults for a new manifest (fresh tracking number, first stage, default rate)"""
    return controller.open_form(FormType.MANIFEST, FormMode.CREATE)


@router.get("/containers", response_model=list[ContainerGroupResponse])
async def list_containers(store: DocumentStore = Depends(get_store)):
    groups = aggregate(await load_shipments(store))
    groups.sort(key=lambda g: g.id)
    return [
        ContainerGroupResponse(
            id=g.id,
            count=g.count,
            total_vol=round(g.total_vol, 2),
            total_cost=round(g.total_cost, 2),
            tracking_numbers=[s.tracking_number for s in g.items],
        )
        for g in groups
    ]


@router.get("/stats", response_model=DashboardStatsResponse)
async def get_stats(store: DocumentStore = Depends(get_store)):
    messages = await store.list("messages")
    stats = dashboard_stats(await load_shipments(store), message_count=len(messages))
    return DashboardStatsResponse(
        active_packages=stats.active_packages,
        total_volume=round(stats.total_volume, 2),
        total_revenue=round(stats.total_revenue, 2),
        inbox_count=stats.inbox_count,
        container_count=stats.container_count,
    )


@router.post("/bulk-status", response_model=BulkStatusResponse)
async def bulk_status(
    request: BulkStatusRequest,
    controller: AdminWorkflowController = Depends(get_controller),
):
    """All selected shipments move to the new stage, or none do"""
    count = await controller.bulk_apply(request.ids, request.status)
    return BulkStatusResponse(updated=count, status=request.status)


@router.post("", response_model=SubmitResponse, status_code=201)
async def create_shipment(
    form: ShipmentForm,
    controller: AdminWorkflowController = Depends(get_controller),
):
    result = await controller.submit(FormType.MANIFEST, FormMode.CREATE, form.model_dump())
    return _build_submit_response(result)


@router.get("/{shipment_id}", response_model=ShipmentResponse)
async def get_shipment(shipment_id: str, store: DocumentStore = Depends(get_store)):
    return _build_shipment_response(await _get_shipment(store, shipment_id))


@router.put("/{shipment_id}", response_model=SubmitResponse)
async def update_shipment(
    shipment_id: str,
    form: ShipmentForm,
    controller: AdminWorkflowController = Depends(get_controller),
):
    result = await controller.submit(FormType.MANIFEST, FormMode.EDIT, form.model_dump(), shipment_id)
    return _build_submit_response(result)


@router.delete("/{shipment_id}", response_model=MessageResponse)
async def delete_shipment(
    shipment_id: str,
    controller: AdminWorkflowController = Depends(get_controller),
):
    await controller.delete(FormType.MANIFEST, shipment_id)
    return MessageResponse(message="deleted", detail=shipment_id)


@router.get("/{shipment_id}/notify", response_model=NotificationResponse)
async def status_update_link(shipment_id: str, store: DocumentStore = Depends(get_store)):
    """WhatsApp status-update link for the consignee"""
    shipment = await _get_shipment(store, shipment_id)
    message = shipment_update(shipment)
    return NotificationResponse(
        phone=shipment.consignee_phone,
        message=message,
        link=deep_link(shipment.consignee_phone, message),
    )
