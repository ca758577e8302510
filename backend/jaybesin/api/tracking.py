"""
Public tracking API: customer shipment lookup and the stage registry
"""

from fastapi import APIRouter, Depends, Query

from jaybesin.api.deps import get_store, load_shipments
from jaybesin.core.stages import LOGISTICS_STAGES, STAGES_VERSION
from jaybesin.core.tracking import resolve
from jaybesin.schemas.shipments import (
    PublicShipment, StageStepResponse, StagesResponse, TrackingResponse,
)
from jaybesin.store.document_store import DocumentStore

router = APIRouter(prefix="/api", tags=["tracking"])


@router.get("/tracking", response_model=TrackingResponse)
async def track(
    q: str = Query("", description="Tracking number, consignee name or container id"),
    store: DocumentStore = Depends(get_store),
):
    """Resolve a query to one shipment (empty query → idle)"""
    result = resolve(q, await load_shipments(store) if q.strip() else [])

    shipment = None
    if result.shipment is not None:
        s = result.shipment
        shipment = PublicShipment(
            tracking_number=s.tracking_number,
            status=s.status,
            origin=s.origin,
            destination=s.destination,
            mode=s.mode,
            consignee_name=s.consignee_name,
            container_id=s.container_id,
            total_volume=round(s.total_volume, 2),
            last_updated=s.last_updated,
        )

    return TrackingResponse(
        status=result.status.value,
        matched_by=result.matched_by.value if result.matched_by else None,
        progress=result.progress,
        timeline=[
            StageStepResponse(index=step.index, label=step.label,
                              completed=step.completed, current=step.current)
            for step in result.timeline
        ],
        shipment=shipment,
    )


@router.get("/stages", response_model=StagesResponse)
def list_stages():
    return StagesResponse(version=STAGES_VERSION, stages=list(LOGISTICS_STAGES))
