"""
Admin document API: invoice / bill of lading / packing list / manifest
- preview returns the built document as JSON
- pdf returns the rendered file as an attachment
- export writes the file under PDF_OUTPUT_DIR
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response

from jaybesin.api.deps import get_store, load_shipments, require_admin
from jaybesin.config import settings as app_settings
from jaybesin.core.containers import find_group
from jaybesin.core.shipment_record import Shipment
from jaybesin.documents.builder import (
    Document, build_document, build_manual_document, format_money,
)
from jaybesin.documents.pdf_renderer import export, render
from jaybesin.schemas.common import MessageResponse
from jaybesin.schemas.documents import (
    DocumentRequest, DocumentResponse, LineItemResponse, ManualDocumentRequest,
)
from jaybesin.store.document_store import DocumentStore

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin/documents",
    tags=["admin-documents"],
    dependencies=[Depends(require_admin)],
)


async def _build(request: DocumentRequest, store: DocumentStore) -> Document:
    settings = await store.load_settings()
    if request.source_type == "container":
        source = find_group(request.source_id, await load_shipments(store))
        if source is None:
            raise HTTPException(404, f"Container {request.source_id} not found")
    else:
        doc = await store.get("shipments", request.source_id)
        if doc is None:
            raise HTTPException(404, f"Shipment {request.source_id} not found")
        source = Shipment.from_document(doc)
    return build_document(source, request.doc_type, request.currency, settings)


async def _build_manual(request: ManualDocumentRequest, store: DocumentStore) -> Document:
    settings = await store.load_settings()
    data = request.model_dump(exclude={"doc_type", "currency"})
    return build_manual_document(data, request.doc_type, request.currency, settings)


def _build_document_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
        doc_type=document.doc_type,
        reference_id=document.reference_id,
        filename=document.filename,
        issued_on=document.issued_on,
        currency=document.currency,
        exchange_rate=document.exchange_rate,
        consignee_name=document.consignee.name,
        consignee_phone=document.consignee.phone,
        consignee_address=document.consignee.address,
        origin=document.origin,
        destination=document.destination,
        mode=document.mode,
        container_id=document.container_id,
        items=[
            LineItemResponse(
                description=item.description,
                quantity=item.quantity,
                cbm=item.cbm,
                rate=item.rate,
                total_cost=round(item.total_cost, 2),
                amount=round(item.amount, 2),
                amount_formatted=format_money(item.amount, document.currency),
            )
            for item in document.items
        ],
        total_volume=round(document.total_volume, 2),
        subtotal=round(document.subtotal, 2),
        subtotal_formatted=format_money(document.subtotal, document.currency),
    )


async def _pdf_response(document: Document) -> Response:
    loop = asyncio.get_running_loop()
    rendered = await loop.run_in_executor(None, render, document)
    logger.info(f"PDF {rendered.filename}: {rendered.page_count} pages")
    return Response(
        content=rendered.content,
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{rendered.filename}"',
            "X-Page-Count": str(rendered.page_count),
        },
    )


@router.post("/preview", response_model=DocumentResponse)
async def preview_document(request: DocumentRequest, store: DocumentStore = Depends(get_store)):
    return _build_document_response(await _build(request, store))


@router.post("/pdf")
async def download_document(request: DocumentRequest, store: DocumentStore = Depends(get_store)):
    return await _pdf_response(await _build(request, store))


@router.post("/export", response_model=MessageResponse)
async def export_document(request: DocumentRequest, store: DocumentStore = Depends(get_store)):
    """Write the PDF under PDF_OUTPUT_DIR on the server"""
    document = await _build(request, store)
    loop = asyncio.get_running_loop()
    path = await loop.run_in_executor(None, export, document, app_settings.PDF_OUTPUT_DIR)
    logger.info(f"Exported {path}")
    return MessageResponse(message="exported", detail=str(path))


@router.post("/manual/preview", response_model=DocumentResponse)
async def preview_manual_document(
    request: ManualDocumentRequest,
    store: DocumentStore = Depends(get_store),
):
    return _build_document_response(await _build_manual(request, store))


@router.post("/manual/pdf")
async def download_manual_document(
    request: ManualDocumentRequest,
    store: DocumentStore = Depends(get_store),
):
    return await _pdf_response(await _build_manual(request, store))
