"""
Inbox API: contact form messages and sourcing-agent applications
"""

from fastapi import APIRouter, Depends

from jaybesin.api.deps import get_store, require_admin
from jaybesin.core.messages import CONTACT_GREETING, deep_link
from jaybesin.core.shipment_record import sanitize_agent, sanitize_message
from jaybesin.schemas.catalog import (
    AgentApplicationIn, ContactMessageIn, DeepLinkResponse, MessageStatusUpdate,
)
from jaybesin.schemas.common import IdResponse, MessageResponse
from jaybesin.store.document_store import DocumentStore

router = APIRouter(prefix="/api", tags=["inbox"])
admin_router = APIRouter(
    prefix="/api/admin",
    tags=["admin-inbox"],
    dependencies=[Depends(require_admin)],
)


@router.post("/messages", response_model=IdResponse, status_code=201)
async def send_message(form: ContactMessageIn, store: DocumentStore = Depends(get_store)):
    return IdResponse(id=await store.create("messages", sanitize_message(form.model_dump())))


@router.post("/agents", response_model=IdResponse, status_code=201)
async def apply_as_agent(form: AgentApplicationIn, store: DocumentStore = Depends(get_store)):
    return IdResponse(id=await store.create("agents", sanitize_agent(form.model_dump())))


@router.get("/contact/whatsapp", response_model=DeepLinkResponse)
async def contact_link(store: DocumentStore = Depends(get_store)):
    settings = await store.load_settings()
    return DeepLinkResponse(
        message=CONTACT_GREETING,
        link=deep_link(settings.contact_whatsapp, CONTACT_GREETING),
    )


@admin_router.get("/messages")
async def list_messages(status: str | None = None, store: DocumentStore = Depends(get_store)):
    """Newest first"""
    messages = await store.list("messages")
    if status:
        messages = [m for m in messages if m["status"] == status]
    return messages


@admin_router.patch("/messages/{message_id}", response_model=MessageResponse)
async def set_message_status(
    message_id: str,
    request: MessageStatusUpdate,
    store: DocumentStore = Depends(get_store),
):
    await store.update("messages", message_id, {"status": request.status})
    return MessageResponse(message="updated", detail=request.status)


@admin_router.delete("/messages/{message_id}", response_model=MessageResponse)
async def delete_message(message_id: str, store: DocumentStore = Depends(get_store)):
    await store.delete("messages", message_id)
    return MessageResponse(message="deleted", detail=message_id)


@admin_router.get("/agents")
async def list_agents(store: DocumentStore = Depends(get_store)):
    return await store.list("agents")
