"""
Site settings API
- public: branding and contact numbers only
- admin: full settings read and merge push
"""

from fastapi import APIRouter, Depends

from jaybesin.api.deps import get_store, require_admin
from jaybesin.schemas.settings import PublicSettings, SiteSettings, SiteSettingsUpdate
from jaybesin.store.document_store import DocumentStore

router = APIRouter(prefix="/api/settings", tags=["settings"])
admin_router = APIRouter(
    prefix="/api/admin/settings",
    tags=["admin-settings"],
    dependencies=[Depends(require_admin)],
)


@router.get("/public", response_model=PublicSettings)
async def public_settings(store: DocumentStore = Depends(get_store)):
    settings = await store.load_settings()
    return PublicSettings(**settings.model_dump())


@admin_router.get("", response_model=SiteSettings)
async def get_settings(store: DocumentStore = Depends(get_store)):
    return await store.load_settings()


@admin_router.patch("", response_model=SiteSettings)
async def push_settings(update: SiteSettingsUpdate, store: DocumentStore = Depends(get_store)):
    """Only the fields sent change; the rest of the document is kept"""
    return await store.push_settings(update.model_dump(exclude_unset=True, exclude_none=True))
