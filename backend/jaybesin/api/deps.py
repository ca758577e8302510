"""
Shared API dependencies
- store / controller come from app.state (built in the lifespan)
- admin routes resolve the caller's role from the users table; the
  X-User-Id header is set by the upstream identity proxy
"""

from fastapi import Depends, Header, HTTPException, Request
from sqlalchemy.orm import Session

from jaybesin.core.shipment_record import Shipment
from jaybesin.database import get_db
from jaybesin.models import User
from jaybesin.models.user import UserRole
from jaybesin.store.document_store import DocumentStore
from jaybesin.workflow.admin_controller import AdminWorkflowController

ADMIN_ROLES = {UserRole.ADMIN, UserRole.SUPER_ADMIN}


def get_store(request: Request) -> DocumentStore:
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(503, "Store not ready")
    return store


async def get_controller(store: DocumentStore = Depends(get_store)) -> AdminWorkflowController:
    settings = await store.load_settings()
    return AdminWorkflowController(store, tracking_domain=settings.tracking_domain)


def _lookup_role(user_id: str | None, db: Session) -> UserRole | None:
    if not user_id:
        return None
    user = db.get(User, user_id)
    return user.role if user else None


def require_admin(
    x_user_id: str | None = Header(None),
    db: Session = Depends(get_db),
) -> str:
    """admin or super_admin; 401 without an identity, 403 without the role"""
    if not x_user_id:
        raise HTTPException(401, "Sign in required")
    if _lookup_role(x_user_id, db) not in ADMIN_ROLES:
        raise HTTPException(403, "Admin role required")
    return x_user_id


def require_super_admin(
    x_user_id: str | None = Header(None),
    db: Session = Depends(get_db),
) -> str:
    if not x_user_id:
        raise HTTPException(401, "Sign in required")
    if _lookup_role(x_user_id, db) != UserRole.SUPER_ADMIN:
        raise HTTPException(403, "Super admin role required")
    return x_user_id


async def load_shipments(store: DocumentStore) -> list[Shipment]:
    return [Shipment.from_document(doc) for doc in await store.list("shipments")]
