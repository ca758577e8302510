"""
User role API (super admin only)
Identities are created by the identity provider; this table only assigns roles.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from jaybesin.api.deps import require_super_admin
from jaybesin.database import get_db
from jaybesin.models import User
from jaybesin.models.user import UserRole
from jaybesin.schemas.catalog import UserRoleUpdate

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/admin/users", tags=["admin-users"])


def _user_dict(user: User) -> dict:
    return {
        "uid": user.uid,
        "email": user.email,
        "role": user.role.value if hasattr(user.role, "value") else str(user.role),
        "created_by": user.created_by,
        "created_at": user.created_at,
    }


@router.get("")
def list_users(db: Session = Depends(get_db), _: str = Depends(require_super_admin)):
    return [_user_dict(u) for u in db.query(User).order_by(User.email).all()]


@router.put("/{uid}")
def set_role(
    uid: str,
    request: UserRoleUpdate,
    db: Session = Depends(get_db),
    caller: str = Depends(require_super_admin),
):
    """Assign a role; an unknown uid is registered with it"""
    if uid == caller and request.role != UserRole.SUPER_ADMIN.value:
        raise HTTPException(422, "Cannot demote yourself")

    user = db.get(User, uid)
    if user is None:
        user = User(uid=uid, email=request.email, created_by=caller)
        db.add(user)
    elif request.email:
        user.email = request.email
    user.role = UserRole(request.role)
    db.commit()
    logger.info(f"[Users] {uid} -> {request.role} (by {caller})")
    return _user_dict(user)
