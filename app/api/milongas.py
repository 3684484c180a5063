# ruff: isort: skip_file
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.schemas import MilongaIn, MilongaUpdate, to_columns
from app.api.serializers import milonga_to_dict
from app.core.clock import utcnow
from app.core.dependencies import get_catalog_cache
from app.models.user import AdminUser
from app.models.workshop import Milonga
from app.services.auth import require_admin
from app.services.catalog import CatalogCache
from app.services.event_service import resolve_event_id
from db import get_db

router = APIRouter()
log = logging.getLogger(__name__)
audit = logging.getLogger("audit")

MILONGA_TYPES = ("regular", "gala", "desert")


def _get_milonga(db: Session, milonga_id: int) -> Milonga:
    milonga = db.get(Milonga, milonga_id)
    if milonga is None:
        raise HTTPException(status_code=404, detail="Milonga not found")
    return milonga


def _check_type(value: Optional[str]) -> None:
    if value is not None and value not in MILONGA_TYPES:
        raise HTTPException(status_code=400, detail=f"Type must be one of {list(MILONGA_TYPES)}")


@router.get("/api/milongas")
def list_milongas(
    event_id: Optional[int] = Query(None, alias="eventId"),
    db: Session = Depends(get_db),
):
    eid = resolve_event_id(db, event_id)
    rows = (
        db.query(Milonga)
        .filter(Milonga.EventID == eid)
        .order_by(Milonga.Date.asc(), Milonga.Time.asc())
        .all()
    )
    now = utcnow()
    return [milonga_to_dict(m, now) for m in rows]


@router.post("/api/milongas", status_code=201)
def create_milonga(
    body: MilongaIn,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    _check_type(body.type)
    milonga = Milonga(
        EventID=resolve_event_id(db, body.event_id),
        Enrolled=0,
        **to_columns(body, exclude={"event_id"}),
    )
    db.add(milonga)
    db.commit()
    db.refresh(milonga)
    cache.invalidate()
    audit.info("milonga.create", extra={"milonga_id": milonga.MilongaID, "admin_id": admin.AdminID})
    return milonga_to_dict(milonga, utcnow())


@router.put("/api/milongas/{milonga_id}")
def update_milonga(
    milonga_id: int,
    body: MilongaUpdate,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    _check_type(body.type)
    milonga = _get_milonga(db, milonga_id)
    for key, value in to_columns(body, exclude_unset=True).items():
        setattr(milonga, key, value)
    db.commit()
    db.refresh(milonga)
    cache.invalidate()
    audit.info("milonga.update", extra={"milonga_id": milonga_id, "admin_id": admin.AdminID})
    return milonga_to_dict(milonga, utcnow())


@router.delete("/api/milongas/{milonga_id}")
def delete_milonga(
    milonga_id: int,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    milonga = _get_milonga(db, milonga_id)
    db.delete(milonga)
    db.commit()
    cache.invalidate()
    audit.info("milonga.delete", extra={"milonga_id": milonga_id, "admin_id": admin.AdminID})
    return {"message": "Milonga deleted"}
