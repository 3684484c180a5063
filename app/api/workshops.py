# ruff: isort: skip_file
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.api.schemas import WorkshopIn, WorkshopUpdate, to_columns
from app.api.serializers import workshop_to_dict
from app.core.dependencies import get_catalog_cache
from app.models.user import AdminUser
from app.models.workshop import Workshop
from app.services.auth import require_admin
from app.services.catalog import CatalogCache
from app.services.event_service import resolve_event_id
from db import get_db

router = APIRouter()
log = logging.getLogger(__name__)
audit = logging.getLogger("audit")


def _get_workshop(db: Session, workshop_id: int) -> Workshop:
    workshop = db.get(Workshop, workshop_id)
    if workshop is None:
        raise HTTPException(status_code=404, detail="Workshop not found")
    return workshop


@router.get("/api/workshops")
def list_workshops(
    event_id: Optional[int] = Query(None, alias="eventId"),
    db: Session = Depends(get_db),
):
    eid = resolve_event_id(db, event_id)
    rows = (
        db.query(Workshop)
        .filter(Workshop.EventID == eid)
        .order_by(Workshop.Date.asc(), Workshop.Time.asc())
        .all()
    )
    return [workshop_to_dict(w) for w in rows]


@router.post("/api/workshops", status_code=201)
def create_workshop(
    body: WorkshopIn,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    workshop = Workshop(
        EventID=resolve_event_id(db, body.event_id),
        Enrolled=0,
        LeadersEnrolled=0,
        FollowersEnrolled=0,
        **to_columns(body, exclude={"event_id"}),
    )
    db.add(workshop)
    db.commit()
    db.refresh(workshop)
    cache.invalidate()
    audit.info("workshop.create", extra={"workshop_id": workshop.WorkshopID, "admin_id": admin.AdminID})
    return workshop_to_dict(workshop)


@router.put("/api/workshops/{workshop_id}")
def update_workshop(
    workshop_id: int,
    body: WorkshopUpdate,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    workshop = _get_workshop(db, workshop_id)
    for key, value in to_columns(body, exclude_unset=True).items():
        setattr(workshop, key, value)
    if int(workshop.Capacity or 0) < int(workshop.Enrolled or 0):
        db.rollback()
        raise HTTPException(status_code=400, detail="Capacity cannot be below current enrollment")
    db.commit()
    db.refresh(workshop)
    cache.invalidate()
    audit.info("workshop.update", extra={"workshop_id": workshop_id, "admin_id": admin.AdminID})
    return workshop_to_dict(workshop)


@router.delete("/api/workshops/{workshop_id}")
def delete_workshop(
    workshop_id: int,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    workshop = _get_workshop(db, workshop_id)
    db.delete(workshop)
    db.commit()
    cache.invalidate()
    audit.info("workshop.delete", extra={"workshop_id": workshop_id, "admin_id": admin.AdminID})
    return {"message": "Workshop deleted"}
