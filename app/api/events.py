# ruff: isort: skip_file
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.schemas import EventIn, EventUpdate, to_columns
from app.api.serializers import event_to_dict
from app.core.dependencies import get_catalog_cache
from app.models.event import Event
from app.models.user import AdminUser
from app.services import event_service
from app.services.auth import require_admin
from app.services.catalog import CatalogCache
from db import get_db

router = APIRouter()
log = logging.getLogger(__name__)


@router.get("/api/events/current")
def current_event(db: Session = Depends(get_db)):
    return event_to_dict(event_service.get_current_event(db))


@router.get("/api/events")
def list_events(db: Session = Depends(get_db), admin: AdminUser = Depends(require_admin)):
    rows = db.query(Event).order_by(Event.Year.desc()).all()
    return [event_to_dict(e) for e in rows]


@router.post("/api/events", status_code=201)
def create_event(
    body: EventIn,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    if body.end_date < body.start_date:
        raise HTTPException(status_code=400, detail="End date must be after start date")
    try:
        event = event_service.create_event(db, to_columns(body))
    except IntegrityError:
        raise HTTPException(status_code=400, detail=f"An event for {body.year} already exists")
    cache.invalidate()
    return event_to_dict(event)


@router.put("/api/events/{event_id}")
def update_event(
    event_id: int,
    body: EventUpdate,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    try:
        event = event_service.update_event(db, event_id, to_columns(body, exclude_unset=True))
    except IntegrityError:
        raise HTTPException(status_code=400, detail="Another event already uses that year")
    cache.invalidate()
    return event_to_dict(event)


@router.delete("/api/events/{event_id}")
def delete_event(
    event_id: int,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    event_service.delete_event(db, event_id)
    cache.invalidate()
    return {"message": "Event deleted"}


@router.put("/api/events/{event_id}/set-current")
def set_current(
    event_id: int,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    event = event_service.set_current_event(db, event_id)
    cache.invalidate()
    log.info("event.current_changed", extra={"event_id": event_id, "admin_id": admin.AdminID})
    return event_to_dict(event)
