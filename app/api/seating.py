"""Seating-layout document (admin canvas). Pricing never reads it."""

# ruff: isort: skip_file
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.api.schemas import SeatingLayoutIn
from app.api.serializers import iso
from app.models.gala import SeatingLayout
from app.models.user import AdminUser
from app.services.auth import require_admin
from app.services.errors import NoCurrentEventError
from app.services.event_service import resolve_event_id
from db import get_db

router = APIRouter()
audit = logging.getLogger("audit")

EMPTY_LAYOUT = {"tables": [], "stage": None}


@router.get("/api/seating-layout")
def get_layout(
    event_id: Optional[int] = Query(None, alias="eventId"),
    db: Session = Depends(get_db),
):
    try:
        eid = resolve_event_id(db, event_id)
    except NoCurrentEventError:
        return dict(EMPTY_LAYOUT)
    row = db.query(SeatingLayout).filter(SeatingLayout.EventID == eid).first()
    if row is None:
        return dict(EMPTY_LAYOUT)
    return {**(row.Layout or EMPTY_LAYOUT), "updatedAt": iso(row.UpdatedAt)}


@router.post("/api/seating-layout")
def save_layout(
    body: SeatingLayoutIn,
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(require_admin),
):
    eid = resolve_event_id(db, body.event_id)
    document = body.model_dump(by_alias=True, exclude={"event_id"})
    row = db.query(SeatingLayout).filter(SeatingLayout.EventID == eid).first()
    if row is None:
        row = SeatingLayout(EventID=eid, Layout=document)
        db.add(row)
    else:
        row.Layout = document
    db.commit()
    audit.info(
        "seating_layout.save",
        extra={"event_id": eid, "tables": len(body.tables), "admin_id": admin.AdminID},
    )
    return {"message": "Seating layout saved", "layout": document}
