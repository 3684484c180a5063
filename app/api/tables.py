# ruff: isort: skip_file
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.schemas import TableIn, TableUpdate, to_columns
from app.api.serializers import table_to_dict
from app.core.clock import utcnow
from app.core.dependencies import get_catalog_cache
from app.models.gala import GalaTable
from app.models.user import AdminUser
from app.services.auth import require_admin
from app.services.catalog import CatalogCache
from app.services.event_service import resolve_event_id
from db import get_db

router = APIRouter()
log = logging.getLogger(__name__)
audit = logging.getLogger("audit")


def _get_table(db: Session, table_id: int) -> GalaTable:
    table = db.get(GalaTable, table_id)
    if table is None:
        raise HTTPException(status_code=404, detail="Table not found")
    return table


@router.get("/api/tables")
def list_tables(
    event_id: Optional[int] = Query(None, alias="eventId"),
    db: Session = Depends(get_db),
):
    eid = resolve_event_id(db, event_id)
    rows = (
        db.query(GalaTable)
        .filter(GalaTable.EventID == eid, GalaTable.IsActive == True)  # noqa: E712
        .order_by(GalaTable.TableNumber.asc())
        .all()
    )
    now = utcnow()
    return [table_to_dict(t, now) for t in rows]


@router.get("/api/tables/{table_id}")
def get_table(table_id: int, db: Session = Depends(get_db)):
    return table_to_dict(_get_table(db, table_id), utcnow())


@router.post("/api/tables", status_code=201)
def create_table(
    body: TableIn,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    if body.occupied_seats > body.total_seats:
        raise HTTPException(status_code=400, detail="Occupied seats cannot exceed total seats")
    fields = to_columns(body, exclude={"event_id"})
    table = GalaTable(EventID=resolve_event_id(db, body.event_id), **fields)
    db.add(table)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=f"Table {body.table_number} already exists")
    db.refresh(table)
    cache.invalidate()
    audit.info("table.create", extra={"table_id": table.TableID, "admin_id": admin.AdminID})
    return table_to_dict(table, utcnow())


@router.put("/api/tables/{table_id}")
def update_table(
    table_id: int,
    body: TableUpdate,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    table = _get_table(db, table_id)
    for key, value in to_columns(body, exclude_unset=True).items():
        setattr(table, key, value)
    if int(table.OccupiedSeats or 0) > int(table.TotalSeats or 0):
        db.rollback()
        raise HTTPException(status_code=400, detail="Occupied seats cannot exceed total seats")
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="Table number already in use")
    db.refresh(table)
    cache.invalidate()
    audit.info("table.update", extra={"table_id": table_id, "admin_id": admin.AdminID})
    return table_to_dict(table, utcnow())


@router.delete("/api/tables/{table_id}")
def delete_table(
    table_id: int,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    table = _get_table(db, table_id)
    db.delete(table)
    db.commit()
    cache.invalidate()
    audit.info("table.delete", extra={"table_id": table_id, "admin_id": admin.AdminID})
    return {"message": "Table deleted"}
