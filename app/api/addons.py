# ruff: isort: skip_file
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.schemas import AddonIn, AddonUpdate, to_columns
from app.api.serializers import addon_to_dict
from app.core.dependencies import get_catalog_cache
from app.models.addons import Addon
from app.models.user import AdminUser
from app.services.auth import require_admin
from app.services.catalog import AddonKind, CatalogCache
from app.services.event_service import resolve_event_id
from db import get_db

router = APIRouter()
log = logging.getLogger(__name__)
audit = logging.getLogger("audit")

_KINDS = {k.value for k in AddonKind}


def _check_kind(kind: Optional[str]) -> None:
    if kind is not None and kind not in _KINDS:
        raise HTTPException(status_code=400, detail=f"Kind must be one of {sorted(_KINDS)}")


def _get_addon(db: Session, addon_id: int) -> Addon:
    addon = db.get(Addon, addon_id)
    if addon is None:
        raise HTTPException(status_code=404, detail="Add-on not found")
    return addon


@router.get("/api/addons")
def list_addons(
    event_id: Optional[int] = Query(None, alias="eventId"),
    db: Session = Depends(get_db),
):
    eid = resolve_event_id(db, event_id)
    rows = (
        db.query(Addon)
        .filter(Addon.EventID == eid, Addon.IsActive == True)  # noqa: E712
        .order_by(Addon.Price.asc(), Addon.Name.asc())
        .all()
    )
    return [addon_to_dict(a) for a in rows]


@router.post("/api/addons", status_code=201)
def create_addon(
    body: AddonIn,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    _check_kind(body.kind)
    addon = Addon(
        EventID=resolve_event_id(db, body.event_id),
        **to_columns(body, exclude={"event_id"}),
    )
    db.add(addon)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail=f"Add-on code '{body.code}' already exists")
    db.refresh(addon)
    cache.invalidate()
    audit.info("addon.create", extra={"addon_code": addon.Code, "admin_id": admin.AdminID})
    return addon_to_dict(addon)


@router.put("/api/addons/{addon_id}")
def update_addon(
    addon_id: int,
    body: AddonUpdate,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    _check_kind(body.kind)
    addon = _get_addon(db, addon_id)
    for key, value in to_columns(body, exclude_unset=True).items():
        setattr(addon, key, value)
    db.commit()
    db.refresh(addon)
    cache.invalidate()
    audit.info("addon.update", extra={"addon_code": addon.Code, "admin_id": admin.AdminID})
    return addon_to_dict(addon)


@router.delete("/api/addons/{addon_id}")
def delete_addon(
    addon_id: int,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    addon = _get_addon(db, addon_id)
    db.delete(addon)
    db.commit()
    cache.invalidate()
    audit.info("addon.delete", extra={"addon_id": addon_id, "admin_id": admin.AdminID})
    return {"message": "Add-on deleted"}
