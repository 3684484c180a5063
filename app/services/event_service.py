"""Event lookups and the current-event switch."""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from app.models.addons import Addon
from app.models.event import Event
from app.models.gala import GalaTable, SeatingLayout
from app.models.registration import Registration
from app.models.workshop import Milonga, Workshop
from app.services.errors import (
    EventInactiveError,
    EventInUseError,
    EventNotFoundError,
    NoCurrentEventError,
)

audit = logging.getLogger("audit")


def get_current_event(db: Session) -> Event:
    event = (
        db.query(Event)
        .filter(Event.IsCurrent == True, Event.IsActive == True)  # noqa: E712
        .first()
    )
    if event is None:
        raise NoCurrentEventError()
    return event


def get_event(db: Session, event_id: int) -> Event:
    event = db.get(Event, event_id)
    if event is None:
        raise EventNotFoundError(event_id)
    return event


def resolve_event_id(db: Session, event_id: Optional[int] = None) -> int:
    """Return ``event_id`` when it exists, else the current event's id."""
    if event_id is not None:
        return int(get_event(db, event_id).EventID)
    return int(get_current_event(db).EventID)


def _flip_current(db: Session, event: Event) -> None:
    # Clear every flag first so the single commit never leaves two current rows.
    db.query(Event).filter(Event.EventID != event.EventID).update(
        {Event.IsCurrent: False}, synchronize_session="fetch"
    )
    event.IsCurrent = True


def set_current_event(db: Session, event_id: int) -> Event:
    event = get_event(db, event_id)
    if not bool(event.IsActive):
        raise EventInactiveError(event_id)
    try:
        _flip_current(db, event)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(event)
    audit.info("event.set_current", extra={"event_id": event_id})
    return event


def create_event(db: Session, fields: Dict[str, Any]) -> Event:
    make_current = bool(fields.pop("IsCurrent", False))
    event = Event(**fields)
    event.IsCurrent = False
    db.add(event)
    try:
        db.flush()
        if make_current:
            if event.IsActive is False:
                raise EventInactiveError(event.EventID)
            _flip_current(db, event)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(event)
    audit.info("event.create", extra={"event_id": event.EventID})
    return event


def update_event(db: Session, event_id: int, fields: Dict[str, Any]) -> Event:
    event = get_event(db, event_id)
    make_current: Optional[bool] = fields.pop("IsCurrent", None)
    for key, value in fields.items():
        setattr(event, key, value)
    try:
        if make_current:
            if not bool(event.IsActive):
                raise EventInactiveError(event_id)
            _flip_current(db, event)
        elif make_current is False:
            event.IsCurrent = False
        if not bool(event.IsActive):
            event.IsCurrent = False
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(event)
    audit.info("event.update", extra={"event_id": event_id})
    return event


def delete_event(db: Session, event_id: int) -> None:
    event = get_event(db, event_id)
    if db.query(Registration).filter(Registration.EventID == event_id).count():
        raise EventInUseError(event_id)
    try:
        for model in (GalaTable, Addon, Workshop, Milonga, SeatingLayout):
            db.query(model).filter(model.EventID == event_id).delete(synchronize_session=False)
        db.delete(event)
        db.commit()
    except Exception:
        db.rollback()
        raise
    audit.info("event.delete", extra={"event_id": event_id})
