"""Submission, bookkeeping and payment status for registrations."""

# ruff: noqa: I001
import io
import logging
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

import qrcode
from qrcode.constants import ERROR_CORRECT_M
from qrcode.image.pil import PilImage
from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.core.settings import settings
from app.models.gala import GalaTable
from app.models.registration import Registration
from app.models.workshop import Milonga, Workshop
from app.services.catalog import CatalogSnapshot
from app.services.errors import (
    InvalidPaymentAmountError,
    InvalidPaymentTransitionError,
    InvalidRegistrationError,
    NoCurrentEventError,
    RegistrationClosedError,
    RegistrationNotFoundError,
    TableCapacityError,
)
from app.services.packages import Role, seats_multiplier
from app.services.pricing import compute_quote
from app.services.selection import SelectionState

log = logging.getLogger("registrations")

PAYMENT_METHODS = ("stripe", "offline")

# completed is terminal
PAYMENT_TRANSITIONS = {
    "pending": {"completed", "failed"},
    "failed": {"pending", "completed"},
    "completed": set(),
}


def _load_workshops(db: Session, event_id: int, ids: List[int]) -> List[Workshop]:
    if not ids:
        return []
    rows = (
        db.query(Workshop)
        .filter(Workshop.EventID == event_id, Workshop.WorkshopID.in_(ids))
        .all()
    )
    by_id = {w.WorkshopID: w for w in rows}
    missing = [wid for wid in ids if wid not in by_id]
    if missing:
        raise InvalidRegistrationError(f"Unknown workshops: {missing}")
    return [by_id[wid] for wid in ids]


def _check_workshops(workshops: List[Workshop], seats: int) -> None:
    slots = {}
    for w in workshops:
        if int(w.Capacity or 0) - int(w.Enrolled or 0) < seats:
            raise InvalidRegistrationError(f"Workshop '{w.Title}' is full")
        slot = (w.Date, w.Time)
        if slot in slots:
            raise InvalidRegistrationError(
                f"Workshops '{slots[slot]}' and '{w.Title}' run at the same time"
            )
        slots[slot] = w.Title


def _load_milongas(db: Session, event_id: int, ids: List[int]) -> List[Milonga]:
    if not ids:
        return []
    rows = (
        db.query(Milonga)
        .filter(Milonga.EventID == event_id, Milonga.MilongaID.in_(ids))
        .all()
    )
    if len(rows) != len(set(ids)):
        found = {m.MilongaID for m in rows}
        raise InvalidRegistrationError(f"Unknown milongas: {[i for i in ids if i not in found]}")
    return rows


def _find_table(db: Session, event_id: int, table_number: Optional[int]) -> Optional[GalaTable]:
    if table_number is None:
        return None
    table = (
        db.query(GalaTable)
        .filter(
            GalaTable.EventID == event_id,
            GalaTable.TableNumber == table_number,
            GalaTable.IsActive == True,  # noqa: E712
        )
        .first()
    )
    if table is None:
        raise InvalidRegistrationError(f"Table {table_number} not found")
    return table


def _enroll(workshops: List[Workshop], milongas: List[Milonga], role: Role, delta: int) -> None:
    seats = seats_multiplier(role)
    for w in workshops:
        w.Enrolled = max(0, int(w.Enrolled or 0) + delta * seats)
        if role in (Role.LEADER, Role.COUPLE):
            w.LeadersEnrolled = max(0, int(w.LeadersEnrolled or 0) + delta)
        if role in (Role.FOLLOWER, Role.COUPLE):
            w.FollowersEnrolled = max(0, int(w.FollowersEnrolled or 0) + delta)
    for m in milongas:
        m.Enrolled = max(0, int(m.Enrolled or 0) + delta * seats)


def submit_registration(
    db: Session,
    snapshot: CatalogSnapshot,
    selection: SelectionState,
    payment_method: str = "stripe",
    now: Optional[datetime] = None,
) -> Registration:
    """Validate, price and persist ``selection`` in a single transaction.

    ``snapshot`` must be freshly loaded; the stored total is the one computed
    here, never a client-supplied figure.
    """
    now = now or utcnow()
    event = snapshot.event
    if event is None:
        raise NoCurrentEventError()
    if not event.registration_open_at(now):
        raise RegistrationClosedError()
    if selection.role is None:
        raise InvalidRegistrationError("Role is required")
    if selection.package_type is None:
        raise InvalidRegistrationError("Package type is required")
    if not selection.can_advance_gala_step():
        raise InvalidRegistrationError("Gala dinner selection is incomplete")
    if payment_method not in PAYMENT_METHODS:
        raise InvalidRegistrationError(f"Unsupported payment method: {payment_method}")

    seats = seats_multiplier(selection.role)
    workshops = _load_workshops(db, event.event_id, selection.workshop_ids)
    _check_workshops(workshops, seats)
    milongas = _load_milongas(db, event.event_id, selection.milonga_ids)
    table = _find_table(db, event.event_id, selection.selected_table_number)

    quote = compute_quote(snapshot, selection, now)
    if quote.total < 0:
        raise InvalidPaymentAmountError()

    registration = Registration(
        EventID=event.event_id,
        PackageType=selection.package_type.value,
        Role=selection.role.value,
        LeaderInfo=selection.leader_info,
        FollowerInfo=selection.follower_info,
        WorkshopIDs=list(selection.workshop_ids),
        MilongaIDs=list(selection.milonga_ids),
        SelectedTableNumber=selection.selected_table_number,
        WantsWorkshops=selection.wants_workshops,
        Addons=[a.to_dict() for a in selection.addons],
        PriceBreakdown=[li.to_dict() for li in quote.line_items],
        TotalAmount=quote.total,
        Currency=settings.CURRENCY.upper(),
        PaymentMethod=payment_method,
        PaymentStatus="pending",
    )
    try:
        db.add(registration)
        db.flush()
        _enroll(workshops, milongas, selection.role, 1)
        if table is not None:
            available = int(table.TotalSeats or 0) - int(table.OccupiedSeats or 0)
            if available < seats:
                raise TableCapacityError(int(table.TableNumber))
            table.OccupiedSeats = int(table.OccupiedSeats or 0) + seats
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(registration)
    log.info(
        "registration.created",
        extra={
            "registration_id": registration.RegistrationID,
            "event_id": event.event_id,
            "package": selection.package_type.value,
            "total": str(quote.total),
        },
    )
    return registration


def get_registration(db: Session, registration_id: str) -> Registration:
    registration = db.get(Registration, registration_id)
    if registration is None:
        raise RegistrationNotFoundError(registration_id)
    return registration


def delete_registration(db: Session, registration_id: str) -> None:
    """Delete a registration and release its workshop, milonga and seat bookings."""
    registration = get_registration(db, registration_id)
    role = Role(registration.Role)
    workshop_ids = list(registration.WorkshopIDs or [])
    milonga_ids = list(registration.MilongaIDs or [])
    workshops = (
        db.query(Workshop).filter(Workshop.WorkshopID.in_(workshop_ids)).all() if workshop_ids else []
    )
    milongas = (
        db.query(Milonga).filter(Milonga.MilongaID.in_(milonga_ids)).all() if milonga_ids else []
    )
    try:
        _enroll(workshops, milongas, role, -1)
        if registration.SelectedTableNumber is not None:
            table = (
                db.query(GalaTable)
                .filter(
                    GalaTable.EventID == registration.EventID,
                    GalaTable.TableNumber == registration.SelectedTableNumber,
                )
                .first()
            )
            if table is not None:
                table.OccupiedSeats = max(
                    0, int(table.OccupiedSeats or 0) - seats_multiplier(role)
                )
        db.delete(registration)
        db.commit()
    except Exception:
        db.rollback()
        raise
    log.info("registration.deleted", extra={"registration_id": registration_id})


def update_payment_status(
    db: Session,
    registration_id: str,
    status: str,
    payment_intent_id: Optional[str] = None,
) -> Registration:
    registration = get_registration(db, registration_id)
    current = str(registration.PaymentStatus or "pending")
    if status == current:
        return registration
    if status not in PAYMENT_TRANSITIONS.get(current, set()):
        raise InvalidPaymentTransitionError(current, status)
    registration.PaymentStatus = status
    if payment_intent_id:
        registration.StripePaymentIntentID = payment_intent_id
    if status == "completed":
        registration.PaidAt = utcnow()
    db.commit()
    db.refresh(registration)
    log.info(
        "registration.payment",
        extra={"registration_id": registration_id, "from": current, "to": status},
    )
    return registration


def amount_in_minor_units(total) -> int:
    amount = Decimal(str(total or 0)) * 100
    cents = int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    if cents <= 0:
        raise InvalidPaymentAmountError()
    return cents


def confirmation_url(registration_id: str, base_url: Optional[str] = None) -> str:
    base = (base_url or settings.BASE_URL).rstrip("/")
    return f"{base}/confirmation?id={registration_id}"


def registration_qr_png(registration_id: str, base_url: Optional[str] = None) -> bytes:
    qr = qrcode.QRCode(version=None, error_correction=ERROR_CORRECT_M, box_size=8, border=4)
    qr.add_data(confirmation_url(registration_id, base_url))
    qr.make(fit=True)
    img = qr.make_image(fill_color="#000000", back_color="#ffffff", image_factory=PilImage)
    buf = io.BytesIO()
    img.get_image().save(buf, format="PNG")
    return buf.getvalue()
