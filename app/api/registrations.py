# ruff: isort: skip_file
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import Response
from sqlalchemy.orm import Session

from app.api.schemas import PaymentIntentIn, PaymentStatusIn, RegistrationIn
from app.api.serializers import registration_to_dict
from app.core.dependencies import get_catalog_cache
from app.core.settings import settings
from app.models.registration import Registration
from app.models.user import AdminUser
from app.services import registration_service
from app.services.auth import require_admin
from app.services.catalog import CatalogCache, load_snapshot
from app.services.selection import SelectionError, build_selection
from db import get_db

router = APIRouter()
log = logging.getLogger(__name__)


@router.post("/api/registrations", status_code=201)
def create_registration(
    body: RegistrationIn,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    # Always price against a fresh read, never the cached snapshot
    snapshot = load_snapshot(db)
    try:
        selection = build_selection(snapshot, strict=True, **body.selection_kwargs())
    except SelectionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    registration = registration_service.submit_registration(
        db, snapshot, selection, payment_method=body.payment_method
    )
    if body.total_amount is not None and body.total_amount != registration.TotalAmount:
        log.info(
            "registration.total_recomputed",
            extra={
                "registration_id": registration.RegistrationID,
                "client_total": str(body.total_amount),
                "server_total": str(registration.TotalAmount),
            },
        )
    # Seat and enrollment counts changed
    cache.invalidate()
    return registration_to_dict(registration)


@router.get("/api/registrations")
def list_registrations(
    event_id: Optional[int] = Query(None, alias="eventId"),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    admin: AdminUser = Depends(require_admin),
):
    q = db.query(Registration)
    if event_id is not None:
        q = q.filter(Registration.EventID == event_id)
    if status:
        q = q.filter(Registration.PaymentStatus == status)
    rows = q.order_by(Registration.CreatedAt.desc()).all()
    return [registration_to_dict(r) for r in rows]


@router.get("/api/registrations/{registration_id}")
def get_registration(registration_id: str, db: Session = Depends(get_db)):
    return registration_to_dict(registration_service.get_registration(db, registration_id))


@router.get("/api/registrations/{registration_id}/qr")
def registration_qr(registration_id: str, db: Session = Depends(get_db)):
    registration = registration_service.get_registration(db, registration_id)
    png = registration_service.registration_qr_png(registration.RegistrationID)
    headers = {"Cache-Control": "public, max-age=3600"}
    return Response(content=png, media_type="image/png", headers=headers)


@router.put("/api/registrations/{registration_id}/payment")
def update_payment(registration_id: str, body: PaymentStatusIn, db: Session = Depends(get_db)):
    registration = registration_service.update_payment_status(
        db, registration_id, body.status, payment_intent_id=body.payment_intent_id
    )
    return registration_to_dict(registration)


@router.delete("/api/registrations/{registration_id}")
def delete_registration(
    registration_id: str,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
    admin: AdminUser = Depends(require_admin),
):
    registration_service.delete_registration(db, registration_id)
    cache.invalidate()
    return {"message": "Registration deleted"}


@router.post("/api/create-payment-intent")
def create_payment_intent(body: PaymentIntentIn, db: Session = Depends(get_db)):
    registration = registration_service.get_registration(db, body.registration_id)
    if registration.PaymentStatus == "completed":
        raise HTTPException(status_code=400, detail="Registration is already paid")
    amount = registration_service.amount_in_minor_units(registration.TotalAmount)

    try:
        import stripe  # type: ignore
    except Exception:
        raise HTTPException(status_code=500, detail="Stripe SDK not available")
    if not settings.STRIPE_SECRET_KEY:
        raise HTTPException(status_code=500, detail="Stripe secret key not configured")
    stripe.api_key = settings.STRIPE_SECRET_KEY

    try:
        intent = stripe.PaymentIntent.create(  # type: ignore
            amount=amount,
            currency=settings.CURRENCY.lower(),
            metadata={
                "registration_id": str(registration.RegistrationID),
                "event_id": str(registration.EventID),
                "package_type": str(registration.PackageType),
            },
        )
    except Exception as e:
        log.exception("stripe.payment_intent_failed", extra={"registration_id": body.registration_id})
        raise HTTPException(status_code=502, detail=f"Payment provider error: {e}")

    registration.StripePaymentIntentID = intent["id"]
    db.commit()
    log.info(
        "stripe.payment_intent_created",
        extra={"registration_id": body.registration_id, "amount": amount},
    )
    return {
        "clientSecret": intent["client_secret"],
        "paymentIntentId": intent["id"],
        "amount": amount,
        "currency": settings.CURRENCY.lower(),
        "publishableKey": settings.STRIPE_PUBLISHABLE_KEY,
    }
