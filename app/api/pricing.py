# ruff: isort: skip_file
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.schemas import PricingIn
from app.core.clock import utcnow
from app.core.dependencies import get_catalog_cache
from app.core.settings import settings
from app.services.catalog import CatalogCache, load_snapshot
from app.services.selection import SelectionError, build_selection
from app.services.wizard import QuoteTracker
from db import get_db

router = APIRouter()
log = logging.getLogger(__name__)


@router.post("/api/calculate-pricing")
def calculate_pricing(
    body: PricingIn,
    db: Session = Depends(get_db),
    cache: CatalogCache = Depends(get_catalog_cache),
):
    """Provisional quote for the wizard; submission recomputes on its own.

    When the client sends the total and ``catalogVersion`` it last showed for
    this selection, ``priceChanged`` reports a move caused by a catalog refresh.
    """
    tracker = QuoteTracker(cache, lambda: load_snapshot(db), clock=utcnow)
    try:
        try:
            selection = build_selection(tracker.snapshot, **body.selection_kwargs())
        except SelectionError as e:
            raise HTTPException(status_code=400, detail=str(e))
        quote = tracker.replace_selection(selection)
        notice = tracker.reconcile(body.previous_total, body.catalog_version)
        snapshot = tracker.snapshot
    finally:
        tracker.close()
    return {
        **quote.to_dict(),
        "currency": settings.CURRENCY.upper(),
        "canAdvanceGalaStep": selection.can_advance_gala_step(),
        "accommodationNights": selection.accommodation_nights,
        "addons": [a.to_dict() for a in selection.addons],
        "catalogVersion": snapshot.version,
        "priceChanged": notice.to_dict() if notice is not None else None,
    }
