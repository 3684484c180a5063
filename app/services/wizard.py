"""Keeps a provisional quote in step with one selection and the catalog cache."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from typing import Callable, Optional

from app.core.clock import utcnow
from app.services.catalog import CacheKey, CatalogCache, CatalogSnapshot
from app.services.pricing import Quote, compute_quote, quantize
from app.services.selection import SelectionError, SelectionState

logger = logging.getLogger("pricing")

SELECTION_MESSAGES = frozenset(
    {
        "set_role",
        "set_package",
        "select_table",
        "set_workshop_preference",
        "add_workshop",
        "remove_workshop",
        "set_milongas",
    }
)
ADDON_MESSAGES = frozenset(
    {"change_quantity", "add_sized", "change_sized_quantity", "remove_sized", "set_transport"}
)


@dataclass(frozen=True)
class PriceNotice:
    previous: Decimal
    current: Decimal

    def to_dict(self):
        return {"previousTotal": float(self.previous), "currentTotal": float(self.current)}


class QuoteTracker:
    """Recomputes ``quote`` after every selection message and catalog refresh.

    A refresh that moves the total leaves a ``price_notice`` until the client
    acknowledges it.
    """

    def __init__(
        self,
        cache: CatalogCache,
        loader: Callable[[], CatalogSnapshot],
        selection: Optional[SelectionState] = None,
        event_key: CacheKey = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.cache = cache
        self.selection = selection or SelectionState()
        self.event_key = event_key
        self.price_notice: Optional[PriceNotice] = None
        self._loader = loader
        self._clock = clock
        self._snapshot = cache.get(event_key, loader)
        self.quote: Quote = compute_quote(self._snapshot, self.selection, clock())
        self._unsubscribe = cache.subscribe(self._on_catalog)

    @property
    def snapshot(self) -> CatalogSnapshot:
        return self._snapshot

    def _recompute(self) -> Quote:
        self.quote = compute_quote(self._snapshot, self.selection, self._clock())
        return self.quote

    def apply(self, message: str, *args) -> Quote:
        if message not in SELECTION_MESSAGES:
            raise SelectionError(f"Unsupported selection message: {message}")
        if message == "add_workshop":
            workshop = self._snapshot.workshop(int(args[0]))
            if workshop is None:
                raise SelectionError(f"Unknown workshop: {args[0]}")
            args = (workshop,)
        getattr(self.selection, message)(*args)
        return self._recompute()

    def apply_addon(self, message: str, code: str, *args) -> Quote:
        if message not in ADDON_MESSAGES:
            raise SelectionError(f"Unsupported add-on message: {message}")
        entry = self._snapshot.addon(code)
        if entry is None:
            raise SelectionError(f"Unknown add-on: {code}")
        getattr(self.selection, message)(entry, *args)
        return self._recompute()

    def replace_selection(self, selection: SelectionState) -> Quote:
        self.selection = selection
        return self._recompute()

    def reconcile(self, previous_total, previous_version: Optional[int]) -> Optional[PriceNotice]:
        """Compare against a total the client saw for this same selection.

        A notice is raised only when the client's total came from an older
        snapshot and differs from the current one.
        """
        if previous_total is None or previous_version is None:
            return self.price_notice
        if previous_version == self._snapshot.version:
            return self.price_notice
        previous = quantize(Decimal(str(previous_total)))
        if previous != self.quote.total:
            self.price_notice = PriceNotice(previous=previous, current=self.quote.total)
        return self.price_notice

    def poll(self) -> Quote:
        """Ask the cache for the latest snapshot; a reload recomputes via the listener."""
        self.cache.get(self.event_key, self._loader)
        return self.quote

    def acknowledge_price_change(self) -> None:
        self.price_notice = None

    def _on_catalog(self, key: CacheKey, snapshot: CatalogSnapshot) -> None:
        if key != self.event_key:
            return
        previous = self.quote.total
        self._snapshot = snapshot
        current = self._recompute().total
        if current != previous:
            self.price_notice = PriceNotice(previous=previous, current=current)
            logger.info(
                "pricing.price_changed",
                extra={"previous": str(previous), "current": str(current), "version": snapshot.version},
            )

    def close(self) -> None:
        self._unsubscribe()
