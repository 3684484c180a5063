"""Read-only catalog snapshot used by the pricing engine, plus a polling cache.

A snapshot is built once from the database and never mutated. Addon kinds are
resolved while the snapshot is built so the rest of the code dispatches on
``AddonEntry.kind`` instead of inspecting option shapes.
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from app.core.clock import utcnow
from app.models.addons import Addon
from app.models.event import Event
from app.models.gala import GalaTable
from app.models.workshop import Milonga, Workshop

logger = logging.getLogger("pricing")

ZERO = Decimal("0")


class AddonKind(str, Enum):
    SIMPLE = "simple"
    SIZED = "sized"
    TRANSPORT = "transport"


def to_money(value: Any) -> Decimal:
    """Coerce a stored price to a non-negative Decimal; bad values become 0."""
    if value is None or value == "":
        return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return ZERO
    if not amount.is_finite() or amount < 0:
        return ZERO
    return amount


def early_bird_applies(price: Decimal, end: Optional[datetime], now: datetime) -> bool:
    return price > 0 and end is not None and now <= end


def within_window(start: Optional[datetime], end: Optional[datetime], now: datetime) -> bool:
    if start is None or end is None:
        return False
    return start <= now <= end


def resolve_addon_kind(kind: Optional[str], options: Any, category: Optional[str]) -> AddonKind:
    if kind:
        try:
            return AddonKind(kind)
        except ValueError:
            logger.warning("unknown addon kind %r; inferring from options", kind)
    sizes = options.get("sizes") if isinstance(options, dict) else None
    if isinstance(sizes, list) and sizes:
        return AddonKind.SIZED
    if (category or "").lower() == "transportation":
        return AddonKind.TRANSPORT
    return AddonKind.SIMPLE


@dataclass(frozen=True)
class PackagePricing:
    standard: Decimal = ZERO
    early_bird: Decimal = ZERO
    early_bird_end: Optional[datetime] = None
    flash: Decimal = ZERO
    flash_start: Optional[datetime] = None
    flash_end: Optional[datetime] = None


@dataclass(frozen=True)
class AccommodationPricing:
    single: Decimal = ZERO
    double: Decimal = ZERO
    early_bird_single: Decimal = ZERO
    early_bird_double: Decimal = ZERO
    early_bird_end: Optional[datetime] = None


@dataclass(frozen=True)
class EventPricing:
    event_id: int
    name: str
    year: int
    registration_open: Optional[datetime] = None
    registration_close: Optional[datetime] = None
    workshop_standard: Decimal = ZERO
    workshop_early_bird: Decimal = ZERO
    workshop_early_bird_end: Optional[datetime] = None
    full: PackagePricing = PackagePricing()
    evening: PackagePricing = PackagePricing()
    accommodation: Dict[int, AccommodationPricing] = field(default_factory=dict)

    def registration_open_at(self, now: datetime) -> bool:
        if self.registration_open is not None and now < self.registration_open:
            return False
        if self.registration_close is not None and now > self.registration_close:
            return False
        return True


@dataclass(frozen=True)
class TableEntry:
    table_number: int
    price: Decimal
    early_bird_price: Decimal = ZERO
    early_bird_end: Optional[datetime] = None
    total_seats: int = 6
    occupied_seats: int = 0
    is_vip: bool = False

    def is_early_bird(self, now: datetime) -> bool:
        return early_bird_applies(self.early_bird_price, self.early_bird_end, now)

    def effective_price(self, now: datetime) -> Decimal:
        price = self.early_bird_price if self.is_early_bird(now) else self.price
        return max(ZERO, price)

    @property
    def available_seats(self) -> int:
        return max(0, self.total_seats - self.occupied_seats)


@dataclass(frozen=True)
class AddonEntry:
    code: str
    name: str
    price: Decimal
    kind: AddonKind = AddonKind.SIMPLE
    sizes: Tuple[str, ...] = ()
    category: str = ""


@dataclass(frozen=True)
class WorkshopEntry:
    workshop_id: int
    title: str
    price: Decimal
    capacity: int
    enrolled: int = 0
    date: Optional[datetime] = None
    time: str = ""

    @property
    def spots_left(self) -> int:
        return max(0, self.capacity - self.enrolled)

    @property
    def selectable(self) -> bool:
        return self.spots_left > 0


@dataclass(frozen=True)
class MilongaEntry:
    milonga_id: int
    name: str
    price: Decimal
    early_bird_price: Decimal = ZERO
    early_bird_end: Optional[datetime] = None

    def effective_price(self, now: datetime) -> Decimal:
        if early_bird_applies(self.early_bird_price, self.early_bird_end, now):
            return self.early_bird_price
        return self.price


@dataclass(frozen=True)
class CatalogSnapshot:
    event: Optional[EventPricing] = None
    tables: Dict[int, TableEntry] = field(default_factory=dict)
    addons: Dict[str, AddonEntry] = field(default_factory=dict)
    workshops: Dict[int, WorkshopEntry] = field(default_factory=dict)
    milongas: Dict[int, MilongaEntry] = field(default_factory=dict)
    loaded_at: Optional[datetime] = None
    version: int = 0

    def table(self, table_number: Optional[int]) -> Optional[TableEntry]:
        if table_number is None:
            return None
        return self.tables.get(table_number)

    def addon(self, code: Optional[str]) -> Optional[AddonEntry]:
        if not code:
            return None
        return self.addons.get(code)

    def workshop(self, workshop_id: int) -> Optional[WorkshopEntry]:
        return self.workshops.get(workshop_id)

    def milonga(self, milonga_id: int) -> Optional[MilongaEntry]:
        return self.milongas.get(milonga_id)


def _event_pricing(e: Event) -> EventPricing:
    return EventPricing(
        event_id=int(e.EventID),
        name=str(e.Name),
        year=int(e.Year),
        registration_open=e.RegistrationOpenDate,
        registration_close=e.RegistrationCloseDate,
        workshop_standard=to_money(e.WorkshopStandardPrice),
        workshop_early_bird=to_money(e.WorkshopEarlyBirdPrice),
        workshop_early_bird_end=e.WorkshopEarlyBirdEndDate,
        full=PackagePricing(
            standard=to_money(e.FullPackageStandardPrice),
            early_bird=to_money(e.FullPackageEarlyBirdPrice),
            early_bird_end=e.FullPackageEarlyBirdEndDate,
            flash=to_money(e.FullPackage24HourPrice),
            flash_start=e.FullPackage24HourStartDate,
            flash_end=e.FullPackage24HourEndDate,
        ),
        evening=PackagePricing(
            standard=to_money(e.EveningPackageStandardPrice),
            early_bird=to_money(e.EveningPackageEarlyBirdPrice),
            early_bird_end=e.EveningPackageEarlyBirdEndDate,
            flash=to_money(e.EveningPackage24HourPrice),
            flash_start=e.EveningPackage24HourStartDate,
            flash_end=e.EveningPackage24HourEndDate,
        ),
        accommodation={
            4: AccommodationPricing(
                single=to_money(e.Accommodation4NightsSinglePrice),
                double=to_money(e.Accommodation4NightsDoublePrice),
                early_bird_single=to_money(e.Accommodation4NightsEarlyBirdSinglePrice),
                early_bird_double=to_money(e.Accommodation4NightsEarlyBirdDoublePrice),
                early_bird_end=e.Accommodation4NightsEarlyBirdEndDate,
            ),
            3: AccommodationPricing(
                single=to_money(e.Accommodation3NightsSinglePrice),
                double=to_money(e.Accommodation3NightsDoublePrice),
                early_bird_single=to_money(e.Accommodation3NightsEarlyBirdSinglePrice),
                early_bird_double=to_money(e.Accommodation3NightsEarlyBirdDoublePrice),
                early_bird_end=e.Accommodation3NightsEarlyBirdEndDate,
            ),
        },
    )


def addon_entry(a: Addon) -> AddonEntry:
    options = a.Options if isinstance(a.Options, dict) else {}
    kind = resolve_addon_kind(a.Kind, options, a.Category)
    sizes: Tuple[str, ...] = ()
    if kind is AddonKind.SIZED:
        sizes = tuple(str(s) for s in (options.get("sizes") or []))
    return AddonEntry(
        code=str(a.Code),
        name=str(a.Name),
        price=to_money(a.Price),
        kind=kind,
        sizes=sizes,
        category=str(a.Category or ""),
    )


def table_entry(t: GalaTable) -> TableEntry:
    return TableEntry(
        table_number=int(t.TableNumber),
        price=to_money(t.Price),
        early_bird_price=to_money(t.EarlyBirdPrice),
        early_bird_end=t.EarlyBirdEndDate,
        total_seats=int(t.TotalSeats or 0),
        occupied_seats=int(t.OccupiedSeats or 0),
        is_vip=bool(t.IsVip),
    )


def workshop_entry(w: Workshop) -> WorkshopEntry:
    return WorkshopEntry(
        workshop_id=int(w.WorkshopID),
        title=str(w.Title),
        price=to_money(w.Price),
        capacity=int(w.Capacity or 0),
        enrolled=int(w.Enrolled or 0),
        date=w.Date,
        time=str(w.Time or ""),
    )


def milonga_entry(m: Milonga) -> MilongaEntry:
    return MilongaEntry(
        milonga_id=int(m.MilongaID),
        name=str(m.Name),
        price=to_money(m.Price),
        early_bird_price=to_money(m.EarlyBirdPrice),
        early_bird_end=m.EarlyBirdEndDate,
    )


def load_snapshot(db: Session, event_id: Optional[int] = None) -> CatalogSnapshot:
    """Build a snapshot for ``event_id`` (or the current event when None)."""
    if event_id is None:
        event = (
            db.query(Event)
            .filter(Event.IsCurrent == True, Event.IsActive == True)  # noqa: E712
            .first()
        )
    else:
        event = db.get(Event, event_id)
    if event is None:
        return CatalogSnapshot(loaded_at=utcnow())

    eid = event.EventID
    tables = (
        db.query(GalaTable)
        .filter(GalaTable.EventID == eid, GalaTable.IsActive == True)  # noqa: E712
        .all()
    )
    addons = (
        db.query(Addon)
        .filter(Addon.EventID == eid, Addon.IsActive == True)  # noqa: E712
        .all()
    )
    workshops = db.query(Workshop).filter(Workshop.EventID == eid).all()
    milongas = db.query(Milonga).filter(Milonga.EventID == eid).all()

    return CatalogSnapshot(
        event=_event_pricing(event),
        tables={int(t.TableNumber): table_entry(t) for t in tables},
        addons={str(a.Code): addon_entry(a) for a in addons},
        workshops={int(w.WorkshopID): workshop_entry(w) for w in workshops},
        milongas={int(m.MilongaID): milonga_entry(m) for m in milongas},
        loaded_at=utcnow(),
    )


CacheKey = Optional[int]
Listener = Callable[[CacheKey, CatalogSnapshot], None]


class CatalogCache:
    """Holds the latest snapshot per event and reloads it on interval.

    Admin writes call ``invalidate()`` so the next ``get()`` reloads. Every
    reload bumps ``version`` and notifies subscribers so derived totals can be
    recomputed.
    """

    def __init__(self, refresh_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.refresh_seconds = float(refresh_seconds)
        self._clock = clock
        self._entries: Dict[CacheKey, Tuple[float, CatalogSnapshot]] = {}
        self._listeners: List[Listener] = []
        self._version = 0
        self._lock = threading.Lock()

    def get(self, key: CacheKey, loader: Callable[[], CatalogSnapshot]) -> CatalogSnapshot:
        with self._lock:
            entry = self._entries.get(key)
        if entry is not None and (self._clock() - entry[0]) < self.refresh_seconds:
            return entry[1]
        return self.refresh(key, loader)

    def refresh(self, key: CacheKey, loader: Callable[[], CatalogSnapshot]) -> CatalogSnapshot:
        snapshot = loader()
        with self._lock:
            self._version += 1
            snapshot = replace(snapshot, version=self._version)
            self._entries[key] = (self._clock(), snapshot)
            listeners = list(self._listeners)
        logger.debug("catalog.refresh", extra={"cache_key": key, "version": snapshot.version})
        for listener in listeners:
            listener(key, snapshot)
        return snapshot

    def invalidate(self, key: CacheKey = None) -> None:
        """Drop one cached snapshot, or all of them when ``key`` is None."""
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe
