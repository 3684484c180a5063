"""In-progress registration owned by one session.

``SelectionState`` is mutated only through its methods. Add-on mutations are
dispatched to a strategy per ``AddonKind`` so a sized add-on cannot be edited
with a quantity stepper and a transport add-on never stores a quantity.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from app.services.catalog import AddonEntry, AddonKind, CatalogSnapshot, WorkshopEntry
from app.services.packages import (
    PackageType,
    Role,
    accommodation_nights,
    coerce_package,
    coerce_role,
    is_gala_included,
    seats_multiplier,
)

logger = logging.getLogger("pricing")


class SelectionError(ValueError):
    """Raised when a selection update is not allowed in the current state."""


class WorkshopPreference(str, Enum):
    UNSET = "unset"
    WANTS = "wants"
    DECLINES = "declines"


@dataclass
class AddonSelection:
    code: str
    quantity: int
    options: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code, "quantity": self.quantity, "options": dict(self.options)}


@dataclass
class SizedEntry:
    size: str
    quantity: int


@dataclass(frozen=True)
class WorkshopSelection:
    workshop_id: int
    title: str


class SimpleStrategy:
    kind = AddonKind.SIMPLE

    def change_quantity(self, state: "SelectionState", code: str, delta: int) -> None:
        quantity = max(0, state._quantities.get(code, 0) + int(delta))
        if quantity:
            state._quantities[code] = quantity
        else:
            state._quantities.pop(code, None)

    def selections(self, state: "SelectionState") -> List[AddonSelection]:
        return [AddonSelection(code, qty) for code, qty in state._quantities.items()]


class SizedStrategy:
    kind = AddonKind.SIZED

    def add(self, state: "SelectionState", entry: AddonEntry, size: str, quantity: int = 1) -> None:
        if entry.sizes and size not in entry.sizes:
            raise SelectionError(f"Size {size!r} is not offered for {entry.code}")
        self.change(state, entry.code, size, quantity)

    def change(self, state: "SelectionState", code: str, size: str, delta: int) -> None:
        sizes = state._sized.setdefault(code, {})
        quantity = max(0, sizes.get(size, 0) + int(delta))
        if quantity:
            sizes[size] = quantity
        else:
            sizes.pop(size, None)
        if not sizes:
            state._sized.pop(code, None)

    def remove(self, state: "SelectionState", code: str, size: str) -> None:
        sizes = state._sized.get(code)
        if sizes is None:
            return
        sizes.pop(size, None)
        if not sizes:
            state._sized.pop(code, None)

    def entries(self, state: "SelectionState") -> Dict[str, List[SizedEntry]]:
        return {
            code: [SizedEntry(size, qty) for size, qty in sizes.items()]
            for code, sizes in state._sized.items()
        }


class TransportStrategy:
    kind = AddonKind.TRANSPORT

    def set(self, state: "SelectionState", code: str, checked: bool) -> None:
        if checked:
            state._transport[code] = True
        else:
            state._transport.pop(code, None)

    def quantity(self, state: "SelectionState", code: str) -> int:
        if code not in state._transport:
            return 0
        return seats_multiplier(state.role)

    def selections(self, state: "SelectionState") -> List[AddonSelection]:
        return [AddonSelection(code, self.quantity(state, code)) for code in state._transport]


ADDON_STRATEGIES = {
    AddonKind.SIMPLE: SimpleStrategy(),
    AddonKind.SIZED: SizedStrategy(),
    AddonKind.TRANSPORT: TransportStrategy(),
}


@dataclass
class SelectionState:
    role: Optional[Role] = None
    package_type: Optional[PackageType] = None
    leader_info: Optional[Dict[str, Any]] = None
    follower_info: Optional[Dict[str, Any]] = None
    selected_table_number: Optional[int] = None
    workshop_preference: WorkshopPreference = WorkshopPreference.UNSET
    workshop_selections: List[WorkshopSelection] = field(default_factory=list)
    milonga_ids: List[int] = field(default_factory=list)
    _quantities: Dict[str, int] = field(default_factory=dict, repr=False)
    _sized: Dict[str, Dict[str, int]] = field(default_factory=dict, repr=False)
    _transport: Dict[str, bool] = field(default_factory=dict, repr=False)

    # --- role / package / table -------------------------------------------

    def set_role(self, role) -> None:
        value = coerce_role(role)
        if value is None:
            raise SelectionError(f"Unknown role: {role!r}")
        self.role = value

    def set_package(self, package_type) -> None:
        value = coerce_package(package_type)
        if value is None:
            raise SelectionError(f"Unknown package type: {package_type!r}")
        if value is not PackageType.EVENING:
            self.workshop_preference = WorkshopPreference.UNSET
        self.package_type = value

    def select_table(self, table_number: Optional[int]) -> None:
        self.selected_table_number = table_number
        if table_number is None:
            self.workshop_preference = WorkshopPreference.UNSET

    # --- workshops ----------------------------------------------------------

    @property
    def wants_workshops(self) -> Optional[bool]:
        if self.workshop_preference is WorkshopPreference.UNSET:
            return None
        return self.workshop_preference is WorkshopPreference.WANTS

    @property
    def workshop_ids(self) -> List[int]:
        return [w.workshop_id for w in self.workshop_selections]

    def set_workshop_preference(self, wants: bool) -> None:
        if self.package_type is not PackageType.EVENING:
            raise SelectionError("Workshop preference only applies to the evening package")
        if self.selected_table_number is None:
            raise SelectionError("Select a gala table before choosing workshops")
        if wants:
            self.workshop_preference = WorkshopPreference.WANTS
        else:
            self.workshop_preference = WorkshopPreference.DECLINES
            self.workshop_selections = []

    def add_workshop(self, workshop: WorkshopEntry) -> None:
        if self.workshop_preference is WorkshopPreference.DECLINES:
            raise SelectionError("Workshops were declined for this registration")
        if workshop.workshop_id in self.workshop_ids:
            return
        if not workshop.selectable:
            raise SelectionError(f"Workshop {workshop.title!r} is full")
        self.workshop_selections.append(WorkshopSelection(workshop.workshop_id, workshop.title))

    def remove_workshop(self, workshop_id: int) -> None:
        self.workshop_selections = [
            w for w in self.workshop_selections if w.workshop_id != workshop_id
        ]

    def set_milongas(self, milonga_ids: Iterable[int]) -> None:
        seen: List[int] = []
        for mid in map(int, milonga_ids):
            if mid not in seen:
                seen.append(mid)
        self.milonga_ids = seen

    # --- add-ons ------------------------------------------------------------

    def _strategy(self, entry: AddonEntry, kind: AddonKind):
        if entry.kind is not kind:
            raise SelectionError(f"Add-on {entry.code} is {entry.kind.value}, not {kind.value}")
        return ADDON_STRATEGIES[kind]

    def change_quantity(self, entry: AddonEntry, delta: int) -> None:
        self._strategy(entry, AddonKind.SIMPLE).change_quantity(self, entry.code, delta)

    def add_sized(self, entry: AddonEntry, size: str, quantity: int = 1) -> None:
        self._strategy(entry, AddonKind.SIZED).add(self, entry, size, quantity)

    def change_sized_quantity(self, entry: AddonEntry, size: str, delta: int) -> None:
        self._strategy(entry, AddonKind.SIZED).change(self, entry.code, size, delta)

    def remove_sized(self, entry: AddonEntry, size: str) -> None:
        self._strategy(entry, AddonKind.SIZED).remove(self, entry.code, size)

    def set_transport(self, entry: AddonEntry, checked: bool) -> None:
        self._strategy(entry, AddonKind.TRANSPORT).set(self, entry.code, checked)

    def transport_quantity(self, code: str) -> int:
        return ADDON_STRATEGIES[AddonKind.TRANSPORT].quantity(self, code)

    @property
    def regular_addons(self) -> List[AddonSelection]:
        """Quantity-based selections: simple add-ons plus checked transport."""
        return (
            ADDON_STRATEGIES[AddonKind.SIMPLE].selections(self)
            + ADDON_STRATEGIES[AddonKind.TRANSPORT].selections(self)
        )

    @property
    def sized_addons(self) -> Dict[str, List[SizedEntry]]:
        return ADDON_STRATEGIES[AddonKind.SIZED].entries(self)

    @property
    def addons(self) -> List[AddonSelection]:
        """Flattened list; one row per (code, size) for sized add-ons."""
        rows = list(self.regular_addons)
        for code, entries in self.sized_addons.items():
            rows.extend(AddonSelection(code, e.quantity, {"size": e.size}) for e in entries)
        return rows

    # --- derived ------------------------------------------------------------

    @property
    def accommodation_nights(self) -> Optional[int]:
        return accommodation_nights(self.package_type)

    def can_advance_gala_step(self) -> bool:
        if self.package_type is None:
            return False
        if self.package_type is PackageType.CUSTOM:
            return True
        if self.package_type is PackageType.EVENING:
            return (
                self.selected_table_number is not None
                and self.workshop_preference is not WorkshopPreference.UNSET
            )
        if is_gala_included(self.package_type):
            return self.selected_table_number is not None
        return True


def build_selection(
    snapshot: CatalogSnapshot,
    *,
    role=None,
    package_type=None,
    selected_table_number: Optional[int] = None,
    wants_workshops: Optional[bool] = None,
    workshop_ids: Sequence[int] = (),
    milonga_ids: Sequence[int] = (),
    addons: Sequence[Mapping[str, Any]] = (),
    leader_info: Optional[Dict[str, Any]] = None,
    follower_info: Optional[Dict[str, Any]] = None,
    strict: bool = False,
) -> SelectionState:
    """Replay a client payload onto a fresh SelectionState.

    Unknown add-on codes, workshops and milongas, and workshops that have
    filled up, are skipped unless ``strict`` is set, in which case they raise
    SelectionError. Workshop ids sent alongside a declined preference are
    always dropped.
    """
    state = SelectionState(leader_info=leader_info, follower_info=follower_info)
    if role is not None:
        state.set_role(role)
    if package_type is not None:
        state.set_package(package_type)
    state.select_table(selected_table_number)

    if (
        wants_workshops is not None
        and state.package_type is PackageType.EVENING
        and state.selected_table_number is not None
    ):
        state.set_workshop_preference(bool(wants_workshops))

    if state.workshop_preference is WorkshopPreference.DECLINES:
        # Declining clears workshops, so stale ids in the payload are dropped
        if workshop_ids:
            logger.info(
                "selection.workshops_declined",
                extra={"dropped_workshop_ids": [int(w) for w in workshop_ids]},
            )
        workshop_ids = ()

    for wid in workshop_ids:
        workshop = snapshot.workshop(int(wid))
        if workshop is None:
            if strict:
                raise SelectionError(f"Unknown workshop: {wid}")
            logger.warning("selection.unknown_workshop", extra={"workshop_id": wid})
            continue
        if not workshop.selectable and not strict:
            logger.warning("selection.workshop_full", extra={"workshop_id": workshop.workshop_id})
            continue
        state.add_workshop(workshop)

    known_milongas = []
    for mid in milonga_ids:
        if snapshot.milonga(int(mid)) is None:
            if strict:
                raise SelectionError(f"Unknown milonga: {mid}")
            continue
        known_milongas.append(int(mid))
    state.set_milongas(known_milongas)

    for raw in addons:
        code = raw.get("code")
        entry = snapshot.addon(code)
        if entry is None:
            if strict:
                raise SelectionError(f"Unknown add-on: {code}")
            logger.warning("selection.unknown_addon", extra={"addon_code": code})
            continue
        quantity = int(raw.get("quantity") or 0)
        options = raw.get("options") or {}
        if entry.kind is AddonKind.SIZED:
            size = options.get("size")
            if not size:
                raise SelectionError(f"A size is required for {entry.code}")
            if quantity > 0:
                state.add_sized(entry, str(size), quantity)
        elif entry.kind is AddonKind.TRANSPORT:
            state.set_transport(entry, quantity > 0)
        else:
            state.change_quantity(entry, quantity)
    return state
