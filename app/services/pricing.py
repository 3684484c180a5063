"""Pure pricing functions.

Everything here folds (catalog snapshot, selection, now) into amounts. Lookups
that miss contribute 0; nothing in this module raises on bad catalog data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Mapping, Optional, Sequence

from app.core.clock import utcnow
from app.services.catalog import (
    ZERO,
    CatalogSnapshot,
    EventPricing,
    PackagePricing,
    early_bird_applies,
    within_window,
)
from app.services.packages import (
    INCLUDED_WORKSHOP_LIMIT,
    PackageType,
    Role,
    accommodation_nights,
    coerce_package,
    coerce_role,
    includes_workshops,
    is_gala_included,
    seats_multiplier,
)
from app.services.selection import AddonSelection, SelectionState, SizedEntry

logger = logging.getLogger("pricing")

CENT = Decimal("0.01")


def quantize(amount: Decimal) -> Decimal:
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class LineItem:
    kind: str  # package | seat | addon | workshop | milonga
    label: str
    amount: Decimal
    quantity: int = 1
    unit_price: Decimal = ZERO
    ref: Optional[str] = None
    included: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind,
            "label": self.label,
            "ref": self.ref,
            "quantity": self.quantity,
            "unitPrice": float(self.unit_price),
            "amount": float(self.amount),
            "included": self.included,
        }


@dataclass(frozen=True)
class Quote:
    line_items: List[LineItem] = field(default_factory=list)
    package_total: Decimal = ZERO
    seat_total: Decimal = ZERO
    addons_total: Decimal = ZERO
    workshops_total: Decimal = ZERO
    milongas_total: Decimal = ZERO
    total: Decimal = ZERO

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lineItems": [li.to_dict() for li in self.line_items],
            "packageTotal": float(self.package_total),
            "seatTotal": float(self.seat_total),
            "addonsTotal": float(self.addons_total),
            "workshopsTotal": float(self.workshops_total),
            "milongasTotal": float(self.milongas_total),
            "totalAmount": float(self.total),
        }


def _flat_package_price(pricing: PackagePricing, now: datetime) -> Decimal:
    if pricing.flash > 0 and within_window(pricing.flash_start, pricing.flash_end, now):
        return pricing.flash
    if early_bird_applies(pricing.early_bird, pricing.early_bird_end, now):
        return pricing.early_bird
    return pricing.standard


def package_price(event: Optional[EventPricing], package_type, role, now: datetime) -> Decimal:
    """Base package price for one registration (both dancers for couples)."""
    if event is None:
        return ZERO
    pkg = coerce_package(package_type)
    if pkg is PackageType.FULL:
        return _flat_package_price(event.full, now) * seats_multiplier(role)
    if pkg is PackageType.EVENING:
        return _flat_package_price(event.evening, now) * seats_multiplier(role)
    nights = accommodation_nights(pkg)
    if nights is not None:
        acc = event.accommodation.get(nights)
        if acc is None:
            return ZERO
        couple = coerce_role(role) is Role.COUPLE
        if early_bird_applies(
            acc.early_bird_double if couple else acc.early_bird_single, acc.early_bird_end, now
        ):
            return acc.early_bird_double if couple else acc.early_bird_single
        return acc.double if couple else acc.single
    return ZERO


def seat_charge(
    snapshot: CatalogSnapshot,
    table_number: Optional[int],
    role,
    package_type,
    now: datetime,
) -> Decimal:
    if table_number is None:
        return ZERO
    if is_gala_included(package_type) or coerce_package(package_type) is not PackageType.CUSTOM:
        return ZERO
    table = snapshot.table(table_number)
    if table is None:
        return ZERO
    return table.effective_price(now) * seats_multiplier(role)


def addons_total(
    snapshot: CatalogSnapshot,
    regular: Sequence[AddonSelection],
    sized: Mapping[str, Sequence[SizedEntry]],
) -> Decimal:
    total = ZERO
    for sel in regular:
        entry = snapshot.addon(sel.code)
        if entry is not None:
            total += entry.price * max(0, sel.quantity)
    for code, entries in sized.items():
        entry = snapshot.addon(code)
        if entry is None:
            continue
        for e in entries:
            total += entry.price * max(0, e.quantity)
    return total


def workshop_unit_price(snapshot: CatalogSnapshot, workshop_id: int, now: datetime) -> Decimal:
    event = snapshot.event
    if event is not None:
        if early_bird_applies(event.workshop_early_bird, event.workshop_early_bird_end, now):
            return event.workshop_early_bird
        if event.workshop_standard > 0:
            return event.workshop_standard
    workshop = snapshot.workshop(workshop_id)
    return workshop.price if workshop is not None else ZERO


def _addon_lines(snapshot: CatalogSnapshot, selection: SelectionState) -> List[LineItem]:
    lines = []
    for sel in selection.regular_addons:
        entry = snapshot.addon(sel.code)
        if entry is None or sel.quantity <= 0:
            continue
        lines.append(
            LineItem("addon", entry.name, entry.price * sel.quantity, sel.quantity, entry.price, entry.code)
        )
    for code, entries in selection.sized_addons.items():
        entry = snapshot.addon(code)
        if entry is None:
            continue
        for e in entries:
            lines.append(
                LineItem(
                    "addon",
                    f"{entry.name} ({e.size})",
                    entry.price * e.quantity,
                    e.quantity,
                    entry.price,
                    entry.code,
                )
            )
    return lines


def compute_quote(
    snapshot: CatalogSnapshot, selection: SelectionState, now: Optional[datetime] = None
) -> Quote:
    """Itemised total for ``selection`` against ``snapshot`` at ``now``."""
    now = now or utcnow()
    role = selection.role
    pkg = selection.package_type
    multiplier = seats_multiplier(role)
    lines: List[LineItem] = []

    base = package_price(snapshot.event, pkg, role, now)
    if pkg is not None:
        lines.append(LineItem("package", pkg.value, base, 1, base, pkg.value))

    seat = seat_charge(snapshot, selection.selected_table_number, role, pkg, now)
    if selection.selected_table_number is not None:
        table = snapshot.table(selection.selected_table_number)
        lines.append(
            LineItem(
                "seat",
                f"Gala table {selection.selected_table_number}",
                seat,
                multiplier,
                table.effective_price(now) if table is not None and seat > 0 else ZERO,
                str(selection.selected_table_number),
                included=is_gala_included(pkg),
            )
        )

    addon_lines = _addon_lines(snapshot, selection)
    lines.extend(addon_lines)
    addons = addons_total(snapshot, selection.regular_addons, selection.sized_addons)

    workshops = ZERO
    bundled = includes_workshops(pkg)
    for index, ws in enumerate(selection.workshop_selections):
        unit = workshop_unit_price(snapshot, ws.workshop_id, now)
        included = bundled and index < INCLUDED_WORKSHOP_LIMIT
        amount = ZERO if included else unit * multiplier
        workshops += amount
        lines.append(
            LineItem("workshop", ws.title, amount, multiplier, unit, str(ws.workshop_id), included)
        )

    milongas = ZERO
    if pkg is PackageType.CUSTOM:
        for mid in selection.milonga_ids:
            milonga = snapshot.milonga(mid)
            if milonga is None:
                continue
            unit = milonga.effective_price(now)
            amount = unit * multiplier
            milongas += amount
            lines.append(LineItem("milonga", milonga.name, amount, multiplier, unit, str(mid)))

    total = quantize(base + seat + addons + workshops + milongas)
    logger.debug(
        "pricing.quote",
        extra={"package": pkg.value if pkg else None, "total": str(total)},
    )
    return Quote(
        line_items=lines,
        package_total=quantize(base),
        seat_total=quantize(seat),
        addons_total=quantize(addons),
        workshops_total=quantize(workshops),
        milongas_total=quantize(milongas),
        total=total,
    )
