from datetime import datetime, timedelta
from decimal import Decimal

from app.services.catalog import (
    AccommodationPricing,
    AddonEntry,
    AddonKind,
    CatalogSnapshot,
    EventPricing,
    MilongaEntry,
    PackagePricing,
    TableEntry,
    WorkshopEntry,
)
from app.services.pricing import compute_quote, package_price
from app.services.selection import SelectionState

NOW = datetime(2026, 3, 1, 12, 0, 0)
LATER = NOW + timedelta(days=5)


def _event(**overrides):
    fields = dict(
        event_id=1,
        name="Festival",
        year=2026,
        full=PackagePricing(
            standard=Decimal("1000"),
            early_bird=Decimal("850"),
            early_bird_end=NOW + timedelta(days=2),
            flash=Decimal("700"),
            flash_start=NOW - timedelta(hours=1),
            flash_end=NOW + timedelta(hours=1),
        ),
        evening=PackagePricing(standard=Decimal("600")),
        accommodation={
            4: AccommodationPricing(
                single=Decimal("3000"),
                double=Decimal("5000"),
                early_bird_single=Decimal("2700"),
                early_bird_double=Decimal("4500"),
                early_bird_end=NOW + timedelta(days=1),
            ),
            3: AccommodationPricing(single=Decimal("2500"), double=Decimal("4200")),
        },
    )
    fields.update(overrides)
    return EventPricing(**fields)


def _snapshot(**overrides):
    fields = dict(
        event=_event(),
        tables={
            5: TableEntry(
                5, Decimal("500"), Decimal("400"), early_bird_end=NOW + timedelta(days=3)
            )
        },
        addons={
            "mug": AddonEntry("mug", "Mug", Decimal("20")),
            "tshirt": AddonEntry("tshirt", "T-Shirt", Decimal("35"), AddonKind.SIZED, ("M",)),
            "desert-transport": AddonEntry(
                "desert-transport", "Transport", Decimal("75"), AddonKind.TRANSPORT
            ),
        },
        workshops={
            i: WorkshopEntry(i, f"Workshop {i}", Decimal("150"), capacity=20) for i in range(1, 9)
        },
        milongas={1: MilongaEntry(1, "Opening", Decimal("80"))},
    )
    fields.update(overrides)
    return CatalogSnapshot(**fields)


def test_scenario_a_custom_without_table_or_addons():
    state = SelectionState()
    state.set_role("leader")
    state.set_package("custom")
    quote = compute_quote(_snapshot(), state, NOW)
    assert quote.total == package_price(_event(), "custom", "leader", NOW) == 0
    assert quote.seat_total == 0 and quote.addons_total == 0
    assert state.can_advance_gala_step() is True


def test_scenario_b_full_couple_table_is_bundled():
    state = SelectionState()
    state.set_role("couple")
    state.set_package("full")
    state.select_table(5)
    quote = compute_quote(_snapshot(), state, NOW)
    assert quote.seat_total == 0
    seat_line = [li for li in quote.line_items if li.kind == "seat"][0]
    assert seat_line.included is True and seat_line.amount == 0


def test_scenario_c_custom_couple_pays_early_bird_seats():
    state = SelectionState()
    state.set_role("couple")
    state.set_package("custom")
    state.select_table(5)
    quote = compute_quote(_snapshot(), state, NOW)
    assert quote.seat_total == Decimal("800.00")
    assert quote.total == Decimal("800.00")


def test_total_is_package_plus_seat_plus_addons():
    snap = _snapshot()
    state = SelectionState()
    state.set_role("couple")
    state.set_package("custom")
    state.select_table(5)
    state.change_quantity(snap.addons["mug"], 2)
    state.add_sized(snap.addons["tshirt"], "M")
    state.add_sized(snap.addons["tshirt"], "M")
    state.set_transport(snap.addons["desert-transport"], True)
    quote = compute_quote(snap, state, NOW)
    # 800 seats + 40 mugs + 70 shirts + 150 transport for two
    assert quote.addons_total == Decimal("260.00")
    assert quote.total == Decimal("1060.00")
    assert quote.total == quote.package_total + quote.seat_total + quote.addons_total


def test_flash_price_wins_then_early_bird_then_standard():
    event = _event()
    assert package_price(event, "full", "leader", NOW) == Decimal("700")
    assert package_price(event, "full", "couple", NOW) == Decimal("1400")
    after_flash = NOW + timedelta(hours=2)
    assert package_price(event, "full", "leader", after_flash) == Decimal("850")
    assert package_price(event, "full", "leader", LATER) == Decimal("1000")
    assert package_price(event, "evening", "couple", NOW) == Decimal("1200")


def test_accommodation_price_uses_single_or_double_without_multiplier():
    event = _event()
    assert package_price(event, "premium-accommodation-4nights", "follower", NOW) == Decimal("2700")
    assert package_price(event, "premium-accommodation-4nights", "couple", NOW) == Decimal("4500")
    assert package_price(event, "premium-accommodation-4nights", "couple", LATER) == Decimal("5000")
    assert package_price(event, "premium-accommodation-3nights", "leader", NOW) == Decimal("2500")


def test_no_event_prices_everything_at_zero():
    assert package_price(None, "full", "couple", NOW) == 0


def test_first_six_workshops_are_included_in_full_package():
    snap = _snapshot()
    state = SelectionState()
    state.set_role("couple")
    state.set_package("full")
    state.select_table(5)
    for i in range(1, 9):
        state.add_workshop(snap.workshops[i])
    quote = compute_quote(snap, state, LATER)
    # two extra workshops for a couple at 150 each per dancer
    assert quote.workshops_total == Decimal("600.00")
    lines = [li for li in quote.line_items if li.kind == "workshop"]
    assert [li.included for li in lines] == [True] * 6 + [False] * 2


def test_event_workshop_price_overrides_workshop_price():
    snap = _snapshot(
        event=_event(
            workshop_standard=Decimal("120"),
            workshop_early_bird=Decimal("100"),
            workshop_early_bird_end=NOW + timedelta(days=1),
        )
    )
    state = SelectionState()
    state.set_role("leader")
    state.set_package("custom")
    state.add_workshop(snap.workshops[1])
    assert compute_quote(snap, state, NOW).workshops_total == Decimal("100.00")
    assert compute_quote(snap, state, LATER).workshops_total == Decimal("120.00")


def test_milongas_charged_only_for_custom():
    snap = _snapshot()
    state = SelectionState()
    state.set_role("couple")
    state.set_package("custom")
    state.set_milongas([1])
    assert compute_quote(snap, state, NOW).milongas_total == Decimal("160.00")
    state.set_package("full")
    assert compute_quote(snap, state, NOW).milongas_total == 0


def test_total_rounds_half_up_to_cents():
    snap = _snapshot(addons={"pin": AddonEntry("pin", "Pin", Decimal("0.005"))})
    state = SelectionState()
    state.set_package("custom")
    state.change_quantity(snap.addons["pin"], 1)
    assert compute_quote(snap, state, NOW).total == Decimal("0.01")


def test_quote_serializes_with_camel_case_keys():
    state = SelectionState()
    state.set_role("leader")
    state.set_package("evening")
    data = compute_quote(_snapshot(), state, NOW).to_dict()
    assert data["totalAmount"] == 600.0
    assert data["lineItems"][0]["kind"] == "package"
