from decimal import Decimal

import pytest

from app.services.catalog import AddonEntry, AddonKind, CatalogSnapshot, WorkshopEntry
from app.services.selection import (
    SelectionError,
    SelectionState,
    WorkshopPreference,
    build_selection,
)

MUG = AddonEntry("mug", "Mug", Decimal("20"))
TSHIRT = AddonEntry("tshirt", "T-Shirt", Decimal("35"), AddonKind.SIZED, ("S", "M", "L"))
TRANSPORT = AddonEntry("desert-transport", "Transport", Decimal("75"), AddonKind.TRANSPORT)
WS1 = WorkshopEntry(1, "Musicality", Decimal("150"), capacity=10)
WS2 = WorkshopEntry(2, "Sacadas", Decimal("150"), capacity=10)
FULL_WS = WorkshopEntry(3, "Full", Decimal("150"), capacity=5, enrolled=5)


def _evening_with_table():
    state = SelectionState()
    state.set_role("leader")
    state.set_package("evening")
    state.select_table(5)
    return state


# --- sized add-ons ------------------------------------------------------------


def test_adding_same_size_twice_merges_entries():
    # Scenario D
    state = SelectionState()
    state.add_sized(TSHIRT, "M")
    state.add_sized(TSHIRT, "M")
    assert [(e.size, e.quantity) for e in state.sized_addons["tshirt"]] == [("M", 2)]


def test_decrementing_sized_entry_below_zero_removes_it():
    state = SelectionState()
    state.add_sized(TSHIRT, "S")
    state.add_sized(TSHIRT, "L")
    state.change_sized_quantity(TSHIRT, "S", -3)
    entries = state.sized_addons["tshirt"]
    assert [e.size for e in entries] == ["L"]
    assert all(e.quantity > 0 for e in entries)
    state.remove_sized(TSHIRT, "L")
    assert "tshirt" not in state.sized_addons


def test_unknown_size_is_rejected():
    with pytest.raises(SelectionError):
        SelectionState().add_sized(TSHIRT, "XXXL")


def test_flattened_addons_have_one_row_per_size():
    state = SelectionState()
    state.add_sized(TSHIRT, "S")
    state.add_sized(TSHIRT, "M", 2)
    rows = [(a.code, a.quantity, a.options) for a in state.addons]
    assert rows == [("tshirt", 1, {"size": "S"}), ("tshirt", 2, {"size": "M"})]


# --- simple add-ons -------------------------------------------------------------


def test_quantity_is_clamped_at_zero_and_zero_rows_dropped():
    state = SelectionState()
    state.change_quantity(MUG, 2)
    state.change_quantity(MUG, -5)
    assert state.regular_addons == []


def test_mutation_must_match_addon_kind():
    state = SelectionState()
    with pytest.raises(SelectionError):
        state.change_quantity(TSHIRT, 1)
    with pytest.raises(SelectionError):
        state.add_sized(MUG, "M")
    with pytest.raises(SelectionError):
        state.set_transport(MUG, True)


# --- transport ------------------------------------------------------------------


@pytest.mark.parametrize("role,expected", [("couple", 2), ("leader", 1), ("follower", 1)])
def test_transport_quantity_follows_role(role, expected):
    state = SelectionState()
    state.set_role(role)
    state.set_transport(TRANSPORT, True)
    assert state.transport_quantity("desert-transport") == expected


def test_transport_unchecked_is_zero_and_role_change_rederives():
    state = SelectionState()
    state.set_role("leader")
    state.set_transport(TRANSPORT, True)
    state.set_role("couple")
    assert state.regular_addons[0].quantity == 2
    state.set_transport(TRANSPORT, False)
    assert state.transport_quantity("desert-transport") == 0
    assert state.regular_addons == []


# --- workshop gating ------------------------------------------------------------


def test_declining_workshops_clears_selections_immediately():
    state = _evening_with_table()
    state.set_workshop_preference(True)
    state.add_workshop(WS1)
    state.add_workshop(WS2)
    state.set_workshop_preference(False)
    assert state.workshop_ids == []
    assert state.workshop_selections == []
    assert state.wants_workshops is False


def test_cannot_add_workshop_after_declining():
    state = _evening_with_table()
    state.set_workshop_preference(False)
    with pytest.raises(SelectionError):
        state.add_workshop(WS1)


def test_preference_requires_evening_package_and_table():
    state = SelectionState()
    state.set_package("evening")
    with pytest.raises(SelectionError):
        state.set_workshop_preference(True)
    state.set_package("full")
    state.select_table(5)
    with pytest.raises(SelectionError):
        state.set_workshop_preference(True)


def test_clearing_table_or_leaving_evening_resets_preference():
    state = _evening_with_table()
    state.set_workshop_preference(True)
    state.select_table(None)
    assert state.workshop_preference is WorkshopPreference.UNSET
    state.select_table(5)
    state.set_workshop_preference(False)
    state.set_package("custom")
    assert state.workshop_preference is WorkshopPreference.UNSET


def test_full_workshop_cannot_be_selected():
    state = SelectionState()
    with pytest.raises(SelectionError):
        state.add_workshop(FULL_WS)


def test_adding_workshop_twice_keeps_one():
    state = SelectionState()
    state.add_workshop(WS1)
    state.add_workshop(WS1)
    assert state.workshop_ids == [1]


# --- step guard -----------------------------------------------------------------


def test_gala_step_guard():
    state = SelectionState()
    assert state.can_advance_gala_step() is False

    state.set_package("custom")
    assert state.can_advance_gala_step() is True

    state.set_package("full")
    assert state.can_advance_gala_step() is False
    state.select_table(3)
    assert state.can_advance_gala_step() is True

    state.set_package("evening")
    assert state.can_advance_gala_step() is False
    state.set_workshop_preference(False)
    assert state.can_advance_gala_step() is True


def test_accommodation_nights_follow_package():
    state = SelectionState()
    state.set_package("premium-accommodation-4nights")
    assert state.accommodation_nights == 4
    state.set_package("custom")
    assert state.accommodation_nights is None


def test_invalid_role_and_package_rejected():
    state = SelectionState()
    with pytest.raises(SelectionError):
        state.set_role("soloist")
    with pytest.raises(SelectionError):
        state.set_package("platinum")


# --- payload replay ------------------------------------------------------------


def _snapshot():
    return CatalogSnapshot(
        addons={a.code: a for a in (MUG, TSHIRT, TRANSPORT)},
        workshops={w.workshop_id: w for w in (WS1, WS2, FULL_WS)},
    )


def test_build_selection_skips_unknown_codes_when_lenient():
    state = build_selection(
        _snapshot(),
        role="couple",
        package_type="custom",
        workshop_ids=[1, 99],
        addons=[
            {"code": "mug", "quantity": 2},
            {"code": "tshirt", "quantity": 1, "options": {"size": "M"}},
            {"code": "tshirt", "quantity": 1, "options": {"size": "M"}},
            {"code": "desert-transport", "quantity": 1},
            {"code": "ghost", "quantity": 4},
        ],
    )
    assert state.workshop_ids == [1]
    assert [(e.size, e.quantity) for e in state.sized_addons["tshirt"]] == [("M", 2)]
    assert {a.code: a.quantity for a in state.regular_addons} == {"mug": 2, "desert-transport": 2}


def test_build_selection_strict_rejects_unknown_entries():
    with pytest.raises(SelectionError):
        build_selection(_snapshot(), package_type="custom", addons=[{"code": "ghost", "quantity": 1}], strict=True)
    with pytest.raises(SelectionError):
        build_selection(_snapshot(), package_type="custom", workshop_ids=[42], strict=True)


@pytest.mark.parametrize("strict", [False, True])
def test_build_selection_decline_drops_stale_workshop_ids(strict):
    state = build_selection(
        _snapshot(),
        role="leader",
        package_type="evening",
        selected_table_number=5,
        wants_workshops=False,
        workshop_ids=[1, 2],
        strict=strict,
    )
    assert state.workshop_preference is WorkshopPreference.DECLINES
    assert state.workshop_ids == []
    assert state.can_advance_gala_step() is True


def test_build_selection_skips_full_workshop_when_lenient():
    state = build_selection(_snapshot(), package_type="custom", workshop_ids=[3, 1])
    assert state.workshop_ids == [1]


def test_build_selection_strict_rejects_full_workshop():
    with pytest.raises(SelectionError):
        build_selection(_snapshot(), package_type="custom", workshop_ids=[3], strict=True)


def test_sized_payload_without_size_is_rejected():
    with pytest.raises(SelectionError):
        build_selection(_snapshot(), addons=[{"code": "tshirt", "quantity": 1}])
