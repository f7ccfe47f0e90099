# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false

"""
Tests for the planning store: interventions, technicians, keyword
dictionaries and the technician filter.
"""

import datetime as dt

import pytest

from planning.core.errors import CapacityExceeded, InvalidTimeRange, NotFound
from planning.schemas.planning import InterventionDraft, MutationResult, MutationStatus
from planning.services.keyword_service import EQUIPMENT, TASK
from planning.utils.colors import PALETTE

DAY = "2025-01-15"


def _technicians(store, *names):
    return [store.add_technician(name).record for name in names]


def _draft(technician_ids, start="08:00", end="10:00", **extra):
    data = {
        "date": DAY,
        "startTime": start,
        "endTime": end,
        "technicianIds": list(technician_ids),
        "taskText": "Entretien chaudière",
    }
    data.update(extra)
    return data


# ============================================
# Intervention creation
# ============================================
class TestCreateIntervention:
    def test_create_returns_record(self, store, clock):
        alice, = _technicians(store, "Alice")
        result = store.create_intervention(_draft([alice.id]))
        assert result.ok
        intervention = result.record
        assert intervention.id
        assert intervention.date == dt.date(2025, 1, 15)
        assert intervention.technician_ids == [alice.id]
        assert intervention.created_at == intervention.updated_at == clock.now
        assert store.get_intervention(intervention.id) == intervention

    def test_accepts_draft_model(self, store):
        draft = InterventionDraft(date=dt.date(2025, 1, 15), start_time="08:00", end_time="09:00")
        assert store.create_intervention(draft).ok

    def test_ids_are_unique(self, store):
        first = store.create_intervention(_draft([])).record
        second = store.create_intervention(_draft([])).record
        assert first.id != second.id

    def test_four_technicians_allowed(self, store):
        ids = [t.id for t in _technicians(store, "A", "B", "C", "D")]
        assert store.create_intervention(_draft(ids)).ok

    def test_five_technicians_rejected(self, store):
        ids = [t.id for t in _technicians(store, "A", "B", "C", "D", "E")]
        result = store.create_intervention(_draft(ids))
        assert result.status is MutationStatus.CAPACITY_EXCEEDED
        assert store.interventions_by_date(DAY) == []
        assert all(store.get_technician(i).usage_count == 0 for i in ids)

    def test_duplicate_technician_ids_collapsed(self, store):
        alice, = _technicians(store, "Alice")
        result = store.create_intervention(_draft([alice.id, alice.id]))
        assert result.record.technician_ids == [alice.id]

    def test_cap_counts_distinct_technicians(self, store):
        a, b, c, d = (t.id for t in _technicians(store, "A", "B", "C", "D"))
        result = store.create_intervention(_draft([a, a, b, c, d]))
        assert result.ok
        assert result.record.technician_ids == [a, b, c, d]
        assert store.get_technician(a).usage_count == 1

    def test_end_before_start_rejected(self, store):
        result = store.create_intervention(_draft([], start="10:00", end="09:00"))
        assert result.status is MutationStatus.INVALID_TIME_RANGE
        assert store.interventions_by_date(DAY) == []

    def test_zero_length_rejected(self, store):
        result = store.create_intervention(_draft([], start="09:00", end="09:00"))
        assert result.status is MutationStatus.INVALID_TIME_RANGE

    def test_malformed_time_rejected_as_time_range(self, store):
        result = store.create_intervention(_draft([], start="8h00"))
        assert result.status is MutationStatus.INVALID_TIME_RANGE

    @pytest.mark.parametrize(
        "start, end",
        [("08:07", "09:13"), ("23:00", "25:00"), ("23:00", "99:99"), ("05:30", "07:00"),
         ("19:00", "20:30")],
    )
    def test_time_off_the_slot_grid_rejected(self, store, start, end):
        result = store.create_intervention(_draft([], start=start, end=end))
        assert result.status is MutationStatus.INVALID_TIME_RANGE
        assert store.interventions_by_date(DAY) == []

    def test_window_bounds_accepted(self, store):
        assert store.create_intervention(_draft([], start="06:00", end="20:00")).ok

    def test_malformed_date_rejected_as_input(self, store):
        result = store.create_intervention(_draft([], date="2025-13-45"))
        assert result.status is MutationStatus.INVALID_INPUT

    def test_unknown_technician_id_tolerated(self, store):
        result = store.create_intervention(_draft(["ghost"]))
        assert result.ok
        assert store.get_technician("ghost") is None


# ============================================
# Usage counters
# ============================================
class TestUsageCounters:
    def test_create_increments_each_technician(self, store):
        alice, bob = _technicians(store, "Alice", "Bob")
        store.create_intervention(_draft([alice.id, bob.id]))
        store.create_intervention(_draft([alice.id]))
        assert store.get_technician(alice.id).usage_count == 2
        assert store.get_technician(bob.id).usage_count == 1

    def test_task_text_becomes_keyword(self, store):
        store.create_intervention(_draft([], taskText="Fuite"))
        store.create_intervention(_draft([], taskText="fuite"))
        matches = [k for k in store.all_keywords(TASK) if k.text.lower() == "fuite"]
        assert len(matches) == 1
        assert matches[0].usage_count == 2
        assert matches[0].is_default is False

    def test_equipment_reuses_default_entry(self, store):
        store.create_intervention(_draft([], equipment="chauffe-eau"))
        keyword = store.equipment_keywords.get_or_create("Chauffe-eau")
        assert keyword.id == "equip-1"
        assert keyword.usage_count == 1

    def test_blank_equipment_creates_nothing(self, store):
        before = len(store.all_keywords(EQUIPMENT))
        store.create_intervention(_draft([], equipment="   "))
        assert len(store.all_keywords(EQUIPMENT)) == before

    def test_update_does_not_touch_counters(self, store):
        alice, bob = _technicians(store, "Alice", "Bob")
        intervention = store.create_intervention(_draft([alice.id])).record
        store.update_intervention(intervention.id, {"technicianIds": [bob.id]})
        assert store.get_technician(alice.id).usage_count == 1
        assert store.get_technician(bob.id).usage_count == 0

    def test_delete_does_not_decrement(self, store):
        alice, = _technicians(store, "Alice")
        intervention = store.create_intervention(_draft([alice.id])).record
        store.delete_intervention(intervention.id)
        assert store.get_technician(alice.id).usage_count == 1


# ============================================
# Intervention update / delete
# ============================================
class TestUpdateIntervention:
    def test_shallow_merge(self, store):
        intervention = store.create_intervention(_draft([], notes="Code 1234")).record
        result = store.update_intervention(intervention.id, {"address": "3 rue Haute"})
        assert result.ok
        assert result.record.address == "3 rue Haute"
        assert result.record.notes == "Code 1234"
        assert result.record.updated_at > intervention.updated_at
        assert result.record.created_at == intervention.created_at

    def test_unknown_id(self, store):
        result = store.update_intervention("missing", {"notes": "x"})
        assert result.status is MutationStatus.NOT_FOUND

    def test_capacity_checked_on_update(self, store):
        intervention = store.create_intervention(_draft(["a"])).record
        result = store.update_intervention(
            intervention.id, {"technicianIds": ["a", "b", "c", "d", "e"]}
        )
        assert result.status is MutationStatus.CAPACITY_EXCEEDED
        assert store.get_intervention(intervention.id).technician_ids == ["a"]

    def test_new_end_before_existing_start_rejected(self, store):
        intervention = store.create_intervention(_draft([], start="08:00", end="10:00")).record
        result = store.update_intervention(intervention.id, {"endTime": "07:30"})
        assert result.status is MutationStatus.INVALID_TIME_RANGE
        assert store.get_intervention(intervention.id).end_time == "10:00"

    def test_off_grid_time_rejected_on_update(self, store):
        intervention = store.create_intervention(_draft([], start="08:00", end="10:00")).record
        result = store.update_intervention(intervention.id, {"endTime": "10:15"})
        assert result.status is MutationStatus.INVALID_TIME_RANGE
        assert store.get_intervention(intervention.id).end_time == "10:00"

    def test_partial_time_change(self, store):
        intervention = store.create_intervention(_draft([], start="08:00", end="10:00")).record
        result = store.update_intervention(intervention.id, {"startTime": "09:00"})
        assert result.ok
        assert (result.record.start_time, result.record.end_time) == ("09:00", "10:00")

    def test_required_field_cannot_be_blanked(self, store):
        intervention = store.create_intervention(_draft([])).record
        result = store.update_intervention(intervention.id, {"date": None, "notes": "ok"})
        assert result.ok
        assert result.record.date == intervention.date

    def test_delete(self, store):
        intervention = store.create_intervention(_draft([])).record
        assert store.delete_intervention(intervention.id).ok
        assert store.get_intervention(intervention.id) is None

    def test_delete_unknown(self, store):
        assert store.delete_intervention("missing").status is MutationStatus.NOT_FOUND


# ============================================
# Reassign / duplicate / attachments
# ============================================
class TestReassign:
    @pytest.fixture
    def team(self, store):
        return [t.id for t in _technicians(store, "A", "B", "C")]

    def test_already_primary_keeps_order(self, store, team):
        a, b, _ = team
        intervention = store.create_intervention(_draft([a, b])).record
        result = store.reassign_intervention(intervention.id, a, "2025-01-16")
        assert result.record.technician_ids == [a, b]
        assert result.record.date == dt.date(2025, 1, 16)

    def test_co_worker_promoted(self, store, team):
        a, b, c = team
        intervention = store.create_intervention(_draft([a, b, c])).record
        result = store.reassign_intervention(intervention.id, c, DAY)
        assert result.record.technician_ids == [c, a, b]

    def test_outsider_replaces_primary(self, store, team):
        a, b, c = team
        intervention = store.create_intervention(_draft([a, b])).record
        result = store.reassign_intervention(intervention.id, c, DAY)
        assert result.record.technician_ids == [c, b]

    def test_unassigned_intervention_gets_technician(self, store, team):
        a = team[0]
        intervention = store.create_intervention(_draft([])).record
        result = store.reassign_intervention(intervention.id, a, DAY)
        assert result.record.technician_ids == [a]

    def test_unknown_intervention(self, store, team):
        result = store.reassign_intervention("missing", team[0], DAY)
        assert result.status is MutationStatus.NOT_FOUND


class TestDuplicate:
    def test_copy_on_other_day(self, store):
        alice, = _technicians(store, "Alice")
        source = store.create_intervention(_draft([alice.id], notes="Digicode 42")).record
        store.attach_document(source.id, "https://files.example/doc.pdf", "devis.pdf")
        result = store.duplicate_intervention(source.id, "2025-01-20")
        copy = result.record
        assert result.ok
        assert copy.id != source.id
        assert copy.date == dt.date(2025, 1, 20)
        assert copy.notes == "Digicode 42"
        assert copy.pdf_url is None
        assert store.get_technician(alice.id).usage_count == 2

    def test_copy_same_day(self, store):
        source = store.create_intervention(_draft([])).record
        copy = store.duplicate_intervention(source.id).record
        assert copy.date == source.date
        assert len(store.interventions_by_date(DAY)) == 2

    def test_unknown_source(self, store):
        assert store.duplicate_intervention("missing").status is MutationStatus.NOT_FOUND


class TestAttachments:
    def test_attach_then_detach(self, store):
        intervention = store.create_intervention(_draft([])).record
        attached = store.attach_document(intervention.id, "https://files.example/a.pdf", "a.pdf")
        assert attached.record.pdf_url == "https://files.example/a.pdf"
        assert attached.record.pdf_name == "a.pdf"
        detached = store.detach_document(intervention.id)
        assert detached.record.pdf_url is None
        assert detached.record.pdf_name is None

    def test_attach_unknown(self, store):
        result = store.attach_document("missing", "u", "n")
        assert result.status is MutationStatus.NOT_FOUND


# ============================================
# Technicians
# ============================================
class TestTechnicians:
    def test_add_with_palette_color(self, store):
        result = store.add_technician("Alice", "#1e88e5")
        assert result.ok
        assert result.record.color == "#1E88E5"
        assert result.record.is_active is True
        assert result.record.usage_count == 0

    def test_off_palette_color_replaced(self, store):
        result = store.add_technician("Alice", "#123456")
        assert result.record.color in PALETTE

    def test_least_used_color_picked(self, store):
        store.add_technician("A", "#E53935")
        store.add_technician("B", "#E53935")
        assert store.add_technician("C").record.color == "#D81B60"

    def test_every_color_stays_in_palette(self, store):
        for index in range(15):
            store.add_technician(f"Tech {index}", "not-a-color")
        assert all(t.color in PALETTE for t in store.active_technicians())

    def test_name_dedup_case_insensitive(self, store):
        first = store.add_technician("Alice", "#43A047").record
        again = store.add_technician("  alice ", "#FB8C00")
        assert again.ok
        assert again.record.id == first.id
        assert again.record.color == "#43A047"
        assert len(store.active_technicians()) == 1

    def test_empty_name_rejected(self, store):
        assert store.add_technician("   ").status is MutationStatus.INVALID_INPUT

    def test_get_or_create(self, store):
        first = store.get_or_create_technician("Marc")
        assert store.get_or_create_technician("MARC").id == first.id

    def test_update_color(self, store):
        alice = store.add_technician("Alice").record
        result = store.update_technician(alice.id, color="#fdd835")
        assert result.record.color == "#FDD835"
        assert result.record.updated_at > alice.updated_at

    def test_update_invalid_color(self, store):
        alice = store.add_technician("Alice", "#E53935").record
        result = store.update_technician(alice.id, color="#000000")
        assert result.status is MutationStatus.INVALID_COLOR
        assert store.get_technician(alice.id).color == "#E53935"

    def test_rename_onto_other_technician(self, store):
        alice, bob = _technicians(store, "Alice", "Bob")
        result = store.update_technician(bob.id, name="ALICE")
        assert result.status is MutationStatus.DUPLICATE_NAME
        assert store.get_technician(bob.id).name == "Bob"

    def test_rename_own_case(self, store):
        alice = store.add_technician("alice").record
        assert store.update_technician(alice.id, name="Alice").record.name == "Alice"

    def test_update_unknown(self, store):
        assert store.update_technician("missing", name="X").status is MutationStatus.NOT_FOUND

    def test_deactivate_and_reactivate(self, store):
        alice, bob = _technicians(store, "Alice", "Bob")
        assert store.deactivate_technician(alice.id).ok
        assert [t.id for t in store.active_technicians()] == [bob.id]
        assert store.get_technician(alice.id) is not None
        assert store.reactivate_technician(alice.id).record.is_active is True

    def test_deactivate_unknown(self, store):
        assert store.deactivate_technician("missing").status is MutationStatus.NOT_FOUND

    def test_increment_usage_unknown_ignored(self, store):
        store.increment_technician_usage("missing")

    def test_check_name(self, store):
        alice = store.add_technician("Alice").record
        clash = store.check_technician_name("alice")
        assert clash.status is MutationStatus.DUPLICATE_NAME
        assert clash.record.id == alice.id
        assert store.check_technician_name("Bob").ok


# ============================================
# Keyword dictionaries
# ============================================
class TestKeywords:
    def test_seeded_on_start(self, store):
        assert len(store.all_keywords(TASK)) == 8
        assert len(store.all_keywords(EQUIPMENT)) == 8
        assert all(k.is_default for k in store.all_keywords(TASK))

    def test_add_normalizes_shortcut(self, store):
        keyword = store.add_task_keyword("Ramonage", " ram ").record
        assert keyword.shortcut == "RAM"
        assert keyword.usage_count == 0
        assert keyword.is_default is False

    def test_add_existing_returns_it(self, store):
        result = store.add_task_keyword("réparation FUITE", "X")
        assert result.ok
        assert result.record.id == "default-2"
        assert result.record.shortcut == "RF"

    def test_add_empty_rejected(self, store):
        assert store.add_equipment_keyword("  ").status is MutationStatus.INVALID_INPUT

    def test_update_without_shortcut_keeps_it(self, store):
        result = store.update_task_keyword("default-1", text="Pose chauffe-eau")
        assert result.record.text == "Pose chauffe-eau"
        assert result.record.shortcut == "ICE"

    def test_empty_shortcut_does_not_clear(self, store):
        result = store.update_task_keyword("default-1", shortcut="")
        assert result.record.shortcut == "ICE"

    def test_update_shortcut(self, store):
        result = store.update_equipment_keyword("equip-2", shortcut="rd")
        assert result.record.shortcut == "RD"

    def test_rename_onto_other_entry(self, store):
        result = store.update_task_keyword("default-1", text="mise en service")
        assert result.status is MutationStatus.DUPLICATE_TEXT
        assert store.task_keywords.get_or_create("Installation chauffe-eau").id == "default-1"

    def test_update_unknown(self, store):
        assert store.update_task_keyword("missing", text="x").status is MutationStatus.NOT_FOUND

    def test_delete(self, store):
        assert store.delete_equipment_keyword("equip-8").ok
        assert "equip-8" not in {k.id for k in store.all_keywords(EQUIPMENT)}
        assert store.delete_task_keyword("missing").status is MutationStatus.NOT_FOUND

    def test_get_or_create_is_idempotent_and_does_not_count(self, store):
        first = store.get_or_create_task_keyword("Fuite")
        second = store.get_or_create_task_keyword(" fuite ")
        assert first.id == second.id
        assert second.usage_count == 0
        assert len(store.all_keywords(TASK)) == 9

    def test_increment_usage(self, store):
        store.increment_keyword_usage(EQUIPMENT, "equip-3")
        store.increment_keyword_usage(EQUIPMENT, "equip-3")
        assert store.top_keywords(EQUIPMENT, 1)[0].id == "equip-3"

    def test_check_text(self, store):
        assert store.check_keyword_text(TASK, "diagnostic PANNE").status is MutationStatus.DUPLICATE_TEXT
        assert store.check_keyword_text(TASK, "Nouveau").ok

    def test_unknown_kind(self, store):
        with pytest.raises(ValueError):
            store.keywords("tools")


# ============================================
# Technician filter
# ============================================
class TestTechnicianFilter:
    def test_starts_empty(self, store):
        assert store.selected_technician_filters == []

    def test_toggle(self, store):
        assert store.toggle_technician_filter("a") == ["a"]
        assert store.toggle_technician_filter("b") == ["a", "b"]
        assert store.toggle_technician_filter("a") == ["b"]

    def test_set_dedups(self, store):
        assert store.set_technician_filters(["a", "b", "a"]) == ["a", "b"]

    def test_clear(self, store):
        store.set_technician_filters(["a"])
        assert store.clear_technician_filters() == []
        assert store.selected_technician_filters == []

    def test_deactivation_leaves_selection(self, store):
        alice, bob = _technicians(store, "Alice", "Bob")
        store.set_technician_filters([alice.id, bob.id])
        store.deactivate_technician(alice.id)
        assert store.selected_technician_filters == [bob.id]

    def test_returned_list_is_a_copy(self, store):
        store.set_technician_filters(["a"])
        store.selected_technician_filters.append("b")
        assert store.selected_technician_filters == ["a"]


# ============================================
# Mutation results
# ============================================
class TestMutationResult:
    def test_raise_for_status_passthrough(self):
        result = MutationResult.accepted("record")
        assert result.raise_for_status() is result

    def test_raise_capacity(self):
        result = MutationResult.rejected(MutationStatus.CAPACITY_EXCEEDED, "too many")
        with pytest.raises(CapacityExceeded, match="too many"):
            result.raise_for_status()

    def test_raise_time_range(self, store):
        result = store.create_intervention(_draft([], start="10:00", end="09:00"))
        with pytest.raises(InvalidTimeRange):
            result.raise_for_status()

    def test_not_found_is_a_key_error(self, store):
        with pytest.raises(KeyError):
            store.delete_intervention("missing").raise_for_status()
        with pytest.raises(NotFound):
            store.delete_intervention("missing").raise_for_status()
