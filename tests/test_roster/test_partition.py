"""
Tests for roster/partition.py: RosterPartition move protocol and DragState.

Covers:
  - Seeding from settings: roster as-is, remaining catalog ids inactive
  - Same-list, same-index drop is a strict no-op (identity preserved)
  - Drop outside both lists (dest_list=None) is a no-op
  - Same-list reorder interprets dest_index after removal
  - Cross-list transfers in both directions, including emptying a list
  - Out-of-range source index raises IndexError
  - Reconcile after catalog add/remove
  - apply_to writes the active list into the roster
"""

import pytest

from combo_roster.models.settings import UserSettings
from combo_roster.roster.partition import DragState, RosterList, RosterPartition

ACTIVE = RosterList.ACTIVE
INACTIVE = RosterList.INACTIVE


class TestFromSettings:
    def test_seed(self, settings):
        partition = RosterPartition.from_settings(settings)
        assert partition.active == (3, 1)
        assert partition.inactive == (2,)

    def test_overlap_rejected(self):
        with pytest.raises(ValueError, match="both roster lists"):
            RosterPartition(active=(1,), inactive=(1,))


class TestMove:
    def test_same_slot_is_noop(self):
        partition = RosterPartition(active=(3, 1, 4), inactive=(2, 5))
        moved = partition.move(ACTIVE, 1, ACTIVE, 1)
        assert moved is partition
        assert moved.active == (3, 1, 4)
        assert moved.inactive == (2, 5)

    def test_drop_outside_is_noop(self):
        partition = RosterPartition(active=(3, 1), inactive=(2,))
        assert partition.move(ACTIVE, 0, None, 0) is partition

    def test_scenario_active_to_inactive_front(self):
        partition = RosterPartition(active=(3, 1), inactive=(2,))
        moved = partition.move(ACTIVE, 1, INACTIVE, 0)
        assert moved.active == (3,)
        assert moved.inactive == (1, 2)

    def test_reorder_down_uses_post_removal_index(self):
        partition = RosterPartition(active=(1, 2, 3, 4))
        moved = partition.move(ACTIVE, 0, ACTIVE, 2)
        assert moved.active == (2, 3, 1, 4)

    def test_reorder_up(self):
        partition = RosterPartition(active=(1, 2, 3, 4))
        moved = partition.move(ACTIVE, 3, ACTIVE, 0)
        assert moved.active == (4, 1, 2, 3)

    def test_reorder_to_end(self):
        partition = RosterPartition(active=(1, 2, 3))
        assert partition.move(ACTIVE, 0, ACTIVE, 2).active == (2, 3, 1)

    def test_inactive_to_active(self):
        partition = RosterPartition(active=(3, 1), inactive=(2,))
        moved = partition.move(INACTIVE, 0, ACTIVE, 0)
        assert moved.active == (2, 3, 1)
        assert moved.inactive == ()

    def test_moving_only_element_empties_source(self):
        partition = RosterPartition(active=(7,), inactive=(2, 5))
        moved = partition.move(ACTIVE, 0, INACTIVE, 1)
        assert moved.active == ()
        assert moved.inactive == (2, 7, 5)

    def test_reorder_inactive_leaves_active_alone(self):
        partition = RosterPartition(active=(3,), inactive=(1, 2))
        moved = partition.move(INACTIVE, 1, INACTIVE, 0)
        assert moved.inactive == (2, 1)
        assert moved.active == (3,)

    def test_dest_index_past_end_appends(self):
        partition = RosterPartition(active=(1,), inactive=(2, 3))
        assert partition.move(INACTIVE, 0, ACTIVE, 10).active == (1, 2)

    def test_source_index_out_of_range(self):
        partition = RosterPartition(active=(1,), inactive=(2,))
        with pytest.raises(IndexError):
            partition.move(ACTIVE, 5, INACTIVE, 0)

    def test_original_unchanged(self):
        partition = RosterPartition(active=(3, 1), inactive=(2,))
        partition.move(ACTIVE, 0, INACTIVE, 0)
        assert partition.active == (3, 1)
        assert partition.inactive == (2,)

    def test_union_preserved(self):
        partition = RosterPartition(active=(3, 1, 4), inactive=(2, 5))
        moved = partition.move(INACTIVE, 1, ACTIVE, 1).move(ACTIVE, 0, INACTIVE, 2)
        assert sorted(moved.active + moved.inactive) == [1, 2, 3, 4, 5]


class TestReconcile:
    def test_new_ids_join_inactive_end(self):
        partition = RosterPartition(active=(3,), inactive=(2, 1))
        assert partition.reconcile([1, 2, 3, 4]).inactive == (2, 1, 4)

    def test_removed_ids_leave_both_lists(self):
        partition = RosterPartition(active=(3, 1), inactive=(2,))
        reconciled = partition.reconcile([2, 3])
        assert reconciled.active == (3,)
        assert reconciled.inactive == (2,)


class TestApplyTo:
    def test_writes_roster(self, settings):
        partition = RosterPartition.from_settings(settings).move(INACTIVE, 0, ACTIVE, 0)
        updated = partition.apply_to(settings)
        assert updated.combo_roster == (2, 3, 1)
        assert settings.combo_roster == (3, 1)

    def test_unchanged_roster_returns_same_value(self, settings):
        partition = RosterPartition.from_settings(settings)
        assert partition.apply_to(settings) is settings

    def test_invalid_combo_can_enter_roster(self, settings):
        partition = RosterPartition.from_settings(settings).move(INACTIVE, 0, ACTIVE, 0)
        updated = partition.apply_to(settings)
        assert updated.combo_roster[0] == 2
        assert isinstance(updated, UserSettings)


class TestDragState:
    def test_begin_and_end(self):
        state = DragState().begin_drag(3)
        assert state.dragged_combo_id == 3
        assert state.is_dragging
        assert state.end_drag().dragged_combo_id is None
        assert not state.end_drag().is_dragging
