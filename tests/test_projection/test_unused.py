"""
Tests for projection/unused.py: unused modifiers, drag highlight, forbidding.

Covers:
  - Unused set is exactly the complement of the roster's slot closures
  - Inactive combos do not consume modifiers
  - Presentation order is by display name
  - Forbidding never changes unused-set membership; filler excludes it
  - Drag highlight is the dragged combo's closure, empty when idle
"""

from combo_roster.models.settings import LabeledCombo, UserSettings
from combo_roster.projection.unused import (
    filler_modifier_ids,
    modifier_ids_used_by_dragged,
    toggle_forbidden,
    unused_modifier_set,
    unused_modifiers,
    used_modifier_ids,
)

from tests.conftest import ALPHA, BRAVO, CHARLIE, DELTA, ECHO, XRAY, YANKEE, ZULU


class TestUnusedModifiers:
    def test_complement_of_roster_closures(self, settings, engine):
        # Roster [3, 1]: Xray(+Alpha, Bravo), Echo, Delta, Charlie / Alpha..Delta
        assert used_modifier_ids(settings, engine) == {XRAY, ALPHA, BRAVO, CHARLIE, DELTA, ECHO}
        assert unused_modifier_set(settings, engine) == {YANKEE, ZULU}

    def test_matches_definition(self, settings, engine):
        expected = engine.graph.ids - engine.closure_of(
            m for combo in settings.roster_combos() for m in combo.combo
        )
        assert unused_modifier_set(settings, engine) == expected

    def test_inactive_combos_ignored(self, settings, engine):
        only_leaves = settings.model_copy(update={"combo_roster": (1,)})
        assert unused_modifier_set(only_leaves, engine) == {ECHO, XRAY, YANKEE, ZULU}

    def test_empty_roster_leaves_everything_unused(self, settings, engine):
        empty = settings.model_copy(update={"combo_roster": ()})
        assert unused_modifier_set(empty, engine) == engine.graph.ids

    def test_sorted_by_name(self, settings, engine):
        empty = settings.model_copy(update={"combo_roster": ()})
        names = [engine.graph.get(m).name for m in unused_modifiers(empty, engine)]
        assert names == sorted(names)

    def test_nested_composite_consumes_whole_tree(self, engine):
        settings = UserSettings(
            combo_catalog=(LabeledCombo(id=1, combo=(ZULU, DELTA, ECHO, ALPHA)),),
            combo_roster=(1,),
        )
        assert unused_modifier_set(settings, engine) == frozenset()


class TestForbidding:
    def test_toggle_adds_and_removes(self, settings):
        added = toggle_forbidden(settings, YANKEE)
        assert YANKEE in added.forbidden_modifier_ids
        removed = toggle_forbidden(added, YANKEE)
        assert removed.forbidden_modifier_ids == settings.forbidden_modifier_ids

    def test_forbidding_does_not_change_unused(self, settings, engine):
        before = unused_modifier_set(settings, engine)
        after = unused_modifier_set(toggle_forbidden(settings, ZULU), engine)
        assert before == after

    def test_filler_excludes_forbidden(self, settings, engine):
        forbidden = toggle_forbidden(settings, ZULU)
        assert filler_modifier_ids(settings, engine) == {YANKEE, ZULU}
        assert filler_modifier_ids(forbidden, engine) == {YANKEE}


class TestDragHighlight:
    def test_idle_is_empty(self, settings, engine):
        assert modifier_ids_used_by_dragged(settings, engine, None) == frozenset()

    def test_dragged_combo_closure(self, settings, engine):
        highlighted = modifier_ids_used_by_dragged(settings, engine, 3)
        assert highlighted == {XRAY, ALPHA, BRAVO, ECHO, DELTA, CHARLIE}

    def test_unknown_combo_is_empty(self, settings, engine):
        assert modifier_ids_used_by_dragged(settings, engine, 99) == frozenset()
