"""
Unused-modifier projection.

A modifier is *used* when it lies in the recipe closure of any slot of any
roster combo. Everything else is *unused* and may serve as filler.

Forbidding is independent of this projection: a forbidden modifier stays in
the unused set (shown with a lock), it is only excluded from
``filler_modifier_ids``, which is what downstream automation consumes.

All functions here are read-only projections, except ``toggle_forbidden``,
which returns a new ``UserSettings``.
"""

from __future__ import annotations

from typing import Optional

from combo_roster.graph.closure import ClosureEngine
from combo_roster.graph.modifiers import sorted_modifier_ids
from combo_roster.models.settings import UserSettings


def used_modifier_ids(settings: UserSettings, engine: ClosureEngine) -> frozenset[int]:
    """Union of recipe closures over every slot of every roster combo."""
    used: set[int] = set()
    for labeled in settings.roster_combos():
        used |= engine.closure_of(labeled.combo)
    return frozenset(used)


def unused_modifier_set(settings: UserSettings, engine: ClosureEngine) -> frozenset[int]:
    """All modifier ids minus those used by the roster."""
    return engine.graph.ids - used_modifier_ids(settings, engine)


def unused_modifiers(settings: UserSettings, engine: ClosureEngine) -> list[int]:
    """Unused modifier ids ordered by display name for presentation."""
    return sorted_modifier_ids(engine.graph, unused_modifier_set(settings, engine))


def modifier_ids_used_by_dragged(
    settings: UserSettings,
    engine: ClosureEngine,
    dragged_combo_id: Optional[int],
) -> frozenset[int]:
    """Closure of the dragged combo's slots; empty when nothing is dragged.

    Used to dim the unused modifiers that dropping the combo into the roster
    would consume.
    """
    if dragged_combo_id is None:
        return frozenset()
    labeled = settings.find_combo(dragged_combo_id)
    if labeled is None:
        return frozenset()
    return engine.closure_of(labeled.combo)


def toggle_forbidden(settings: UserSettings, modifier_id: int) -> UserSettings:
    """Add ``modifier_id`` to the forbidden set, or remove it if present."""
    forbidden = settings.forbidden_modifier_ids
    updated = forbidden - {modifier_id} if modifier_id in forbidden else forbidden | {modifier_id}
    return settings.model_copy(update={"forbidden_modifier_ids": updated})


def filler_modifier_ids(settings: UserSettings, engine: ClosureEngine) -> frozenset[int]:
    """Unused modifiers that are not forbidden: the filler candidates."""
    return unused_modifier_set(settings, engine) - settings.forbidden_modifier_ids
