"""
Combo catalog operations.

Each operation takes a ``UserSettings`` and returns a new one; nothing is
mutated in place. Catalog deletion and roster membership are changed by the
same call, so a roster id can never outlive its catalog entry.

Size limits are a caller concern: ``can_add_combo`` / ``can_remove_combo``
report whether the UI should offer the action. The core still treats
removal of the last catalog entry as a logged no-op so the catalog is never
emptied.
"""

from __future__ import annotations

import logging
from typing import Sequence

from combo_roster.models.settings import COMBO_SIZE, LabeledCombo, UserSettings

logger = logging.getLogger(__name__)

DEFAULT_COMBO: tuple[int, int, int, int] = (4, 5, 7, 2)


def next_combo_id(settings: UserSettings) -> int:
    """``1 + max(existing ids)``, or 1 for an empty catalog."""
    return 1 + max((c.id for c in settings.combo_catalog), default=0)


def add_combo(
    settings: UserSettings,
    template: Sequence[int] = DEFAULT_COMBO,
) -> UserSettings:
    """Append a new unlabeled combo built from ``template``.

    The new combo is not added to the roster.

    Raises:
        ValueError: If ``template`` does not hold exactly four ids.
    """
    if len(template) != COMBO_SIZE:
        raise ValueError(f"Combo template must hold {COMBO_SIZE} ids, got {len(template)}.")

    new_combo = LabeledCombo(id=next_combo_id(settings), label="", combo=tuple(template))
    return settings.model_copy(
        update={"combo_catalog": settings.combo_catalog + (new_combo,)}
    )


def remove_combo(settings: UserSettings, combo_id: int) -> UserSettings:
    """Delete ``combo_id`` from the catalog and, if present, from the roster.

    Unknown ids leave the settings unchanged. Removing the only remaining
    catalog entry is refused (logged, settings returned unchanged).
    """
    if settings.find_combo(combo_id) is None:
        return settings

    if len(settings.combo_catalog) == 1:
        logger.warning(
            "Refusing to remove combo %d: the catalog must keep at least one entry.",
            combo_id,
        )
        return settings

    return settings.model_copy(update={
        "combo_catalog": tuple(c for c in settings.combo_catalog if c.id != combo_id),
        "combo_roster": tuple(i for i in settings.combo_roster if i != combo_id),
    })


def set_label(settings: UserSettings, combo_id: int, label: str) -> UserSettings:
    """Replace the label of ``combo_id``. Content is not validated."""
    return settings.model_copy(update={
        "combo_catalog": tuple(
            c.model_copy(update={"label": label}) if c.id == combo_id else c
            for c in settings.combo_catalog
        ),
    })


def set_slot(
    settings: UserSettings,
    combo_id: int,
    slot_index: int,
    modifier_id: int,
) -> UserSettings:
    """Assign ``modifier_id`` to slot ``slot_index`` of ``combo_id``.

    Duplicates are accepted; the combo simply becomes invalid.

    Raises:
        IndexError: If ``slot_index`` is outside ``[0, 4)``.
    """
    if not 0 <= slot_index < COMBO_SIZE:
        raise IndexError(f"slot_index must be in [0, {COMBO_SIZE}), got {slot_index}.")

    def _assign(labeled: LabeledCombo) -> LabeledCombo:
        combo = list(labeled.combo)
        combo[slot_index] = modifier_id
        return labeled.model_copy(update={"combo": tuple(combo)})

    return settings.model_copy(update={
        "combo_catalog": tuple(
            _assign(c) if c.id == combo_id else c for c in settings.combo_catalog
        ),
    })


def is_valid(settings: UserSettings, combo_id: int) -> bool:
    """``True`` iff the combo's four slots are pairwise distinct.

    Raises:
        KeyError: If ``combo_id`` is not in the catalog.
    """
    labeled = settings.find_combo(combo_id)
    if labeled is None:
        raise KeyError(f"Unknown combo id {combo_id}.")
    return labeled.is_valid


def invalid_combo_ids(settings: UserSettings) -> list[int]:
    """Ids of every catalog combo with a repeated slot, in catalog order."""
    return [c.id for c in settings.combo_catalog if not c.is_valid]


def combo_label(labeled: LabeledCombo) -> str:
    """Display label: the user's label, or ``Unnamed #<id>`` when empty."""
    return labeled.display_label


def can_add_combo(settings: UserSettings, max_combos: int) -> bool:
    return len(settings.combo_catalog) < max_combos


def can_remove_combo(settings: UserSettings) -> bool:
    return len(settings.combo_catalog) > 1


def set_hotkey(settings: UserSettings, hotkey: str) -> UserSettings:
    """Store ``hotkey`` verbatim (e.g. ``"ctrl + shift + F3"``)."""
    return settings.model_copy(update={"hotkey": hotkey})


def toggle_show_tiers(settings: UserSettings) -> UserSettings:
    return settings.model_copy(update={"show_tiers": not settings.show_tiers})
