"""
Roster partition: the active roster and the inactive list as one value.

Every catalog combo id sits in exactly one of two ordered lists:

  ACTIVE   : the persisted ``combo_roster``; index 0 has the highest priority.
  INACTIVE : client-side display order for catalog combos not in the roster.
              Seeded as "catalog ids minus roster ids" (catalog order) and
              afterwards changed only by ``move`` and catalog reconciliation.

``move`` is a single splice-out / splice-in pair. For a same-list move the
destination index refers to the list *after* the removal. Dropping onto the
original slot, or outside any list (``dest_list=None``), returns the
partition unchanged.

Usage::

    partition = RosterPartition.from_settings(settings)
    partition = partition.move(RosterList.ACTIVE, 1, RosterList.INACTIVE, 0)
    settings = partition.apply_to(settings)
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Iterable, Optional

from combo_roster.models.settings import UserSettings


class RosterList(StrEnum):
    """Identifies one side of the partition (the drop target names)."""

    ACTIVE = "active"
    INACTIVE = "inactive"


@dataclass(frozen=True)
class RosterPartition:
    """Two disjoint ordered id lists covering the whole catalog.

    Attributes:
        active:   Roster ids in priority order.
        inactive: Non-roster catalog ids in display order.
    """

    active: tuple[int, ...] = ()
    inactive: tuple[int, ...] = ()

    def __post_init__(self) -> None:
        overlap = set(self.active) & set(self.inactive)
        if overlap:
            raise ValueError(f"Combo ids in both roster lists: {sorted(overlap)}.")
        if len(set(self.active)) != len(self.active) or len(set(self.inactive)) != len(self.inactive):
            raise ValueError("Roster lists must not contain duplicate ids.")

    @classmethod
    def from_settings(cls, settings: UserSettings) -> "RosterPartition":
        """Seed from settings: roster as-is, every other catalog id inactive."""
        roster = set(settings.combo_roster)
        return cls(
            active=settings.combo_roster,
            inactive=tuple(i for i in settings.catalog_ids if i not in roster),
        )

    def ids(self, which: RosterList) -> tuple[int, ...]:
        return self.active if which is RosterList.ACTIVE else self.inactive

    def move(
        self,
        source_list: RosterList,
        source_index: int,
        dest_list: Optional[RosterList],
        dest_index: int,
    ) -> "RosterPartition":
        """Move one id, reordering within a list or transferring between lists.

        Args:
            source_list: List the dragged id comes from.
            source_index: Position of the dragged id in ``source_list``.
            dest_list: Drop target, or ``None`` when dropped outside both.
            dest_index: Insert position in ``dest_list`` (after removal).

        Returns:
            The new partition; ``self`` for a cancelled drop.

        Raises:
            IndexError: If ``source_index`` is outside ``source_list``.
        """
        if dest_list is None:
            return self
        if dest_list == source_list and dest_index == source_index:
            return self

        source = list(self.ids(source_list))
        if not 0 <= source_index < len(source):
            raise IndexError(
                f"source_index {source_index} out of range for {source_list.value} "
                f"list of length {len(source)}."
            )
        moved = source.pop(source_index)

        dest = source if dest_list == source_list else list(self.ids(dest_list))
        dest.insert(dest_index, moved)

        lists = {source_list: source, dest_list: dest}
        return replace(
            self,
            active=tuple(lists.get(RosterList.ACTIVE, self.active)),
            inactive=tuple(lists.get(RosterList.INACTIVE, self.inactive)),
        )

    def reconcile(self, catalog_ids: Iterable[int]) -> "RosterPartition":
        """Align with a changed catalog.

        Ids no longer in the catalog are dropped from both lists; catalog ids
        in neither list are appended to the inactive list in catalog order.
        """
        catalog = list(catalog_ids)
        present = set(catalog)
        active = tuple(i for i in self.active if i in present)
        inactive = [i for i in self.inactive if i in present]
        known = set(active) | set(inactive)
        inactive.extend(i for i in catalog if i not in known)
        return RosterPartition(active=active, inactive=tuple(inactive))

    def apply_to(self, settings: UserSettings) -> UserSettings:
        """Write the active list back as ``combo_roster``."""
        if settings.combo_roster == self.active:
            return settings
        return settings.model_copy(update={"combo_roster": self.active})


@dataclass(frozen=True)
class DragState:
    """Which combo, if any, is currently being dragged.

    Only feeds the highlight projection; it never changes roster state.
    """

    dragged_combo_id: Optional[int] = None

    def begin_drag(self, combo_id: int) -> "DragState":
        return DragState(dragged_combo_id=combo_id)

    def end_drag(self) -> "DragState":
        return DragState()

    @property
    def is_dragging(self) -> bool:
        return self.dragged_combo_id is not None
