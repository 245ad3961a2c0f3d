"""
Settings session: the single owner of the live ``UserSettings``.

A session ties the pieces together for one editing surface:

  - the modifier graph and its ``ClosureEngine`` (read-only),
  - the current ``UserSettings`` value (replaced, never mutated),
  - the ``RosterPartition`` holding roster and inactive order,
  - the ``DragState`` used for highlight projection,
  - the ``PersistenceCoordinator`` notified after every change.

Opening a session validates the loaded settings against the graph; a combo
slot naming a modifier the graph does not know is a fatal
``SettingsIntegrityError``.

Usage::

    with SettingsSession.open(store, graph, coordinator) as session:
        session.add_combo()
        session.move(RosterList.INACTIVE, 0, RosterList.ACTIVE, 0)
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from combo_roster.catalog import operations as catalog_ops
from combo_roster.graph.closure import ClosureEngine
from combo_roster.graph.modifiers import ModifierGraph
from combo_roster.models.settings import UserSettings
from combo_roster.persistence.coordinator import PersistenceCoordinator
from combo_roster.persistence.store import JsonSettingsStore
from combo_roster.projection import unused as projection
from combo_roster.roster.partition import DragState, RosterList, RosterPartition

logger = logging.getLogger(__name__)


class SettingsIntegrityError(RuntimeError):
    """Raised when settings reference modifiers missing from the graph.

    Attributes:
        unknown_ids: Sorted modifier ids that could not be resolved.
    """

    def __init__(self, unknown_ids: list[int]) -> None:
        self.unknown_ids = unknown_ids
        super().__init__(
            f"Settings reference modifier ids not present in the modifier catalog: {unknown_ids}."
        )


def check_against_graph(settings: UserSettings, graph: ModifierGraph) -> None:
    """Raise ``SettingsIntegrityError`` if any combo slot is not in ``graph``."""
    unknown = sorted({
        modifier_id
        for labeled in settings.combo_catalog
        for modifier_id in labeled.combo
        if modifier_id not in graph
    })
    if unknown:
        raise SettingsIntegrityError(unknown)


class SettingsSession:
    """Live editing session over one ``UserSettings`` value.

    Args:
        settings: Initial settings (already validated).
        graph: Modifier catalog.
        coordinator: Receives every changed settings value.
        flush_on_close: Whether ``close()`` writes or discards a pending change.
    """

    def __init__(
        self,
        settings: UserSettings,
        graph: ModifierGraph,
        coordinator: PersistenceCoordinator,
        flush_on_close: bool = True,
    ) -> None:
        check_against_graph(settings, graph)
        self.engine = ClosureEngine(graph)
        self.coordinator = coordinator
        self.flush_on_close = flush_on_close
        self._settings = settings
        self._partition = RosterPartition.from_settings(settings)
        self._drag = DragState()
        self._closed = False
        coordinator.prime(settings)

    @classmethod
    def open(
        cls,
        store: JsonSettingsStore,
        graph: ModifierGraph,
        coordinator: PersistenceCoordinator,
        default_factory: Optional[Callable[[], UserSettings]] = None,
        flush_on_close: bool = True,
    ) -> "SettingsSession":
        """Load settings from ``store`` (creating defaults if given) and open a session."""
        if default_factory is not None:
            settings = store.load_or_create(default_factory)
        else:
            settings = store.load()
        return cls(settings, graph, coordinator, flush_on_close=flush_on_close)

    # ── Read side ─────────────────────────────────────────────────────────────

    @property
    def settings(self) -> UserSettings:
        return self._settings

    @property
    def partition(self) -> RosterPartition:
        return self._partition

    @property
    def graph(self) -> ModifierGraph:
        return self.engine.graph

    @property
    def dragged_combo_id(self) -> Optional[int]:
        return self._drag.dragged_combo_id

    def is_valid(self, combo_id: int) -> bool:
        return catalog_ops.is_valid(self._settings, combo_id)

    def unused_modifiers(self) -> list[int]:
        return projection.unused_modifiers(self._settings, self.engine)

    def filler_modifier_ids(self) -> frozenset[int]:
        return projection.filler_modifier_ids(self._settings, self.engine)

    def highlighted_modifier_ids(self) -> frozenset[int]:
        """Modifiers the currently dragged combo would consume."""
        return projection.modifier_ids_used_by_dragged(
            self._settings, self.engine, self._drag.dragged_combo_id
        )

    # ── Catalog ───────────────────────────────────────────────────────────────

    def add_combo(self, template: Sequence[int] = catalog_ops.DEFAULT_COMBO) -> int:
        """Append a new combo and return its id."""
        for modifier_id in template:
            self.graph.get(modifier_id)
        new_id = catalog_ops.next_combo_id(self._settings)
        self._commit(catalog_ops.add_combo(self._settings, template))
        return new_id

    def remove_combo(self, combo_id: int) -> None:
        self._commit(catalog_ops.remove_combo(self._settings, combo_id))

    def set_label(self, combo_id: int, label: str) -> None:
        self._commit(catalog_ops.set_label(self._settings, combo_id, label))

    def set_slot(self, combo_id: int, slot_index: int, modifier_id: int) -> None:
        self.graph.get(modifier_id)
        self._commit(catalog_ops.set_slot(self._settings, combo_id, slot_index, modifier_id))

    # ── Roster ────────────────────────────────────────────────────────────────

    def begin_drag(self, combo_id: int) -> None:
        self._drag = self._drag.begin_drag(combo_id)

    def end_drag(self) -> None:
        self._drag = self._drag.end_drag()

    def move(
        self,
        source_list: RosterList,
        source_index: int,
        dest_list: Optional[RosterList],
        dest_index: int,
    ) -> None:
        """Apply one drop; clears the drag state either way."""
        try:
            partition = self._partition.move(source_list, source_index, dest_list, dest_index)
        finally:
            self.end_drag()
        if partition is self._partition:
            return
        self._partition = partition
        self._commit(partition.apply_to(self._settings))

    # ── Preferences ───────────────────────────────────────────────────────────

    def toggle_forbidden(self, modifier_id: int) -> None:
        self.graph.get(modifier_id)
        self._commit(projection.toggle_forbidden(self._settings, modifier_id))

    def set_hotkey(self, hotkey: str) -> None:
        self._commit(catalog_ops.set_hotkey(self._settings, hotkey))

    def toggle_show_tiers(self) -> None:
        self._commit(catalog_ops.toggle_show_tiers(self._settings))

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def _commit(self, settings: UserSettings) -> None:
        if settings is self._settings:
            return
        if settings.catalog_ids != self._settings.catalog_ids:
            self._partition = self._partition.reconcile(settings.catalog_ids)
        self._settings = settings
        self.coordinator.notify(settings)

    def close(self) -> bool:
        """Flush or discard the pending write according to ``flush_on_close``."""
        if self._closed:
            return True
        self._closed = True
        return self.coordinator.close(flush=self.flush_on_close)

    def __enter__(self) -> "SettingsSession":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
