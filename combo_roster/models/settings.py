"""
User settings models: the persisted Configuration aggregate.

``UserSettings`` is the single unit that is loaded from and saved to the
settings file. It is an immutable value: every catalog / roster operation
returns a new instance (see ``combo_roster.catalog.operations`` and
``combo_roster.roster.partition``), which lets the persistence coordinator
compare "last flushed" against "current" by value.

Structural invariants enforced on construction (fatal at load):
  - Every combo has exactly ``COMBO_SIZE`` slots.
  - Catalog ids are unique.
  - Roster ids are unique and every roster id resolves in the catalog.

Duplicate modifier ids *within* a combo are allowed here. They make the combo
invalid for display/persistence purposes (``is_valid``) but never block
construction or editing.

Serialized shape (camelCase keys)::

    {
      "comboCatalog": [{"id": 1, "label": "", "combo": [4, 5, 7, 2]}],
      "comboRoster": [1],
      "forbiddenModifierIds": [12, 30],
      "hotkey": "alt + 1",
      "showTiers": false
    }
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_serializer, model_validator
from pydantic.alias_generators import to_camel

COMBO_SIZE = 4

Combo = tuple[int, int, int, int]


class LabeledCombo(BaseModel):
    """A labeled 4-slot combo in the user's catalog.

    Attributes:
        id: Catalog-unique id; new ids are ``1 + max(existing)``.
        label: Free text; empty labels display as ``Unnamed #<id>``.
        combo: Exactly four modifier ids. Slots are independently assignable
            and may repeat (which makes the combo invalid, not unloadable).
    """

    model_config = ConfigDict(frozen=True)

    id: int
    label: str = ""
    combo: Combo

    @property
    def is_valid(self) -> bool:
        """``True`` iff the four slots hold pairwise distinct modifier ids."""
        return len(set(self.combo)) == len(self.combo)

    @property
    def display_label(self) -> str:
        return self.label if self.label != "" else f"Unnamed #{self.id}"


class UserSettings(BaseModel):
    """The user's combo configuration.

    Attributes:
        combo_catalog: All combos, in catalog display order (not priority).
        combo_roster: Active combo ids; index 0 has the highest priority.
        forbidden_modifier_ids: Modifiers locked out of filler suggestions.
        hotkey: Activation hotkey string, stored verbatim.
        show_tiers: Display preference for showing modifier tiers.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    combo_catalog: tuple[LabeledCombo, ...] = ()
    combo_roster: tuple[int, ...] = ()
    forbidden_modifier_ids: frozenset[int] = frozenset()
    hotkey: str = "alt + 1"
    show_tiers: bool = False

    @model_validator(mode="after")
    def validate_catalog_and_roster(self) -> "UserSettings":
        catalog_ids = [c.id for c in self.combo_catalog]
        if len(set(catalog_ids)) != len(catalog_ids):
            dupes = sorted({i for i in catalog_ids if catalog_ids.count(i) > 1})
            raise ValueError(f"Duplicate combo ids in comboCatalog: {dupes}.")

        if len(set(self.combo_roster)) != len(self.combo_roster):
            raise ValueError(f"comboRoster contains duplicate ids: {list(self.combo_roster)}.")

        missing = [i for i in self.combo_roster if i not in set(catalog_ids)]
        if missing:
            raise ValueError(
                f"comboRoster references combo ids with no catalog entry: {missing}."
            )
        return self

    @field_serializer("forbidden_modifier_ids")
    def serialize_forbidden(self, ids: frozenset[int]) -> list[int]:
        return sorted(ids)

    # ── Lookups ──────────────────────────────────────────────────────────────

    @property
    def catalog_ids(self) -> tuple[int, ...]:
        return tuple(c.id for c in self.combo_catalog)

    def find_combo(self, combo_id: int) -> Optional[LabeledCombo]:
        """Return the catalog entry with ``combo_id``, or ``None``."""
        for labeled in self.combo_catalog:
            if labeled.id == combo_id:
                return labeled
        return None

    def roster_combos(self) -> list[LabeledCombo]:
        """Roster entries resolved to their catalog combos, in priority order."""
        by_id = {c.id: c for c in self.combo_catalog}
        return [by_id[combo_id] for combo_id in self.combo_roster]

    # ── Serialization ────────────────────────────────────────────────────────

    def to_document(self) -> dict[str, Any]:
        """Return the JSON-ready persisted document (camelCase keys)."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_document(cls, document: dict[str, Any]) -> "UserSettings":
        """Validate a persisted document into ``UserSettings``.

        Raises:
            pydantic.ValidationError: On any structural violation.
        """
        return cls.model_validate(document)
