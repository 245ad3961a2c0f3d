"""
Modifier model.

A ``Modifier`` is one entry of the externally supplied modifier catalog. Leaf
modifiers have an empty ``recipe``; composite modifiers are crafted from the
modifiers listed in their recipe. Recipe order carries no meaning, so it is
stored as a ``frozenset``.

The catalog as a whole (edges, acyclicity) is checked by
``combo_roster.graph.modifiers.ModifierGraph``; this model only validates a
single record.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, field_serializer, model_validator


class Modifier(BaseModel):
    """A single modifier and its composition recipe.

    Attributes:
        id: Stable, externally assigned modifier id.
        name: Display name shown in pickers and chips.
        recipe: Ids of the component modifiers (empty for leaves).
    """

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    recipe: frozenset[int] = frozenset()

    @model_validator(mode="after")
    def validate_record(self) -> "Modifier":
        if not self.name.strip():
            raise ValueError(f"Modifier {self.id} has an empty name.")
        if self.id in self.recipe:
            raise ValueError(f"Modifier {self.id} ('{self.name}') lists itself in its recipe.")
        return self

    @field_serializer("recipe")
    def serialize_recipe(self, recipe: frozenset[int]) -> list[int]:
        return sorted(recipe)

    @property
    def is_leaf(self) -> bool:
        return not self.recipe
