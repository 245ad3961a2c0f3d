"""
Closure engine: transitive recipe closure and tier of modifiers.

    used_modifier_closure(m) = {m} ∪ ⋃ used_modifier_closure(c) for c in recipe(m)
    tier(m)                  = 1                              if recipe(m) is empty
                             = 1 + max(tier(c) for c in recipe(m)) otherwise

Both functions are pure given a fixed ``ModifierGraph``. The engine owns one
memo table per function, keyed by modifier id, so a shared sub-component is
expanded once no matter how many parents, combos, or slots reach it.

Termination relies on the graph being acyclic, which ``ModifierGraph``
guarantees at construction. There is no visited-set: revisiting a shared
component through a second parent is expected and served from the memo.

Usage::

    engine = ClosureEngine(graph)
    engine.used_modifier_closure(31)   # frozenset({31, 4, 7})
    engine.tier(31)                    # 2
"""

from __future__ import annotations

from typing import Iterable

from combo_roster.graph.modifiers import ModifierGraph


class ClosureEngine:
    """Memoized closure / tier queries over one modifier graph.

    Attributes:
        graph: The modifier catalog the engine answers queries for.
    """

    def __init__(self, graph: ModifierGraph) -> None:
        self.graph = graph
        self._closure_memo: dict[int, frozenset[int]] = {}
        self._tier_memo: dict[int, int] = {}

    def used_modifier_closure(self, modifier_id: int) -> frozenset[int]:
        """Return ``modifier_id`` plus everything reachable through recipes.

        Raises:
            KeyError: If ``modifier_id`` is not in the graph.
        """
        cached = self._closure_memo.get(modifier_id)
        if cached is not None:
            return cached

        closure = {modifier_id}
        for component in self.graph.recipe(modifier_id):
            closure |= self.used_modifier_closure(component)

        result = frozenset(closure)
        self._closure_memo[modifier_id] = result
        return result

    def closure_of(self, modifier_ids: Iterable[int]) -> frozenset[int]:
        """Union of ``used_modifier_closure`` over several modifier ids."""
        result: set[int] = set()
        for modifier_id in modifier_ids:
            result |= self.used_modifier_closure(modifier_id)
        return frozenset(result)

    def components(self, modifier_id: int) -> frozenset[int]:
        """Every modifier consumed to craft ``modifier_id`` (closure minus itself)."""
        return self.used_modifier_closure(modifier_id) - {modifier_id}

    def tier(self, modifier_id: int) -> int:
        """Composition depth: 1 for leaves, 1 + deepest component otherwise.

        Raises:
            KeyError: If ``modifier_id`` is not in the graph.
        """
        cached = self._tier_memo.get(modifier_id)
        if cached is not None:
            return cached

        recipe = self.graph.recipe(modifier_id)
        result = 1 if not recipe else 1 + max(self.tier(c) for c in recipe)
        self._tier_memo[modifier_id] = result
        return result
