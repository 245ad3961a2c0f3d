"""
Tests for graph/closure.py: ClosureEngine closure and tier.

Covers:
  - Leaf tier is 1; composite tier is 1 + deepest component
  - Every modifier is in its own closure
  - Shared components appear identically in every parent's closure
  - Memoization: a shared component's recipe is expanded once
  - closure_of / components helpers
  - Unknown ids raise KeyError
"""

import pytest

from combo_roster.graph.closure import ClosureEngine
from combo_roster.graph.modifiers import ModifierGraph

from tests.conftest import ALPHA, BRAVO, CHARLIE, DELTA, ECHO, XRAY, YANKEE, ZULU


class TestTier:
    def test_leaf_is_tier_one(self, engine):
        for leaf in (ALPHA, BRAVO, CHARLIE, DELTA, ECHO):
            assert engine.tier(leaf) == 1

    def test_two_leaf_recipe_is_tier_two(self, engine):
        assert engine.tier(XRAY) == 2

    def test_nested_composite(self, engine):
        assert engine.tier(ZULU) == 3

    def test_tier_one_iff_empty_recipe(self, engine, graph):
        for modifier in graph:
            assert engine.tier(modifier.id) >= 1
            assert (engine.tier(modifier.id) == 1) == modifier.is_leaf

    def test_tier_uses_deepest_branch(self):
        graph = ModifierGraph.from_records([
            {"id": 1, "name": "Leaf", "recipe": []},
            {"id": 2, "name": "Mid", "recipe": [1]},
            {"id": 3, "name": "Top", "recipe": [1, 2]},
        ])
        assert ClosureEngine(graph).tier(3) == 3

    def test_unknown_id_raises(self, engine):
        with pytest.raises(KeyError):
            engine.tier(999)


class TestClosure:
    def test_scenario_two_leaf_recipe(self, engine):
        assert engine.used_modifier_closure(XRAY) == {XRAY, ALPHA, BRAVO}

    def test_leaf_closure_is_itself(self, engine):
        assert engine.used_modifier_closure(DELTA) == {DELTA}

    def test_contains_self(self, engine, graph):
        for modifier in graph:
            assert modifier.id in engine.used_modifier_closure(modifier.id)

    def test_shared_component_in_both_parents(self, engine):
        x = engine.used_modifier_closure(XRAY)
        y = engine.used_modifier_closure(YANKEE)
        assert BRAVO in x and BRAVO in y
        assert engine.used_modifier_closure(ZULU) == {ZULU, XRAY, YANKEE, ALPHA, BRAVO, CHARLIE}

    def test_shared_component_expanded_once(self, graph):
        engine = ClosureEngine(graph)
        calls: list[int] = []
        original = graph.recipe

        def counting_recipe(modifier_id):
            calls.append(modifier_id)
            return original(modifier_id)

        graph.recipe = counting_recipe
        engine.used_modifier_closure(ZULU)
        engine.used_modifier_closure(XRAY)
        assert calls.count(BRAVO) == 1
        assert calls.count(XRAY) == 1

    def test_closure_of_unions(self, engine):
        assert engine.closure_of([XRAY, DELTA]) == {XRAY, ALPHA, BRAVO, DELTA}

    def test_closure_of_empty(self, engine):
        assert engine.closure_of([]) == frozenset()

    def test_components_excludes_self(self, engine):
        assert engine.components(XRAY) == {ALPHA, BRAVO}
        assert engine.components(ALPHA) == frozenset()

    def test_unknown_id_raises(self, engine):
        with pytest.raises(KeyError):
            engine.used_modifier_closure(999)
