"""
Shared pytest fixtures for the combo-roster test suite.

Provides:
  - ``graph``: a small modifier catalog with leaves, shared components,
    and a three-tier composite.
  - ``engine``: a ``ClosureEngine`` over ``graph``.
  - ``settings``: a ``UserSettings`` value with a valid and an invalid combo.
  - ``FakeTimer`` / ``fake_timers``: a hand-fired replacement for
    ``threading.Timer`` so debounce tests are deterministic.

Graph layout::

    Alpha(1) Bravo(2) Charlie(3) Delta(4) Echo(5)     tier 1 (leaves)
    Xray(10)   = Alpha + Bravo                         tier 2
    Yankee(11) = Bravo + Charlie                       tier 2 (shares Bravo)
    Zulu(12)   = Xray + Yankee                         tier 3
"""

from __future__ import annotations

from typing import Callable

import pytest

from combo_roster.graph.closure import ClosureEngine
from combo_roster.graph.modifiers import ModifierGraph
from combo_roster.models.settings import LabeledCombo, UserSettings

ALPHA, BRAVO, CHARLIE, DELTA, ECHO = 1, 2, 3, 4, 5
XRAY, YANKEE, ZULU = 10, 11, 12

GRAPH_RECORDS = [
    {"id": ALPHA, "name": "Alpha", "recipe": []},
    {"id": BRAVO, "name": "Bravo", "recipe": []},
    {"id": CHARLIE, "name": "Charlie", "recipe": []},
    {"id": DELTA, "name": "Delta", "recipe": []},
    {"id": ECHO, "name": "Echo", "recipe": []},
    {"id": XRAY, "name": "Xray", "recipe": [ALPHA, BRAVO]},
    {"id": YANKEE, "name": "Yankee", "recipe": [BRAVO, CHARLIE]},
    {"id": ZULU, "name": "Zulu", "recipe": [XRAY, YANKEE]},
]


# ── Graph fixtures ────────────────────────────────────────────────────────────

@pytest.fixture
def graph() -> ModifierGraph:
    return ModifierGraph.from_records(GRAPH_RECORDS)


@pytest.fixture
def engine(graph: ModifierGraph) -> ClosureEngine:
    return ClosureEngine(graph)


# ── Settings fixtures ─────────────────────────────────────────────────────────

@pytest.fixture
def settings() -> UserSettings:
    """Three combos: #1 valid, #2 invalid (Alpha twice), #3 valid composite.

    Roster = [3, 1]; combo 2 is inactive.
    """
    return UserSettings(
        combo_catalog=(
            LabeledCombo(id=1, label="Leaves", combo=(ALPHA, BRAVO, CHARLIE, DELTA)),
            LabeledCombo(id=2, label="", combo=(ALPHA, ALPHA, BRAVO, CHARLIE)),
            LabeledCombo(id=3, label="Composite", combo=(XRAY, ECHO, DELTA, CHARLIE)),
        ),
        combo_roster=(3, 1),
        forbidden_modifier_ids=frozenset({ECHO}),
        hotkey="alt + 1",
        show_tiers=False,
    )


# ── Timer fixtures ────────────────────────────────────────────────────────────

class FakeTimer:
    """Stand-in for ``threading.Timer`` that only fires when told to."""

    def __init__(self, interval: float, function: Callable[[], None]) -> None:
        self.interval = interval
        self.function = function
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        if self.started and not self.cancelled:
            self.function()


@pytest.fixture
def fake_timers() -> list[FakeTimer]:
    """Collects every FakeTimer created via ``fake_timer_factory``."""
    return []


@pytest.fixture
def fake_timer_factory(fake_timers: list[FakeTimer]):
    def _factory(interval: float, function: Callable[[], None]) -> FakeTimer:
        timer = FakeTimer(interval, function)
        fake_timers.append(timer)
        return timer

    return _factory
