"""
Modifier graph: the read-only catalog of modifiers and their recipe edges.

The graph is loaded once per session from a JSON array of
``{"id": int, "name": str, "recipe": [int, ...]}`` objects and never mutated
afterwards.

Load-time checks (all fatal, raised as ``ModifierGraphError``):
  - Duplicate modifier ids.
  - Recipe edges pointing at ids that are not in the catalog.
  - Cycles in the recipe graph. Tier computation recurses on recipe edges,
    so it only terminates on a DAG.

Shared sub-components (diamonds) are legal: two composites may both list the
same component.
"""

from __future__ import annotations

import json
import locale
import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional

from combo_roster.models.modifier import Modifier

logger = logging.getLogger(__name__)


class ModifierGraphError(ValueError):
    """Raised when the supplied modifier catalog is structurally broken.

    Attributes:
        cycle: The offending cycle as a list of ids (first id repeated at the
            end), or ``None`` for non-cycle errors.
    """

    def __init__(self, message: str, cycle: Optional[list[int]] = None) -> None:
        self.cycle = cycle
        super().__init__(message)


class ModifierGraph:
    """Immutable id-indexed view over a modifier catalog.

    Args:
        modifiers: Every modifier in the catalog.

    Raises:
        ModifierGraphError: On duplicate ids, dangling recipe edges, or cycles.
    """

    def __init__(self, modifiers: Iterable[Modifier]) -> None:
        by_id: dict[int, Modifier] = {}
        for modifier in modifiers:
            if modifier.id in by_id:
                raise ModifierGraphError(f"Duplicate modifier id {modifier.id}.")
            by_id[modifier.id] = modifier
        self._by_id = by_id

        self._check_edges()
        self._check_acyclic()

    # ── Construction ──────────────────────────────────────────────────────────

    @classmethod
    def from_records(cls, records: list[dict]) -> "ModifierGraph":
        """Build a graph from raw ``{id, name, recipe}`` dicts.

        Raises:
            pydantic.ValidationError: If a record is malformed.
            ModifierGraphError: If the catalog is structurally broken.
        """
        return cls(Modifier.model_validate(rec) for rec in records)

    def _check_edges(self) -> None:
        for modifier in self._by_id.values():
            unknown = sorted(c for c in modifier.recipe if c not in self._by_id)
            if unknown:
                raise ModifierGraphError(
                    f"Modifier {modifier.id} ('{modifier.name}') has recipe "
                    f"components not in the catalog: {unknown}."
                )

    def _check_acyclic(self) -> None:
        """Iterative three-colour DFS; raises on the first back edge found."""
        WHITE, GREY, BLACK = 0, 1, 2
        colour = dict.fromkeys(self._by_id, WHITE)

        for root in sorted(self._by_id):
            if colour[root] != WHITE:
                continue
            path: list[int] = [root]
            stack: list[Iterator[int]] = [iter(sorted(self._by_id[root].recipe))]
            colour[root] = GREY
            while stack:
                child = next(stack[-1], None)
                if child is None:
                    colour[path.pop()] = BLACK
                    stack.pop()
                    continue
                if colour[child] == GREY:
                    cycle = path[path.index(child):] + [child]
                    raise ModifierGraphError(
                        "Modifier recipes contain a cycle: "
                        + " -> ".join(str(i) for i in cycle),
                        cycle=cycle,
                    )
                if colour[child] == WHITE:
                    colour[child] = GREY
                    path.append(child)
                    stack.append(iter(sorted(self._by_id[child].recipe)))

    # ── Lookups ──────────────────────────────────────────────────────────────

    def __contains__(self, modifier_id: object) -> bool:
        return modifier_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[Modifier]:
        return iter(self._by_id.values())

    def get(self, modifier_id: int) -> Modifier:
        """Return the modifier with ``modifier_id``.

        Raises:
            KeyError: If the id is not in the catalog.
        """
        try:
            return self._by_id[modifier_id]
        except KeyError:
            raise KeyError(f"Unknown modifier id {modifier_id}.") from None

    def recipe(self, modifier_id: int) -> frozenset[int]:
        return self.get(modifier_id).recipe

    @property
    def ids(self) -> frozenset[int]:
        return frozenset(self._by_id)


def sorted_modifier_ids(graph: ModifierGraph, ids: Optional[Iterable[int]] = None) -> list[int]:
    """Order modifier ids by display name using the active locale's collation.

    The CLI sets ``LC_COLLATE`` from the environment before opening a
    session; otherwise the C locale applies and names sort by code point.
    Ties (identical names) fall back to id order so the result is stable.

    Args:
        graph: The modifier catalog.
        ids: Subset to sort; defaults to every modifier in ``graph``.
    """
    selected = graph.ids if ids is None else ids
    return sorted(
        selected,
        key=lambda mid: (locale.strxfrm(graph.get(mid).name), mid),
    )


def load_modifier_graph(path: Path) -> ModifierGraph:
    """Load the modifier catalog JSON file.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ValueError: If the file is not a JSON array.
        ModifierGraphError: If the catalog is structurally broken.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Modifier catalog not found: {path}")

    with open(path, encoding="utf-8") as f:
        records = json.load(f)

    if not isinstance(records, list):
        raise ValueError(f"Modifier catalog {path} must contain a JSON array.")

    graph = ModifierGraph.from_records(records)
    logger.info(
        "Loaded %d modifiers from %s",
        len(graph),
        path,
        extra={"modifiers_path": str(path), "modifier_count": len(graph)},
    )
    return graph
