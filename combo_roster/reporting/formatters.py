"""
ASCII terminal formatters for CLI commands.

Functions here produce human-readable output for:
  - show       (format_catalog_table, format_roster)
  - unused     (format_unused_modifiers)
  - modifier   (format_modifier_detail)

No external dependencies: pure stdlib + project models.
"""

from __future__ import annotations

from typing import Iterable

from combo_roster.graph.closure import ClosureEngine
from combo_roster.graph.modifiers import sorted_modifier_ids
from combo_roster.models.settings import UserSettings
from combo_roster.roster.partition import RosterPartition


def _valid_badge(valid: bool) -> str:
    return "[OK]     " if valid else "[INVALID]"


def _modifier_name(engine: ClosureEngine, modifier_id: int) -> str:
    return engine.graph.get(modifier_id).name


# ── Catalog ───────────────────────────────────────────────────────────────────


def format_catalog_table(settings: UserSettings, engine: ClosureEngine) -> str:
    """Catalog summary: Status | ID | Label | Modifier 1..4 | Active."""
    if not settings.combo_catalog:
        return "  (catalog is empty)\n"

    header = (
        f"  {'Status':<10} {'ID':>3}  {'Label':<22} "
        f"{'Modifier 1':<20} {'Modifier 2':<20} {'Modifier 3':<20} {'Modifier 4':<20} Active"
    )
    sep = "  " + "-" * (len(header) - 2)
    rows = [header, sep]

    roster = set(settings.combo_roster)
    for labeled in settings.combo_catalog:
        slots = " ".join(f"{_modifier_name(engine, m)[:20]:<20}" for m in labeled.combo)
        rows.append(
            f"  {_valid_badge(labeled.is_valid):<10} {labeled.id:>3}  "
            f"{labeled.display_label[:22]:<22} {slots} "
            f"{'Yes' if labeled.id in roster else 'No'}"
        )

    invalid = [c for c in settings.combo_catalog if not c.is_valid]
    if invalid:
        rows.append("")
        rows.append("  Duplicate modifiers are not allowed; invalid combos are not saved.")
    rows.append("")
    return "\n".join(rows)


# ── Roster ────────────────────────────────────────────────────────────────────


def _format_id_list(settings: UserSettings, ids: Iterable[int]) -> list[str]:
    lines = []
    for index, combo_id in enumerate(ids):
        labeled = settings.find_combo(combo_id)
        label = labeled.display_label if labeled is not None else f"<missing #{combo_id}>"
        lines.append(f"    {index:>2}. {label}")
    return lines or ["    (none)"]


def format_roster(settings: UserSettings, partition: RosterPartition) -> str:
    """Active combos (highest priority first) followed by inactive combos."""
    lines = ["  Active combos (priority order):"]
    lines.extend(_format_id_list(settings, partition.active))
    lines.append("")
    lines.append("  Inactive combos:")
    lines.extend(_format_id_list(settings, partition.inactive))
    lines.append("")
    return "\n".join(lines)


# ── Modifiers ─────────────────────────────────────────────────────────────────


def format_unused_modifiers(
    settings: UserSettings,
    engine: ClosureEngine,
    unused_ids: list[int],
) -> str:
    """One line per unused modifier; locked (forbidden) ones are marked."""
    if not unused_ids:
        return "  (every modifier is used by the active roster)\n"

    lines = []
    for modifier_id in unused_ids:
        lock = "[LOCKED]" if modifier_id in settings.forbidden_modifier_ids else "        "
        tier = f"  T{engine.tier(modifier_id)}" if settings.show_tiers else ""
        lines.append(f"  {lock} {modifier_id:>3}  {_modifier_name(engine, modifier_id)}{tier}")
    lines.append("")
    return "\n".join(lines)


def format_modifier_detail(engine: ClosureEngine, modifier_id: int) -> str:
    """Verbose block for one modifier: tier, recipe, full closure."""
    modifier = engine.graph.get(modifier_id)
    recipe = sorted_modifier_ids(engine.graph, modifier.recipe)
    components = sorted_modifier_ids(engine.graph, engine.components(modifier_id))
    lines = [
        f"  Modifier: {modifier.name} (id {modifier.id})",
        f"    Tier      : {engine.tier(modifier_id)}",
        "    Recipe    : " + (", ".join(_modifier_name(engine, m) for m in recipe) or "-"),
        "    Consumes  : " + (", ".join(_modifier_name(engine, m) for m in components) or "-"),
        "",
    ]
    return "\n".join(lines)
