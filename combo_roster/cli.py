"""
combo-roster: CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging and adopt the environment's LC_COLLATE.
  3. Open a ``SettingsSession`` (modifier graph + settings file).
  4. Apply one operation; mutations are flushed when the session closes.
  5. Report result to stdout.

Install and run::

    pip install -e .
    combo-roster --help
    combo-roster validate-config
    combo-roster show
    combo-roster add-combo
    combo-roster set-slot 3 0 12
    combo-roster move --from inactive --index 0 --to active --to-index 0
    combo-roster forbid 17
    combo-roster unused
"""

from __future__ import annotations

import json
import locale
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

import typer

from combo_roster.roster.partition import RosterList

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="combo-roster",
    help="Manage the combo catalog, active roster, and locked modifiers.",
    add_completion=False,
)

_CONFIG_OPTION = typer.Option(None, "--config", help="Path to TOML config file.")


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from combo_roster.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from combo_roster.utils.logging import configure_logging
    configure_logging(config.logging)


def _use_environment_collation() -> None:
    """Adopt the user's LC_COLLATE so modifier names sort in their locale's order."""
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as exc:
        logger.warning("Locale collation unavailable (%s); sorting by code point.", exc)


@contextmanager
def _session(config_path: Optional[str]) -> Iterator:
    """Open a settings session for one command; the session is always closed.

    Load and operation errors, and a failed final save, are reported as
    ``[ERROR]`` and exit code 1. Other exceptions propagate after the close.
    """
    from pydantic import ValidationError

    from combo_roster.graph.modifiers import ModifierGraphError, load_modifier_graph
    from combo_roster.persistence.coordinator import PersistenceCoordinator
    from combo_roster.persistence.store import (
        JsonSettingsStore,
        SettingsStoreError,
        default_user_settings,
    )
    from combo_roster.session import SettingsIntegrityError, SettingsSession

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    _use_environment_collation()

    store = JsonSettingsStore(Path(config.store.settings_path))
    coordinator = PersistenceCoordinator(
        store.save, debounce_seconds=config.persistence.debounce_seconds
    )

    try:
        graph = load_modifier_graph(Path(config.store.modifiers_path))
        session = SettingsSession.open(
            store,
            graph,
            coordinator,
            default_factory=lambda: default_user_settings(
                config.catalog.default_combo, config.catalog.default_hotkey
            ),
            flush_on_close=config.persistence.flush_on_close,
        )
    except (
        FileNotFoundError,
        ValueError,
        ValidationError,
        ModifierGraphError,
        SettingsStoreError,
        SettingsIntegrityError,
    ) as exc:
        typer.echo(f"[ERROR] Cannot open settings: {exc}", err=True)
        raise typer.Exit(code=1)

    try:
        yield config, session
    except (KeyError, IndexError, ValueError) as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    finally:
        saved = session.close()
        if not saved:
            typer.echo(f"[ERROR] Settings not saved: {coordinator.last_error}", err=True)

    if not saved:
        raise typer.Exit(code=1)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = _CONFIG_OPTION,
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Settings file:   {config.store.settings_path}")
    typer.echo(f"  Modifier file:   {config.store.modifiers_path}")
    typer.echo(f"  Max combos:      {config.catalog.max_combos}")
    typer.echo(f"  Default combo:   {config.catalog.default_combo}")
    typer.echo(f"  Debounce (ms):   {config.persistence.debounce_ms}")
    typer.echo(f"  Log level:       {config.logging.level}")
    typer.echo(f"  Debug mode:      {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("show")
def show(config_path: Optional[str] = _CONFIG_OPTION) -> None:
    """Print the combo catalog, the active roster, and inactive combos."""
    from combo_roster.reporting.formatters import format_catalog_table, format_roster

    with _session(config_path) as (_config, session):
        typer.echo("Combo catalog:")
        typer.echo(format_catalog_table(session.settings, session.engine))
        typer.echo(format_roster(session.settings, session.partition))
        typer.echo(f"  Hotkey: {session.settings.hotkey}")


@app.command("add-combo")
def add_combo(
    label: str = typer.Option("", "--label", help="Label for the new combo."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Append a new combo (default template) to the catalog."""
    from combo_roster.catalog.operations import can_add_combo

    with _session(config_path) as (config, session):
        if not can_add_combo(session.settings, config.catalog.max_combos):
            raise ValueError(
                f"Catalog already holds {config.catalog.max_combos} combos."
            )
        combo_id = session.add_combo(config.catalog.default_combo)
        if label:
            session.set_label(combo_id, label)
        typer.echo(f"[OK] Added combo #{combo_id}.")


@app.command("remove-combo")
def remove_combo(
    combo_id: int = typer.Argument(..., help="Catalog id of the combo to delete."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Delete a combo from the catalog (and from the roster if active)."""
    from combo_roster.catalog.operations import can_remove_combo

    with _session(config_path) as (_config, session):
        if session.settings.find_combo(combo_id) is None:
            raise KeyError(f"Unknown combo id {combo_id}.")
        if not can_remove_combo(session.settings):
            raise ValueError("The catalog must keep at least one combo.")
        session.remove_combo(combo_id)
        typer.echo(f"[OK] Removed combo #{combo_id}.")


@app.command("set-label")
def set_label(
    combo_id: int = typer.Argument(..., help="Catalog id of the combo."),
    label: str = typer.Argument(..., help="New label (empty string clears it)."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Rename a combo."""
    with _session(config_path) as (_config, session):
        if session.settings.find_combo(combo_id) is None:
            raise KeyError(f"Unknown combo id {combo_id}.")
        session.set_label(combo_id, label)
        typer.echo(f"[OK] Combo #{combo_id} labeled '{label}'.")


@app.command("set-slot")
def set_slot(
    combo_id: int = typer.Argument(..., help="Catalog id of the combo."),
    slot: int = typer.Argument(..., help="Slot index, 0-3."),
    modifier_id: int = typer.Argument(..., help="Modifier id to place in the slot."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Assign a modifier to one slot of a combo."""
    with _session(config_path) as (_config, session):
        if session.settings.find_combo(combo_id) is None:
            raise KeyError(f"Unknown combo id {combo_id}.")
        session.set_slot(combo_id, slot, modifier_id)
        typer.echo(f"[OK] Combo #{combo_id} slot {slot} = {modifier_id}.")
        if not session.is_valid(combo_id):
            typer.echo("[WARN] Duplicate modifiers: this combo will not be saved until fixed.")


@app.command("move")
def move(
    source: RosterList = typer.Option(..., "--from", help="List the combo is dragged from."),
    index: int = typer.Option(..., "--index", help="Position in the source list."),
    dest: Optional[RosterList] = typer.Option(
        None, "--to", help="Drop target; omit to cancel the drop."
    ),
    dest_index: int = typer.Option(0, "--to-index", help="Insert position in the target list."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Reorder a combo or move it between the active and inactive lists."""
    from combo_roster.reporting.formatters import format_roster

    with _session(config_path) as (_config, session):
        session.move(source, index, dest, dest_index)
        typer.echo(format_roster(session.settings, session.partition))


@app.command("forbid")
def forbid(
    modifier_id: int = typer.Argument(..., help="Modifier id to lock or unlock."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Toggle whether a modifier may be suggested as filler."""
    with _session(config_path) as (_config, session):
        session.toggle_forbidden(modifier_id)
        state = "locked" if modifier_id in session.settings.forbidden_modifier_ids else "unlocked"
        typer.echo(f"[OK] Modifier {modifier_id} {state}.")


@app.command("unused")
def unused(config_path: Optional[str] = _CONFIG_OPTION) -> None:
    """List modifiers not used by any active combo."""
    from combo_roster.reporting.formatters import format_unused_modifiers

    with _session(config_path) as (_config, session):
        unused_ids = session.unused_modifiers()
        typer.echo(f"Unused modifiers ({len(unused_ids)}):")
        typer.echo(format_unused_modifiers(session.settings, session.engine, unused_ids))


@app.command("modifier")
def modifier(
    modifier_id: int = typer.Argument(..., help="Modifier id to inspect."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Show the tier, recipe, and full component closure of a modifier."""
    from combo_roster.reporting.formatters import format_modifier_detail

    with _session(config_path) as (_config, session):
        typer.echo(format_modifier_detail(session.engine, modifier_id))


@app.command("set-hotkey")
def set_hotkey(
    hotkey: str = typer.Argument(..., help="Hotkey string, e.g. 'ctrl + shift + F3'."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Store the activation hotkey."""
    with _session(config_path) as (_config, session):
        session.set_hotkey(hotkey)
        typer.echo(f"[OK] Hotkey set to '{hotkey}'.")


@app.command("toggle-tiers")
def toggle_tiers(config_path: Optional[str] = _CONFIG_OPTION) -> None:
    """Toggle tier display in modifier listings."""
    with _session(config_path) as (_config, session):
        session.toggle_show_tiers()
        typer.echo(f"[OK] Show tiers: {session.settings.show_tiers}.")


if __name__ == "__main__":
    app()
