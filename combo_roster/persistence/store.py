"""
JSON file store for ``UserSettings``.

This is the host-side ``load()`` / ``save(settings)`` pair. The document is
written with two-space indentation, camelCase keys, a sorted forbidden list,
and a trailing newline, so loading a file and saving it again without edits
reproduces the same bytes.

Writes go to a sibling temp file first and are then moved into place, so a
failed write never truncates the previous settings file.

Usage::

    store = JsonSettingsStore(Path("data/settings.json"))
    settings = store.load_or_create(lambda: default_user_settings(config.catalog.default_combo))
    store.save(settings)
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Callable

from pydantic import ValidationError

from combo_roster.models.settings import LabeledCombo, UserSettings

logger = logging.getLogger(__name__)


class SettingsStoreError(RuntimeError):
    """Raised when the settings file cannot be read, parsed, or written.

    Attributes:
        path: The settings file involved.
    """

    def __init__(self, path: Path, message: str) -> None:
        self.path = path
        super().__init__(f"{message} ({path})")


def serialize_settings(settings: UserSettings) -> str:
    """Render the persisted document text for ``settings``."""
    return json.dumps(settings.to_document(), indent=2, ensure_ascii=False) + "\n"


def default_user_settings(
    default_combo: tuple[int, int, int, int] | list[int],
    hotkey: str = "alt + 1",
) -> UserSettings:
    """Settings for a first run: one combo, active, nothing forbidden."""
    return UserSettings(
        combo_catalog=(LabeledCombo(id=1, label="", combo=tuple(default_combo)),),
        combo_roster=(1,),
        forbidden_modifier_ids=frozenset(),
        hotkey=hotkey,
        show_tiers=False,
    )


class JsonSettingsStore:
    """Load and save ``UserSettings`` as a JSON document on disk.

    Attributes:
        path: Location of the settings file.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> UserSettings:
        """Read and validate the settings file.

        Raises:
            SettingsStoreError: If the file is missing, unreadable, not JSON,
                or violates the settings invariants.
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise SettingsStoreError(self.path, f"Cannot read settings: {exc}") from exc

        try:
            document = json.loads(text)
        except json.JSONDecodeError as exc:
            raise SettingsStoreError(self.path, f"Settings file is not valid JSON: {exc}") from exc

        try:
            settings = UserSettings.from_document(document)
        except ValidationError as exc:
            raise SettingsStoreError(self.path, f"Settings file is inconsistent: {exc}") from exc

        logger.info(
            "Loaded settings: %d combos, %d in roster",
            len(settings.combo_catalog),
            len(settings.combo_roster),
            extra={
                "settings_path": str(self.path),
                "combo_count": len(settings.combo_catalog),
                "roster_size": len(settings.combo_roster),
            },
        )
        return settings

    def save(self, settings: UserSettings) -> None:
        """Write ``settings`` atomically (temp file + replace).

        Raises:
            SettingsStoreError: If the file cannot be written.
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(serialize_settings(settings), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise SettingsStoreError(self.path, f"Cannot write settings: {exc}") from exc
        logger.debug("Wrote settings to %s", self.path, extra={"settings_path": str(self.path)})

    def load_or_create(self, default_factory: Callable[[], UserSettings]) -> UserSettings:
        """Load the settings file, creating it from ``default_factory`` if absent.

        A file that exists but cannot be loaded is an error; it is never
        overwritten with defaults.
        """
        if self.exists():
            return self.load()

        settings = default_factory()
        self.save(settings)
        logger.info(
            "Created default settings at %s", self.path, extra={"settings_path": str(self.path)}
        )
        return settings
