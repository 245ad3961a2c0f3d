"""
Settings persistence.

  persistence/store.py      : JsonSettingsStore: load / save / load_or_create.
  persistence/coordinator.py: PersistenceCoordinator: debounced, sanitized writes.
"""
