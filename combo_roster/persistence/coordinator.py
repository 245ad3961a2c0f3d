"""
Debounced persistence of ``UserSettings``.

Every mutation calls ``notify(settings)``. The coordinator (re)arms a single
timer for the configured quiet interval; a further ``notify`` before it fires
cancels and re-arms it, so only the last state of a burst is written.

Before writing, ``sanitize_snapshot`` drops combos with duplicate slots from
the catalog (and their ids from the roster, so the saved document still
loads). Invalid combos stay visible and editable in the live session; they
are simply never made durable.

Write failures are logged and kept in ``last_error``. The failed snapshot
stays pending (unless a newer one has arrived); the next mutation's debounce
cycle, an explicit ``flush()``, or ``close()`` retries it.

The timer is injectable (``timer_factory``) so tests can fire it by hand.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional, Protocol

from combo_roster.models.settings import UserSettings

logger = logging.getLogger(__name__)


class _Timer(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], _Timer]


def _daemon_timer(interval: float, function: Callable[[], None]) -> threading.Timer:
    timer = threading.Timer(interval, function)
    timer.daemon = True
    return timer


def sanitize_snapshot(settings: UserSettings) -> UserSettings:
    """Return ``settings`` without invalid (duplicate-slot) combos.

    Dropped combo ids are removed from the roster as well.
    """
    invalid = {c.id for c in settings.combo_catalog if not c.is_valid}
    if not invalid:
        return settings

    logger.info(
        "Omitting invalid combos from saved settings: %s",
        sorted(invalid),
        extra={"invalid_combo_ids": sorted(invalid)},
    )
    return settings.model_copy(update={
        "combo_catalog": tuple(c for c in settings.combo_catalog if c.id not in invalid),
        "combo_roster": tuple(i for i in settings.combo_roster if i not in invalid),
    })


class PersistenceCoordinator:
    """Coalesce settings changes and write the final state of each burst.

    Args:
        save: Callable persisting one snapshot (e.g. ``JsonSettingsStore.save``).
        debounce_seconds: Quiet interval before a pending snapshot is written.
        timer_factory: Builds the one-shot timer; defaults to a daemon
            ``threading.Timer``.

    Attributes:
        last_error: Exception from the most recent failed write, else ``None``.
    """

    def __init__(
        self,
        save: Callable[[UserSettings], None],
        debounce_seconds: float = 0.5,
        timer_factory: TimerFactory = _daemon_timer,
    ) -> None:
        self._save = save
        self.debounce_seconds = debounce_seconds
        self._timer_factory = timer_factory

        self._lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._timer: Optional[_Timer] = None
        self._pending: Optional[UserSettings] = None
        self._last_flushed: Optional[UserSettings] = None
        self.last_error: Optional[BaseException] = None

    # ── State ─────────────────────────────────────────────────────────────────

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    @property
    def last_flushed(self) -> Optional[UserSettings]:
        return self._last_flushed

    def prime(self, settings: UserSettings) -> None:
        """Record ``settings`` as already durable (e.g. just loaded)."""
        self._last_flushed = sanitize_snapshot(settings)

    # ── Scheduling ────────────────────────────────────────────────────────────

    def notify(self, settings: UserSettings) -> None:
        """Schedule ``settings`` for writing, replacing any pending snapshot."""
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            self._pending = settings
            self._timer = self._timer_factory(self.debounce_seconds, self._on_timer)
            self._timer.start()
        logger.debug("Settings write scheduled in %.3fs", self.debounce_seconds)

    def _on_timer(self) -> None:
        self.flush()

    def flush(self) -> bool:
        """Write the pending snapshot now.

        Returns:
            ``True`` if nothing needed writing or the write succeeded,
            ``False`` if the write failed (see ``last_error``).

        A write already in progress on the timer thread is waited for; if it
        failed, its snapshot is pending again and this call retries it.
        """
        with self._write_lock:
            with self._lock:
                if self._timer is not None:
                    self._timer.cancel()
                    self._timer = None
                settings, self._pending = self._pending, None

            if settings is None:
                return True

            snapshot = sanitize_snapshot(settings)
            if snapshot == self._last_flushed:
                logger.debug("Settings unchanged since last write; skipping.")
                return True
            try:
                self._save(snapshot)
            except Exception as exc:
                self.last_error = exc
                logger.error("Failed to save settings: %s", exc, exc_info=True)
                with self._lock:
                    if self._pending is None:
                        self._pending = settings
                return False
            self._last_flushed = snapshot
            self.last_error = None

        logger.info(
            "Settings saved (%d combos)",
            len(snapshot.combo_catalog),
            extra={
                "combo_count": len(snapshot.combo_catalog),
                "roster_size": len(snapshot.combo_roster),
            },
        )
        return True

    def close(self, flush: bool = True) -> bool:
        """Stop the timer and either flush or discard the pending snapshot.

        Returns:
            Result of the flush, or ``True`` when discarding.
        """
        if flush:
            return self.flush()

        with self._write_lock, self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            discarded, self._pending = self._pending, None
        if discarded is not None:
            logger.warning("Discarded an unsaved settings change on close.")
        return True
