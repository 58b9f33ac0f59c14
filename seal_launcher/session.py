"""Picker-facing glue: debounced refresh, exclusive mode and completion."""
import logging
import threading
from enum import Enum
from typing import Callable, List, Optional, Protocol

from seal_launcher.models import PLUGIN_CMD_TYPE, Choice

logger = logging.getLogger(__name__)

ChoicesProvider = Callable[[str], List[Choice]]


class PickerSurface(Protocol):
    """The on-screen chooser the controller drives."""

    def show(self) -> None: ...

    def hide(self) -> None: ...

    def is_visible(self) -> bool: ...

    def query(self) -> str: ...

    def set_query(self, query: str) -> None: ...

    def set_choices_provider(self, provider: Callable[[], List[Choice]]) -> None: ...

    def refresh_choices(self) -> List[Choice]: ...


class HeadlessPicker:
    """In-memory picker used when there is no on-screen chooser."""

    def __init__(self):
        self._visible = False
        self._query = ""
        self._provider: Optional[Callable[[], List[Choice]]] = None
        self.choices: List[Choice] = []

    def show(self) -> None:
        self._visible = True

    def hide(self) -> None:
        self._visible = False

    def is_visible(self) -> bool:
        return self._visible

    def query(self) -> str:
        return self._query

    def set_query(self, query: str) -> None:
        self._query = query or ""

    def set_choices_provider(self, provider: Callable[[], List[Choice]]) -> None:
        self._provider = provider

    def refresh_choices(self) -> List[Choice]:
        self.choices = self._provider() if self._provider else []
        return self.choices


class QueryDebouncer:
    """Runs ``callback`` once, ``delay`` seconds after the last trigger()."""

    def __init__(self, delay: float, callback: Callable[[], None]):
        self.delay = delay
        self.callback = callback
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    @property
    def pending(self) -> bool:
        with self._lock:
            return self._timer is not None

    def trigger(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
            timer = threading.Timer(self.delay, self._fire)
            timer.daemon = True
            self._timer = timer
            timer.start()

    def _fire(self) -> None:
        with self._lock:
            if self._timer is not threading.current_thread():
                return
            self._timer = None
        try:
            self.callback()
        except Exception:
            logger.exception("Debounced query refresh failed")

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None

    def flush(self) -> bool:
        """Run a pending callback now instead of waiting.

        Returns:
            True if a callback was pending
        """
        with self._lock:
            if self._timer is None:
                return False
            self._timer.cancel()
            self._timer = None
        self.callback()
        return True


class SessionState(Enum):
    ACTIVE = "active"
    RESTORED = "restored"


class ExclusiveSession:
    """A temporary swap of the normal choice pipeline for one provider.

    Restoration happens exactly once: on selection, on an explicit restore(),
    or when the watchdog notices the picker has been dismissed.
    The watchdog thread only calls ``on_restore``; that callback must publish
    its change as one reference assignment.
    """

    def __init__(self, provider: ChoicesProvider, on_restore: Callable[[], None], is_visible: Callable[[], bool]):
        self.provider = provider
        self._on_restore = on_restore
        self._is_visible = is_visible
        self.state = SessionState.ACTIVE
        self._lock = threading.Lock()
        self._stop_watchdog = threading.Event()
        self._watchdog_thread: Optional[threading.Thread] = None

    @property
    def active(self) -> bool:
        return self.state is SessionState.ACTIVE

    def restore(self) -> bool:
        """Restore the normal pipeline.

        Returns:
            True if this call performed the restoration
        """
        with self._lock:
            if self.state is SessionState.RESTORED:
                return False
            self.state = SessionState.RESTORED
        self._stop_watchdog.set()
        try:
            self._on_restore()
        except Exception:
            logger.exception("Restoring the normal choice pipeline failed")
        logger.debug("Exclusive session restored")
        return True

    def tick(self) -> SessionState:
        """One watchdog poll: restore if the picker is no longer visible."""
        if self.state is SessionState.ACTIVE and not self._is_visible():
            self.restore()
        return self.state

    def start_watchdog(self, interval: float) -> None:
        """Poll visibility every ``interval`` seconds on a daemon thread."""
        if self._watchdog_thread is not None:
            return
        self._stop_watchdog.clear()
        self._watchdog_thread = threading.Thread(
            target=self._watchdog_loop,
            args=(interval,),
            daemon=True,
            name="seal-exclusive-watchdog",
        )
        self._watchdog_thread.start()

    def _watchdog_loop(self, interval: float) -> None:
        while not self._stop_watchdog.wait(interval):
            try:
                if self.tick() is SessionState.RESTORED:
                    break
            except Exception:
                logger.warning("Exclusive session watchdog poll failed", exc_info=True)

    def stop_watchdog(self, timeout: float = 2.0) -> None:
        self._stop_watchdog.set()
        thread = self._watchdog_thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout=timeout)
        self._watchdog_thread = None


class PickerController:
    """Connects a picker surface to a SealEngine."""

    def __init__(self, engine, picker: Optional[PickerSurface] = None, debounce: Optional[float] = None):
        self.engine = engine
        self.picker = picker or HeadlessPicker()
        if debounce is None:
            debounce = engine.config.query_debounce
        self.debouncer = QueryDebouncer(debounce, self.picker.refresh_choices)
        self._provider: ChoicesProvider = engine.evaluate
        self.session: Optional[ExclusiveSession] = None
        self.picker.set_choices_provider(self.choices)

    @property
    def exclusive(self) -> bool:
        return self.session is not None and self.session.active

    def choices(self) -> List[Choice]:
        """Choices for the picker's current query from the active provider."""
        provider = self._provider
        return provider(self.picker.query())

    def query_changed(self, query: str) -> None:
        """Keystroke hook: schedule a refresh after the debounce window."""
        self.picker.set_query(query)
        self.debouncer.trigger()

    def show(self, query: Optional[str] = None) -> None:
        self.picker.show()
        if query is not None:
            self.picker.set_query(query)
            self.picker.refresh_choices()

    def hide(self) -> None:
        self.debouncer.cancel()
        self.picker.hide()

    def toggle(self, query: Optional[str] = None) -> None:
        if self.picker.is_visible():
            self.hide()
        else:
            self.show(query)

    def complete(self, choice: Optional[Choice]) -> Optional[str]:
        """Completion hook: the user picked ``choice`` (None when dismissed).

        Returns:
            Description of what happened, if anything
        """
        if choice is None:
            return None

        if choice.type == PLUGIN_CMD_TYPE:
            keyword = choice.payload.get("cmd", "")
            self.picker.set_query(f"{keyword} ")
            self.picker.show()
            self.picker.refresh_choices()
            return f"Query set to {keyword!r}"

        result = self.engine.select(choice)
        if self.session is not None:
            self.session.restore()
        return result

    def show_exclusive(self, provider: ChoicesProvider, query: str = "", watch: bool = True) -> ExclusiveSession:
        """Show the picker fed only by ``provider`` until it is dismissed.

        Args:
            provider: Replacement choices provider
            query: Initial query text
            watch: Start a watchdog thread that restores on dismissal

        Returns:
            The new session
        """
        if self.session is not None:
            self.session.restore()

        session = ExclusiveSession(provider, self._restore_normal_pipeline, self.picker.is_visible)
        self.session = session
        self._provider = provider

        self.picker.set_query(query)
        self.picker.show()
        self.picker.refresh_choices()

        if watch:
            session.start_watchdog(self.engine.config.watchdog_interval)
        return session

    def _restore_normal_pipeline(self) -> None:
        # May run on the watchdog thread: a single reference swap is all it
        # publishes. Picker, registry and history are left to the owner.
        self._provider = self.engine.evaluate
