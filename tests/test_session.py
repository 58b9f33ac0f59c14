"""Tests for debouncing, exclusive mode and picker completion."""
import threading
import time

import pytest

from seal_launcher.models import PLUGIN_CMD_TYPE, Choice
from seal_launcher.session import (
    ExclusiveSession,
    HeadlessPicker,
    PickerController,
    QueryDebouncer,
    SessionState,
)


def wait_for(predicate, timeout=2.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class Counter:
    def __init__(self):
        self.calls = 0
        self.fired = threading.Event()

    def __call__(self):
        self.calls += 1
        self.fired.set()


class TestQueryDebouncer:
    def test_only_last_trigger_fires(self):
        counter = Counter()
        debouncer = QueryDebouncer(0.05, counter)
        for _ in range(5):
            debouncer.trigger()
        assert counter.fired.wait(2.0)
        time.sleep(0.1)
        assert counter.calls == 1
        assert not debouncer.pending

    def test_cancel(self):
        counter = Counter()
        debouncer = QueryDebouncer(10, counter)
        debouncer.trigger()
        assert debouncer.pending
        debouncer.cancel()
        assert not debouncer.pending
        assert counter.calls == 0

    def test_flush_runs_now(self):
        counter = Counter()
        debouncer = QueryDebouncer(10, counter)
        assert debouncer.flush() is False
        debouncer.trigger()
        assert debouncer.flush() is True
        assert counter.calls == 1
        assert not debouncer.pending

    def test_callback_error_is_logged(self, caplog):
        def boom():
            raise RuntimeError("refresh failed")

        debouncer = QueryDebouncer(0.01, boom)
        with caplog.at_level("ERROR", logger="seal_launcher.session"):
            debouncer.trigger()
            assert wait_for(lambda: "Debounced query refresh failed" in caplog.text)


class TestExclusiveSession:
    def test_restore_is_idempotent(self):
        restored = []
        session = ExclusiveSession(lambda q: [], lambda: restored.append(1), lambda: True)
        assert session.active
        assert session.restore() is True
        assert session.restore() is False
        assert restored == [1]
        assert session.state is SessionState.RESTORED

    def test_tick_restores_when_hidden(self):
        visible = [True]
        restored = []
        session = ExclusiveSession(lambda q: [], lambda: restored.append(1), lambda: visible[0])
        assert session.tick() is SessionState.ACTIVE
        visible[0] = False
        assert session.tick() is SessionState.RESTORED
        session.tick()
        assert restored == [1]

    def test_watchdog_restores_once(self):
        visible = [True]
        restored = []
        session = ExclusiveSession(lambda q: [], lambda: restored.append(1), lambda: visible[0])
        session.start_watchdog(0.01)
        time.sleep(0.05)
        assert session.active

        visible[0] = False
        assert wait_for(lambda: not session.active)
        session.stop_watchdog()
        assert restored == [1]

    def test_restore_error_is_contained(self, caplog):
        def fail():
            raise RuntimeError("nope")

        session = ExclusiveSession(lambda q: [], fail, lambda: True)
        with caplog.at_level("ERROR", logger="seal_launcher.session"):
            assert session.restore() is True
        assert "Restoring the normal choice pipeline failed" in caplog.text


class TestHeadlessPicker:
    def test_refresh_without_provider(self):
        picker = HeadlessPicker()
        assert picker.refresh_choices() == []
        picker.set_query(None)
        assert picker.query() == ""


@pytest.fixture
def controller(engine):
    return PickerController(engine, debounce=10)


class TestPickerController:
    def test_query_changed_is_debounced(self, controller):
        controller.query_changed("github")
        assert controller.picker.choices == []
        assert controller.debouncer.flush()
        assert [c.text for c in controller.picker.choices] == ["GitHub"]

    def test_toggle(self, controller):
        controller.toggle("python")
        assert controller.picker.is_visible()
        assert [c.text for c in controller.picker.choices] == ["Python Docs"]
        controller.toggle()
        assert not controller.picker.is_visible()

    def test_hide_cancels_pending_refresh(self, controller):
        controller.query_changed("github")
        controller.hide()
        assert not controller.debouncer.pending

    def test_command_choice_prefills_keyword(self, controller):
        suggestion = next(c for c in controller.engine.evaluate("rh") if c.type == PLUGIN_CMD_TYPE)
        assert controller.complete(suggestion) == "Query set to 'rhbz'"
        assert controller.picker.query() == "rhbz "
        assert controller.picker.is_visible()
        assert controller.picker.choices
        assert len(controller.engine.store) == 0

    def test_selection_runs_action(self, controller, opener):
        controller.show("python")
        result = controller.complete(controller.picker.choices[0])
        assert result == "Opened https://docs.python.org"
        assert opener.calls == [("open", "https://docs.python.org", "chrome")]

    def test_dismissal(self, controller):
        assert controller.complete(None) is None

    def test_exclusive_mode_swaps_provider(self, controller):
        only = [Choice(text="Only Choice")]
        session = controller.show_exclusive(lambda q: only, "github", watch=False)
        assert controller.exclusive
        assert [c.text for c in controller.picker.choices] == ["Only Choice"]

        controller.complete(controller.picker.choices[0])
        assert session.state is SessionState.RESTORED
        assert not controller.exclusive
        assert [c.text for c in controller.picker.refresh_choices()] == ["GitHub"]

    def test_new_exclusive_session_restores_previous(self, controller):
        first = controller.show_exclusive(lambda q: [], watch=False)
        controller.show_exclusive(lambda q: [], watch=False)
        assert first.state is SessionState.RESTORED
        assert controller.exclusive

    def test_watchdog_restores_on_dismiss(self, controller):
        session = controller.show_exclusive(lambda q: [Choice(text="Only Choice")], "github")
        controller.hide()
        assert wait_for(lambda: not session.active)
        session.stop_watchdog()
        assert [c.text for c in controller.choices()] == ["GitHub"]

    def test_watchdog_restore_only_swaps_provider(self, controller):
        restored_on = []
        session = controller.show_exclusive(lambda q: [Choice(text="Only Choice")], "github", watch=False)
        session._on_restore = lambda: (
            restored_on.append(threading.current_thread().name),
            controller._restore_normal_pipeline(),
        )
        session.start_watchdog(0.01)
        history_before = len(controller.engine.store)

        controller.picker.hide()
        assert wait_for(lambda: not session.active)
        session.stop_watchdog()

        assert restored_on == ["seal-exclusive-watchdog"]
        assert [c.text for c in controller.picker.choices] == ["Only Choice"]
        assert controller.picker.query() == "github"
        assert len(controller.engine.store) == history_before
        assert [c.text for c in controller.picker.refresh_choices()] == ["GitHub"]
