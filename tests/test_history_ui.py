import contextlib
import io
import time
from datetime import datetime, timezone

from blessed.keyboard import Keystroke

from ostt.history import HistoryManager, TranscriptionEntry
from ostt.history_ui import Exit, HistoryViewer, ListState, Select, handle_history


class FakeTerm:
    def __init__(self, keys=(), width=60, height=20):
        self.keys = list(keys)
        self.width = width
        self.height = height
        self.stream = io.StringIO()
        self.does_styling = False
        self.home = ""
        self.normal = ""
        self.entered = []
        self.exited = 0

    @contextlib.contextmanager
    def _ctx(self, name):
        self.entered.append(name)
        try:
            yield
        finally:
            self.exited += 1

    def raw(self):
        return self._ctx("raw")

    def fullscreen(self):
        return self._ctx("fullscreen")

    def hidden_cursor(self):
        return self._ctx("hidden_cursor")

    def move_yx(self, y, x):
        return ""

    def inkey(self, timeout=None):
        if self.keys:
            return self.keys.pop(0)
        time.sleep(0.01)
        return Keystroke("")


UP = Keystroke("\x1b[A", code=259, name="KEY_UP")
DOWN = Keystroke("\x1b[B", code=258, name="KEY_DOWN")
ENTER = Keystroke("\r", code=343, name="KEY_ENTER")
ESCAPE = Keystroke("\x1b", code=361, name="KEY_ESCAPE")


def make_entries():
    return [
        TranscriptionEntry(id=2, text="second note", created_at=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)),
        TranscriptionEntry(id=1, text="first note", created_at=datetime(2023, 5, 6, 7, 8, 9, tzinfo=timezone.utc)),
    ]


def test_list_state_next_stops_at_last():
    state = ListState(3, 0)
    for _ in range(5):
        state.select_next()
    assert state.selected == 2


def test_list_state_previous_stops_at_first():
    state = ListState(3, 1)
    state.select_previous()
    state.select_previous()
    assert state.selected == 0


def test_list_state_previous_without_selection_picks_last():
    state = ListState(4)
    state.select_previous()
    assert state.selected == 3


def test_list_state_empty_keeps_no_selection():
    state = ListState(0)
    state.select_next()
    assert state.selected is None


def test_handle_key_exit_keys():
    viewer = HistoryViewer(make_entries(), term=FakeTerm())
    assert viewer.handle_key(Keystroke("q")) == Exit()
    assert viewer.handle_key(ESCAPE) == Exit()
    viewer.cleanup()


def test_handle_key_navigation_and_select():
    entries = make_entries()
    viewer = HistoryViewer(entries, term=FakeTerm())
    assert viewer.handle_key(DOWN) is None
    assert viewer.handle_key(ENTER) == Select(entries[1].text)
    assert viewer.handle_key(UP) is None
    assert viewer.handle_key(ENTER) == Select(entries[0].text)
    viewer.cleanup()


def test_run_returns_selected_text_and_restores_terminal():
    entries = make_entries()
    term = FakeTerm(keys=[DOWN, ENTER])
    viewer = HistoryViewer(entries, term=term)
    assert viewer.run() == "first note"
    assert term.exited == 3
    assert "Copied to clipboard!" in term.stream.getvalue()


def test_run_quit_returns_none():
    term = FakeTerm(keys=[Keystroke("q")])
    assert HistoryViewer(make_entries(), term=term).run() is None


def test_run_with_no_entries_returns_none():
    term = FakeTerm(keys=[ENTER])
    viewer = HistoryViewer([], term=term)
    assert viewer.run() is None
    assert viewer.closed


def test_drawn_frame_shows_title_and_selected_entry():
    term = FakeTerm(keys=[Keystroke("q")])
    HistoryViewer(make_entries(), term=term).run()
    output = term.stream.getvalue()
    assert " History " in output
    assert "> 2024-01-02 03:04:05" in output
    assert "  2023-05-06 07:08:09" in output
    assert "↑↓ select, ↵ copy, q quit" in output


def test_cleanup_is_idempotent():
    term = FakeTerm()
    viewer = HistoryViewer(make_entries(), term=term)
    viewer.cleanup()
    viewer.cleanup()
    assert term.exited == 3


def test_handle_history_empty(tmp_path, capsys):
    assert handle_history(tmp_path) is None
    assert "No transcription history found." in capsys.readouterr().out
    with HistoryManager(tmp_path) as manager:
        assert manager.get_all_transcriptions() == []