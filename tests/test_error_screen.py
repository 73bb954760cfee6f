import contextlib
import io

from blessed.keyboard import Keystroke

from ostt.error_screen import ErrorScreen, wrap_centered


class FakeTerm:
    def __init__(self, keys=(), width=50, height=12):
        self.keys = list(keys)
        self.width = width
        self.height = height
        self.stream = io.StringIO()
        self.does_styling = False
        self.home = ""
        self.normal = ""
        self.exited = 0
        self.polls = 0

    @contextlib.contextmanager
    def _ctx(self):
        try:
            yield
        finally:
            self.exited += 1

    def raw(self):
        return self._ctx()

    def fullscreen(self):
        return self._ctx()

    def move_yx(self, y, x):
        return ""

    def inkey(self, timeout=None):
        self.polls += 1
        if self.keys:
            return self.keys.pop(0)
        return Keystroke("")


def test_wrap_centered_lines_have_full_width():
    message = "Configuration Error: the audio section is missing from the file"
    lines = wrap_centered(message, 20)
    assert lines
    assert all(len(line) == 20 for line in lines)


def test_wrap_centered_keeps_all_words():
    message = "Please run 'ostt auth' to select a model."
    lines = wrap_centered(message, 12)
    assert " ".join(" ".join(lines).split()) == message


def test_wrap_centered_centres_short_line():
    assert wrap_centered("ab", 6) == ["  ab  "]


def test_wrap_centered_keeps_blank_lines():
    lines = wrap_centered("top\n\nbottom", 10)
    assert len(lines) == 3
    assert lines[1].strip() == ""
    assert lines[0].strip() == "top"
    assert lines[2].strip() == "bottom"


def test_wrap_centered_zero_width():
    assert wrap_centered("anything", 0) == []


def test_show_error_waits_for_key_and_draws_message():
    term = FakeTerm(keys=[Keystroke(""), Keystroke(""), Keystroke("x")])
    screen = ErrorScreen(term=term)
    screen.show_error("Error: No transcription model configured.")
    assert term.polls == 3
    assert "No transcription model configured." in term.stream.getvalue()
    screen.cleanup()
    assert term.exited == 2


def test_cleanup_is_idempotent():
    term = FakeTerm()
    screen = ErrorScreen(term=term)
    screen.cleanup()
    screen.cleanup()
    assert term.exited == 2
    assert screen.closed