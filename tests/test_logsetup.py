import logging

import pytest

from ostt import logsetup


@pytest.fixture
def isolated_logging(monkeypatch, tmp_path):
    monkeypatch.setattr(logsetup, "_handler", None)
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path))
    monkeypatch.delenv("OSTT_LOG", raising=False)
    root = logging.getLogger()
    level = root.level
    handlers = list(root.handlers)
    yield tmp_path
    for handler in list(root.handlers):
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)


def flush_all():
    for handler in logging.getLogger().handlers:
        handler.flush()


def test_log_dir_uses_xdg_state_home(monkeypatch, tmp_path):
    monkeypatch.setenv("XDG_STATE_HOME", str(tmp_path))
    directory = logsetup.log_dir()
    assert directory == tmp_path / "ostt"
    assert directory.is_dir()


def test_log_dir_defaults_to_home(monkeypatch, tmp_path):
    monkeypatch.delenv("XDG_STATE_HOME", raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    directory = logsetup.log_dir()
    assert directory == tmp_path / ".local" / "state" / "ostt"
    assert directory.is_dir()


def test_init_logging_writes_to_file(isolated_logging):
    directory = logsetup.init_logging()
    assert directory == isolated_logging / "ostt"
    logging.getLogger("ostt.test").debug("debug message here")
    flush_all()
    content = (directory / "ostt.log").read_text(encoding="utf-8")
    assert "Logging initialized" in content
    assert "debug message here" in content
    assert logging.getLogger().level == logging.DEBUG


def test_init_logging_twice_raises(isolated_logging):
    logsetup.init_logging()
    with pytest.raises(RuntimeError, match="already initialized"):
        logsetup.init_logging()


def test_level_from_environment(isolated_logging, monkeypatch):
    monkeypatch.setenv("OSTT_LOG", "error")
    directory = logsetup.init_logging()
    assert logging.getLogger().level == logging.ERROR
    logging.getLogger("ostt.test").info("quiet info")
    logging.getLogger("ostt.test").error("loud error")
    flush_all()
    content = (directory / "ostt.log").read_text(encoding="utf-8")
    assert "quiet info" not in content
    assert "loud error" in content


def test_unknown_level_falls_back_to_debug(isolated_logging, monkeypatch):
    monkeypatch.setenv("OSTT_LOG", "nonsense")
    directory = logsetup.init_logging()
    assert directory == isolated_logging / "ostt"
    assert logging.getLogger().level == logging.DEBUG
    logging.getLogger("ostt.test").debug("debug after fallback")
    flush_all()
    content = (directory / "ostt.log").read_text(encoding="utf-8")
    assert "debug after fallback" in content