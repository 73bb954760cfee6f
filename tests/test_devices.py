import pytest

from ostt.audio import AudioError
from ostt.devices import handle_list_devices


@pytest.fixture
def sdl(mocker):
    mocker.patch("pygame.mixer.get_init", return_value=True)
    return mocker.patch("pygame._sdl2.audio.get_audio_device_names")


def test_lists_devices_with_ids(sdl, capsys):
    sdl.return_value = ["Built-in Microphone", "USB Microphone"]
    assert handle_list_devices() == ["Built-in Microphone", "USB Microphone"]
    out = capsys.readouterr().out
    assert "Available audio input devices:" in out
    assert "  ID: 0\n    Name: Built-in Microphone" in out
    assert "  ID: 1\n    Name: USB Microphone" in out


def test_no_devices(sdl, capsys):
    sdl.return_value = []
    assert handle_list_devices() == []
    assert "No audio input devices found on this system." in capsys.readouterr().out


def test_enumeration_failure_raises(sdl):
    sdl.side_effect = RuntimeError("no audio subsystem")
    with pytest.raises(AudioError, match="Failed to enumerate audio devices"):
        handle_list_devices()