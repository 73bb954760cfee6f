import httpx
import pytest
import respx

from ostt.config import DeepgramConfig, ProvidersConfig
from ostt.providers import TranscriptionModel
from ostt.transcription import (
    TranscriptionConfig,
    TranscriptionError,
    build_deepgram_url,
    transcribe,
    transcribe_deepgram,
    transcribe_openai,
)

AUDIO = b"\xff\xfbfake-mp3-bytes"


@pytest.fixture
def audio_file(tmp_path):
    path = tmp_path / "clip.mp3"
    path.write_bytes(AUDIO)
    return path


def _config(model, keywords=None, deepgram=None):
    providers = ProvidersConfig(deepgram=deepgram or DeepgramConfig())
    return TranscriptionConfig(
        model=model, api_key="placeholder", keywords=keywords or [], providers=providers
    )


def test_deepgram_url_plain():
    url = build_deepgram_url(_config(TranscriptionModel.DEEPGRAM_NOVA_3))
    assert url == "https://api.deepgram.com/v1/listen?model=nova-3"


def test_deepgram_url_flags_in_order():
    deepgram = DeepgramConfig(punctuate=True, filler_words=True, mip_opt_out=True)
    url = build_deepgram_url(_config(TranscriptionModel.DEEPGRAM_NOVA_2, deepgram=deepgram))
    assert url.endswith("&filler_words=true&punctuate=true&mip_opt_out=true")
    assert url.startswith("https://api.deepgram.com/v1/listen?model=nova-2")


def test_deepgram_url_utt_split_only_when_changed():
    default = build_deepgram_url(_config(TranscriptionModel.DEEPGRAM_NOVA_3))
    assert "utt_split" not in default
    changed = build_deepgram_url(
        _config(TranscriptionModel.DEEPGRAM_NOVA_3, deepgram=DeepgramConfig(utt_split=1.5))
    )
    assert "&utt_split=1.5" in changed


def test_deepgram_keywords_param_depends_on_model():
    nova3 = build_deepgram_url(_config(TranscriptionModel.DEEPGRAM_NOVA_3, keywords=["ostt"]))
    nova2 = build_deepgram_url(_config(TranscriptionModel.DEEPGRAM_NOVA_2, keywords=["ostt"]))
    assert nova3.endswith("&keyterm=ostt")
    assert nova2.endswith("&keywords=ostt")


def test_deepgram_keywords_are_percent_encoded():
    url = build_deepgram_url(
        _config(TranscriptionModel.DEEPGRAM_NOVA_3, keywords=["hello world", "a&b"])
    )
    assert url.endswith("&keyterm=hello%20world&keyterm=a%26b")


def test_deepgram_request(audio_file):
    with respx.mock:
        route = respx.post(host="api.deepgram.com", path="/v1/listen").mock(
            return_value=httpx.Response(
                200,
                json={"results": {"channels": [{"alternatives": [{"transcript": "hi there"}]}]}},
            )
        )
        text = transcribe_deepgram(_config(TranscriptionModel.DEEPGRAM_NOVA_3), audio_file)
        request = route.calls.last.request

    assert text == "hi there"
    assert request.headers["Authorization"] == "Token placeholder"
    assert request.headers["Content-Type"] == "audio/mpeg"
    assert request.content == AUDIO
    assert request.url.params["model"] == "nova-3"


def test_deepgram_empty_channels(audio_file):
    with respx.mock:
        respx.post(host="api.deepgram.com", path="/v1/listen").mock(
            return_value=httpx.Response(200, json={"results": {"channels": []}})
        )
        with pytest.raises(TranscriptionError, match="No transcript found in Deepgram response"):
            transcribe_deepgram(_config(TranscriptionModel.DEEPGRAM_NOVA_3), audio_file)


def test_deepgram_malformed_response(audio_file):
    with respx.mock:
        respx.post(host="api.deepgram.com", path="/v1/listen").mock(
            return_value=httpx.Response(200, json={"unexpected": True})
        )
        with pytest.raises(TranscriptionError, match="Failed to parse Deepgram response"):
            transcribe_deepgram(_config(TranscriptionModel.DEEPGRAM_NOVA_3), audio_file)


@pytest.mark.parametrize(
    ("status", "fragment"),
    [
        (401, "Deepgram API key is invalid or expired."),
        (403, "You don't have permission to use Deepgram's API."),
        (429, "Too many requests to Deepgram."),
        (503, "Deepgram API server is experiencing issues."),
    ],
)
def test_deepgram_status_messages(audio_file, status, fragment):
    with respx.mock:
        respx.post(host="api.deepgram.com", path="/v1/listen").mock(
            return_value=httpx.Response(status)
        )
        with pytest.raises(TranscriptionError) as info:
            transcribe_deepgram(_config(TranscriptionModel.DEEPGRAM_NOVA_3), audio_file)
    assert fragment in str(info.value)


def test_deepgram_other_status_includes_body(audio_file):
    with respx.mock:
        respx.post(host="api.deepgram.com", path="/v1/listen").mock(
            return_value=httpx.Response(400, text="bad audio")
        )
        with pytest.raises(TranscriptionError) as info:
            transcribe_deepgram(_config(TranscriptionModel.DEEPGRAM_NOVA_3), audio_file)
    assert "Deepgram API error (status 400" in str(info.value)
    assert "bad audio" in str(info.value)


def test_openai_request_with_prompt(audio_file):
    with respx.mock:
        route = respx.post(host="api.openai.com", path="/v1/audio/transcriptions").mock(
            return_value=httpx.Response(200, json={"text": "transcribed"})
        )
        text = transcribe_openai(
            _config(TranscriptionModel.WHISPER, keywords=["alpha", "beta"]), audio_file
        )
        request = route.calls.last.request
        body = request.read()

    assert text == "transcribed"
    assert request.headers["Authorization"] == "Bearer placeholder"
    assert request.url.params["response_format"] == "json"
    assert b"whisper-1" in body
    assert b'name="prompt"' in body
    assert b"alpha, beta" in body
    assert b'filename="clip.mp3"' in body
    assert AUDIO in body


def test_openai_gpt4o_omits_prompt(audio_file):
    with respx.mock:
        route = respx.post(host="api.openai.com", path="/v1/audio/transcriptions").mock(
            return_value=httpx.Response(200, json={"text": "ok"})
        )
        text = transcribe_openai(
            _config(TranscriptionModel.GPT_4O_TRANSCRIBE, keywords=["alpha"]), audio_file
        )
        body = route.calls.last.request.read()

    assert text == "ok"
    assert b'name="prompt"' not in body
    assert b"alpha" not in body
    assert b"gpt-4o-transcribe" in body


def test_openai_unauthorized(audio_file):
    with respx.mock:
        respx.post(host="api.openai.com", path="/v1/audio/transcriptions").mock(
            return_value=httpx.Response(401)
        )
        with pytest.raises(TranscriptionError, match="OpenAI API key is invalid or expired"):
            transcribe_openai(_config(TranscriptionModel.WHISPER), audio_file)


def test_openai_bad_json(audio_file):
    with respx.mock:
        respx.post(host="api.openai.com", path="/v1/audio/transcriptions").mock(
            return_value=httpx.Response(200, text="not json")
        )
        with pytest.raises(TranscriptionError, match="Failed to parse OpenAI response"):
            transcribe_openai(_config(TranscriptionModel.WHISPER), audio_file)


def test_connect_error_message(audio_file):
    with respx.mock:
        respx.post(host="api.openai.com", path="/v1/audio/transcriptions").mock(
            side_effect=httpx.ConnectError("refused")
        )
        with pytest.raises(TranscriptionError) as info:
            transcribe_openai(_config(TranscriptionModel.WHISPER), audio_file)
    assert str(info.value) == (
        "Failed to connect to OpenAI API server. Check your internet connection."
    )


def test_timeout_error_message(audio_file):
    with respx.mock:
        respx.post(host="api.deepgram.com", path="/v1/listen").mock(
            side_effect=httpx.ReadTimeout("slow")
        )
        with pytest.raises(TranscriptionError) as info:
            transcribe_deepgram(_config(TranscriptionModel.DEEPGRAM_NOVA_2), audio_file)
    assert str(info.value) == "Request to Deepgram timed out. The API server is not responding."


def test_missing_audio_file(tmp_path):
    with pytest.raises(TranscriptionError, match="Failed to read audio file"):
        transcribe(_config(TranscriptionModel.WHISPER), tmp_path / "missing.mp3")


def test_transcribe_routes_by_provider(audio_file):
    with respx.mock:
        openai = respx.post(host="api.openai.com", path="/v1/audio/transcriptions").mock(
            return_value=httpx.Response(200, json={"text": "from openai"})
        )
        deepgram = respx.post(host="api.deepgram.com", path="/v1/listen").mock(
            return_value=httpx.Response(
                200,
                json={"results": {"channels": [{"alternatives": [{"transcript": "from deepgram"}]}]}},
            )
        )
        first = transcribe(_config(TranscriptionModel.GPT_4O_MINI_TRANSCRIBE), audio_file)
        second = transcribe(_config(TranscriptionModel.DEEPGRAM_NOVA_3), audio_file)

    assert first == "from openai"
    assert second == "from deepgram"
    assert openai.call_count == 1
    assert deepgram.call_count == 1