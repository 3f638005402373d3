import base64
from types import SimpleNamespace

import pytest

from agents import kettlebell_vbt_agent
from agents.kettlebell_vbt_agent import GeminiVideoClient, KettlebellVBTAgent, decode_video
from analysis.errors import CallerError, UpstreamError
from analysis.prompt_builder import build_prompt
from analysis.protocol import parse_protocol
from analysis.response_parser import PARSE_ERROR_PREFIX
from utils.config import GeminiSettings
from conftest import FakeGeminiClient


def test_missing_video_fails_before_gemini_call(swing_protocol):
    client = FakeGeminiClient()
    agent = KettlebellVBTAgent(client)
    with pytest.raises(CallerError) as info:
        agent.analyze(None, "video/mp4", swing_protocol)
    assert info.value.status_code == 400
    assert info.value.error == "Missing video or protocol data"
    assert client.calls == []


def test_missing_protocol_fails_before_gemini_call(video_b64):
    client = FakeGeminiClient()
    with pytest.raises(CallerError):
        KettlebellVBTAgent(client).analyze(video_b64, "video/mp4", None)
    assert client.calls == []


@pytest.mark.parametrize("pattern", ["alternating-sets", "alternating-reps"])
def test_alternation_without_starting_arm_never_reaches_gemini(video_b64, swing_protocol, pattern):
    swing_protocol["armPattern"] = pattern
    client = FakeGeminiClient()
    with pytest.raises(CallerError):
        KettlebellVBTAgent(client).analyze(video_b64, "video/mp4", swing_protocol)
    assert client.calls == []


def test_successful_analysis(video_b64, swing_protocol, gemini_reply):
    client = FakeGeminiClient(reply=gemini_reply)
    result = KettlebellVBTAgent(client).analyze(video_b64, None, swing_protocol)

    assert result["totalReps"] == 4
    assert result["velocityDropoff"] == 50.0
    media, mime_type, instructions = client.calls[0]
    assert media == base64.b64decode(video_b64)
    assert mime_type == "video/mp4"
    assert instructions == build_prompt(parse_protocol(swing_protocol))


def test_upstream_failure_is_wrapped(video_b64, swing_protocol):
    client = FakeGeminiClient(error=RuntimeError("429 RESOURCE_EXHAUSTED: quota exceeded"))
    with pytest.raises(UpstreamError) as info:
        KettlebellVBTAgent(client).analyze(video_b64, "video/mp4", swing_protocol)
    assert info.value.status_code == 500
    assert info.value.to_dict() == {
        "error": "Analysis failed",
        "message": "429 RESOURCE_EXHAUSTED: quota exceeded",
    }


def test_unparsable_reply_is_a_degraded_success(video_b64, swing_protocol):
    client = FakeGeminiClient(reply="The video is too dark to count reps.")
    result = KettlebellVBTAgent(client).analyze(video_b64, "video/mp4", swing_protocol)
    assert result["reps"] == []
    assert result["totalReps"] == 0
    assert result["coachingNotes"] == PARSE_ERROR_PREFIX + "The video is too dark to count reps."


def test_decode_video_reads_data_url_mime_type():
    payload = "data:video/quicktime;base64," + base64.b64encode(b"mov").decode("ascii")
    assert decode_video(payload, None) == (b"mov", "video/quicktime")


@pytest.mark.parametrize("video,mime_type", [
    ("not base64 at all!", "video/mp4"),
    (base64.b64encode(b"png").decode("ascii"), "image/png"),
    ("", "video/mp4"),
])
def test_decode_video_rejects_bad_payloads(video, mime_type):
    with pytest.raises(CallerError):
        decode_video(video, mime_type)


def test_decode_video_enforces_size_limit(monkeypatch):
    monkeypatch.setattr(kettlebell_vbt_agent, "MAX_VIDEO_BYTES", 4)
    with pytest.raises(CallerError, match="under 100MB"):
        decode_video(base64.b64encode(b"12345").decode("ascii"), "video/mp4")


def test_gemini_client_sends_video_and_prompt():
    captured = {}

    def generate_content(model, contents, config):
        captured.update(model=model, contents=contents, config=config)
        return SimpleNamespace(text='{"reps": []}')

    fake_sdk = SimpleNamespace(models=SimpleNamespace(generate_content=generate_content))
    settings = GeminiSettings(api_key="test-key", model="gemini-test")
    client = GeminiVideoClient(settings, client=fake_sdk)

    assert client.generate(b"video", "video/mp4", "count the reps") == '{"reps": []}'
    assert captured["model"] == "gemini-test"
    assert captured["contents"][1] == "count the reps"
    assert captured["config"].response_mime_type == "application/json"


def test_gemini_client_returns_empty_text_for_blocked_reply():
    fake_sdk = SimpleNamespace(models=SimpleNamespace(
        generate_content=lambda **kwargs: SimpleNamespace(text=None)
    ))
    client = GeminiVideoClient(GeminiSettings(api_key="test-key"), client=fake_sdk)
    assert client.generate(b"video", "video/mp4", "prompt") == ""


@pytest.mark.parametrize("mime_type", [4, ["video/mp4"], {"type": "video/mp4"}])
def test_decode_video_rejects_non_string_mime_type(mime_type):
    with pytest.raises(CallerError, match="mimeType"):
        decode_video(base64.b64encode(b"mp4").decode("ascii"), mime_type)
