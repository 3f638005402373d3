"""Shared fixtures for the kettlebell analysis tests."""

import base64
import json

import pytest


SAMPLE_REPS = [
    {"repNumber": 1, "arm": "Left", "startTime": "00:03.2", "endTime": "00:04.1", "duration": 0.9, "velocityScore": 8},
    {"repNumber": 2, "arm": "Left", "startTime": "00:05.0", "endTime": "00:06.1", "duration": 1.1, "velocityScore": 7},
    {"repNumber": 3, "arm": "Right", "startTime": "00:33.0", "endTime": "00:34.3", "duration": 1.3, "velocityScore": 6},
    {"repNumber": 4, "arm": "Right", "startTime": "00:35.0", "endTime": "00:36.3", "duration": 1.3, "velocityScore": 4},
]


class FakeGeminiClient:
    """Stands in for GeminiVideoClient and records every call."""

    def __init__(self, reply="", error=None):
        self.reply = reply
        self.error = error
        self.calls = []

    def generate(self, media, mime_type, instructions):
        self.calls.append((media, mime_type, instructions))
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def sample_reps():
    return [dict(rep) for rep in SAMPLE_REPS]


@pytest.fixture
def swing_protocol():
    return {
        "exercise": "swing",
        "weight": 16,
        "repsPerSet": 5,
        "interval": 30,
        "armPattern": "both",
    }


@pytest.fixture
def video_b64():
    return base64.b64encode(b"\x00\x00\x00\x18ftypmp42 fake video").decode("ascii")


@pytest.fixture
def gemini_reply(sample_reps):
    return json.dumps({
        "reps": sample_reps,
        "summary": {
            "totalReps": 4,
            "avgDuration": 1.15,
            "avgVelocity": 6.25,
            "fastestRep": 1,
            "slowestRep": 4,
            "velocityDropPercent": 50.0,
        },
        "coachingNotes": "Velocity fades on the right arm after the switch.",
    })
