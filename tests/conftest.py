"""Shared fixtures for podcast producer tests."""

import io

import numpy as np
import pytest
from PIL import Image
from pydub import AudioSegment

from podcast_producer.errors import RateLimitError


class FakeEngine:
    """TTS engine stand-in: returns b"<voice>|<text>" and records every call."""

    name = "openai"

    def __init__(self, fail_at=None, error=None, empty_at=None):
        self.calls = []
        self.fail_at = fail_at
        self.error = error or RateLimitError()
        self.empty_at = empty_at

    async def synthesize(self, text, voice):
        index = len(self.calls)
        self.calls.append((voice, text))
        if index == self.fail_at:
            raise self.error
        if index == self.empty_at:
            return b""
        return f"{voice}|{text}".encode()


@pytest.fixture
def fake_engine():
    return FakeEngine()


@pytest.fixture
def make_engine():
    """FakeEngine factory for tests that need failures."""
    return FakeEngine


@pytest.fixture
def sample_script():
    return (
        "Host: Welcome to the show.\n"
        "Interviewer: Thanks for having me.\n"
        "\n"
        "Host: (laughs) Let's get **started**.\n"
    )


def _tone(duration_ms=500, freq=440.0, sample_rate=24000):
    t = np.linspace(0, duration_ms / 1000, int(sample_rate * duration_ms / 1000), endpoint=False)
    samples = (np.sin(2 * np.pi * freq * t) * 8000).astype(np.int16)
    return AudioSegment(data=samples.tobytes(), sample_width=2, frame_rate=sample_rate, channels=1)


@pytest.fixture
def tone_mp3():
    """Factory for in-memory MP3 bytes of a sine tone."""
    def make(duration_ms=500, freq=440.0):
        buf = io.BytesIO()
        _tone(duration_ms, freq).export(buf, format="mp3")
        return buf.getvalue()
    return make


@pytest.fixture
def png_path(tmp_path):
    """A 400x100 red PNG (wide, so it letterboxes top and bottom)."""
    path = tmp_path / "cover.png"
    Image.new("RGB", (400, 100), (255, 0, 0)).save(path)
    return path
