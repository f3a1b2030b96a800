"""Tests for assembly module."""

import asyncio
import io
import math
from unittest.mock import patch

import pytest
from pydub import AudioSegment

from podcast_producer.assembly import (
    combine,
    concatenate_buffers,
    probe_audio_duration,
    probe_audio_duration_async,
)
from podcast_producer.errors import AudioLoadError


def test_concatenate_preserves_order_and_length():
    """Output is the buffers back to back, in order."""
    buffers = [b"\x01\x02", b"", b"\x03", b"\x04\x05\x06"]
    result = concatenate_buffers(buffers)
    assert result == b"\x01\x02\x03\x04\x05\x06"
    assert len(result) == sum(len(b) for b in buffers)


def test_concatenate_empty_list():
    """No buffers → empty bytes."""
    assert concatenate_buffers([]) == b""


def test_combine_sets_mime_type():
    """combine() wraps the splice as audio/mpeg."""
    combined = combine([b"ab", b"cd"])
    assert combined.data == b"abcd"
    assert combined.mime_type == "audio/mpeg"


def test_spliced_mp3_is_playable(tone_mp3):
    """Two MP3 buffers spliced raw decode to roughly the summed duration."""
    first, second = tone_mp3(1000, 440.0), tone_mp3(1000, 660.0)
    combined = concatenate_buffers([first, second])
    decoded = AudioSegment.from_file(io.BytesIO(combined), format="mp3")
    assert abs(len(decoded) - 2000) < 200


def test_probe_duration(tmp_path, tone_mp3):
    """ffprobe reports the duration of a real MP3."""
    path = tmp_path / "tone.mp3"
    path.write_bytes(tone_mp3(1500))
    assert abs(probe_audio_duration(str(path)) - 1.5) < 0.2


def test_probe_rejects_non_audio(tmp_path):
    """A file with no audio stream is an AudioLoadError."""
    path = tmp_path / "junk.mp3"
    path.write_bytes(b"this is not audio at all")
    with pytest.raises(AudioLoadError):
        probe_audio_duration(str(path))


@patch("podcast_producer.assembly.mediainfo_json")
def test_probe_unreported_duration_is_nan(mock_info):
    """'N/A' duration comes back as NaN, not an error."""
    mock_info.return_value = {"streams": [{"codec_type": "audio"}], "format": {"duration": "N/A"}}
    assert math.isnan(probe_audio_duration("whatever.mp3"))


@patch("podcast_producer.assembly.mediainfo_json")
def test_probe_missing_ffprobe(mock_info):
    """ffprobe not installed surfaces as AudioLoadError."""
    mock_info.side_effect = FileNotFoundError("ffprobe")
    with pytest.raises(AudioLoadError):
        probe_audio_duration("whatever.mp3")


# --- Async probe ---

class HangingProbe:
    """ffprobe stand-in that never answers until killed."""

    def __init__(self):
        self.returncode = None
        self.killed = False

    async def communicate(self):
        await asyncio.sleep(60)

    def kill(self):
        self.killed = True
        self.returncode = -9

    async def wait(self):
        return self.returncode


def test_async_probe_duration(tmp_path, tone_mp3):
    """The awaitable probe agrees with the synchronous one."""
    path = tmp_path / "tone.mp3"
    path.write_bytes(tone_mp3(1500))
    assert abs(asyncio.run(probe_audio_duration_async(str(path))) - 1.5) < 0.2


def test_async_probe_rejects_non_audio(tmp_path):
    """No audio stream → AudioLoadError."""
    path = tmp_path / "junk.mp3"
    path.write_bytes(b"this is not audio at all")
    with pytest.raises(AudioLoadError):
        asyncio.run(probe_audio_duration_async(str(path)))


def test_async_probe_killed_on_timeout():
    """A timed-out probe does not leave ffprobe running."""
    probe = HangingProbe()

    async def spawn(*cmd, **kwargs):
        return probe

    async def run():
        await asyncio.wait_for(probe_audio_duration_async("slow.mp3"), timeout=0.05)

    with patch("podcast_producer.assembly.asyncio.create_subprocess_exec", new=spawn):
        with pytest.raises(asyncio.TimeoutError):
            asyncio.run(run())
    assert probe.killed
