"""Join synthesized MP3 chunks and inspect the result."""

import asyncio
import json
import math

from pydub.utils import get_prober_name, mediainfo_json

from podcast_producer.constants import AUDIO_MIME_TYPE
from podcast_producer.errors import AudioLoadError
from podcast_producer.models import CombinedAudio


def concatenate_buffers(buffers: list[bytes]) -> bytes:
    """Splice encoded audio buffers together in the given order.

    No re-encoding: this only yields playable audio because MP3 frames are
    self-delimiting and every buffer shares one format.
    """
    return b"".join(buffers)


def combine(buffers: list[bytes], mime_type: str = AUDIO_MIME_TYPE) -> CombinedAudio:
    return CombinedAudio(data=concatenate_buffers(buffers), mime_type=mime_type)


def _probe_command(path: str) -> list[str]:
    return [get_prober_name(), "-of", "json", "-v", "info", "-show_format", "-show_streams", path]


def _duration_from_info(info: dict | None) -> float:
    streams = info.get("streams", []) if info else []
    if not any(s.get("codec_type") == "audio" for s in streams):
        raise AudioLoadError("Unable to load audio")

    raw = info.get("format", {}).get("duration")
    try:
        return float(raw)
    except (TypeError, ValueError):
        return math.nan


def probe_audio_duration(path: str) -> float:
    """Return the container duration of an audio file in seconds.

    Runs ffprobe through pydub. Raises AudioLoadError when the file holds no
    audio stream. Returns NaN when the duration is not reported.
    """
    try:
        info = mediainfo_json(path)
    except (OSError, ValueError, KeyError) as e:
        raise AudioLoadError("Unable to load audio") from e
    return _duration_from_info(info)


async def probe_audio_duration_async(path: str) -> float:
    """Awaitable probe_audio_duration.

    ffprobe runs as an asyncio subprocess and is killed if the awaiting task
    is cancelled, so a timeout around this call is a hard bound.
    """
    try:
        process = await asyncio.create_subprocess_exec(
            *_probe_command(path),
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise AudioLoadError("Unable to load audio") from e

    try:
        stdout, _ = await process.communicate()
    finally:
        if process.returncode is None:
            process.kill()
            await process.wait()

    try:
        info = json.loads(stdout.decode("utf-8", "ignore") or "{}")
    except ValueError as e:
        raise AudioLoadError("Unable to load audio") from e
    return _duration_from_info(info)
