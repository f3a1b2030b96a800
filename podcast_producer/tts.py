"""Multi-voice speech synthesis: script → chunks → audio → one MP3 payload."""

import logging

import aiohttp
import edge_tts
import openai
from edge_tts import exceptions as edge_exceptions

from podcast_producer.assembly import combine
from podcast_producer.chunker import split_text_into_chunks
from podcast_producer.constants import EDGE_TTS_RATE, MAX_CHUNK_CHARS, OPENAI_TTS_MODEL
from podcast_producer.errors import (
    InvalidInputError,
    PodcastError,
    SynthesisError,
    error_for_status,
    error_payload,
)
from podcast_producer.models import CombinedAudio
from podcast_producer.parser import parse_script
from podcast_producer.voices import default_voice_map, resolve_voice

logger = logging.getLogger(__name__)

_EDGE_PROTOCOL_ERRORS = (
    edge_exceptions.NoAudioReceived,
    edge_exceptions.UnexpectedResponse,
    edge_exceptions.UnknownResponse,
    edge_exceptions.WebSocketError,
)


class OpenAIEngine:
    """OpenAI speech endpoint (tts-1, MP3 output)."""

    name = "openai"

    def __init__(self, api_key: str | None = None, model: str = OPENAI_TTS_MODEL, client=None):
        self.model = model
        self.client = client or openai.AsyncOpenAI(api_key=api_key)

    async def synthesize(self, text: str, voice: str) -> bytes:
        try:
            response = await self.client.audio.speech.create(
                model=self.model,
                voice=voice,
                input=text,
                response_format="mp3",
            )
        except openai.APIStatusError as e:
            logger.error("OpenAI TTS error: %s %s", e.status_code, e.message)
            raise error_for_status(e.status_code, e.message) from e
        except openai.APIConnectionError as e:
            raise SynthesisError(f"Speech synthesis failed: {e}") from e
        return response.content


class EdgeEngine:
    """Microsoft Edge read-aloud voices through edge-tts (MP3 output)."""

    name = "edge"

    def __init__(self, rate: str = EDGE_TTS_RATE):
        self.rate = rate

    async def synthesize(self, text: str, voice: str) -> bytes:
        audio = bytearray()
        try:
            communicate = edge_tts.Communicate(text, voice, rate=self.rate)
            async for chunk in communicate.stream():
                if chunk["type"] == "audio":
                    audio.extend(chunk["data"])
        except aiohttp.ClientResponseError as e:
            raise error_for_status(e.status, e.message) from e
        except (aiohttp.ClientError, *_EDGE_PROTOCOL_ERRORS) as e:
            raise SynthesisError(f"Speech synthesis failed: {e}") from e
        return bytes(audio)


def create_engine(name: str, api_key: str | None = None):
    """Build a TTS engine by name ("openai" or "edge")."""
    if name == "openai":
        return OpenAIEngine(api_key=api_key)
    if name == "edge":
        return EdgeEngine()
    raise ValueError(f"Unknown TTS engine: {name}")


async def synthesize_chunk(engine, text: str, voice: str) -> bytes:
    """Synthesize one chunk. An empty response counts as a failure."""
    if not text:
        raise InvalidInputError("Chunk text is empty")
    data = await engine.synthesize(text, voice)
    if not data:
        raise SynthesisError(f"TTS produced 0 bytes for: {text[:50]}...")
    return data


def plan_chunks(
    text: str,
    voice_map: dict[str, str],
    max_chars: int = MAX_CHUNK_CHARS,
) -> list[tuple[str, str]]:
    """Parse and chunk a script into ordered (voice, chunk_text) pairs.

    Pure: no network. Raises InvalidInputError for empty or unspeakable text.
    """
    if not text or not text.strip():
        raise InvalidInputError("Text is required")

    segments = parse_script(text, speakers=voice_map.keys())
    if not segments:
        raise InvalidInputError("Script contains no speakable text")

    plan = []
    for seg in segments:
        voice = resolve_voice(seg.speaker, voice_map)
        for chunk in split_text_into_chunks(seg.text, max_chars):
            plan.append((voice, chunk))
    logger.info("Parsed %d dialogue segments into %d chunks", len(segments), len(plan))
    return plan


async def synthesize_script(
    text: str,
    engine,
    voice_map: dict[str, str] | None = None,
    max_chars: int = MAX_CHUNK_CHARS,
    on_progress=None,
) -> CombinedAudio:
    """Synthesize a whole script into one MP3 payload.

    Chunks are sent strictly one at a time and their audio is spliced in
    script order. The first failing chunk aborts the run; no partial audio
    is returned. on_progress(done, total) is called after each chunk.
    """
    if voice_map is None:
        voice_map = default_voice_map(engine.name)
    plan = plan_chunks(text, voice_map, max_chars)

    total = len(plan)
    buffers = []
    for i, (voice, chunk) in enumerate(plan):
        logger.info("Generating audio for chunk %d/%d (%s, %d chars)", i + 1, total, voice, len(chunk))
        try:
            buffers.append(await synthesize_chunk(engine, chunk, voice))
        except PodcastError:
            logger.error("Synthesis aborted at chunk %d/%d", i + 1, total)
            raise
        if on_progress:
            on_progress(i + 1, total)

    combined = combine(buffers)
    logger.info("Combined audio bytes: %d", len(combined.data))
    return combined


async def text_to_speech(text: str, engine, voice_map: dict[str, str] | None = None) -> dict:
    """Entry point returning a base64 audio payload or a structured error."""
    try:
        combined = await synthesize_script(text, engine, voice_map=voice_map)
    except PodcastError as e:
        return error_payload(e)
    return combined.to_payload()
