"""Speaker role → voice identity mapping for each TTS engine."""

import json
import logging
import os

from podcast_producer.constants import DEFAULT_SPEAKER, SPEAKER_HOST, SPEAKER_INTERVIEWER
from podcast_producer.errors import ConfigurationError

logger = logging.getLogger(__name__)

# Default cast per engine. Extra roles can be added through a voices file.
VOICE_MAPS = {
    "openai": {
        SPEAKER_HOST: "alloy",
        SPEAKER_INTERVIEWER: "nova",
    },
    "edge": {
        SPEAKER_HOST: "en-US-DavisNeural",
        SPEAKER_INTERVIEWER: "en-US-JennyNeural",
    },
}

# Voices offered by each engine (edge list hardcoded to avoid a network call)
VOICE_POOLS = {
    "openai": ["alloy", "echo", "fable", "onyx", "nova", "shimmer"],
    "edge": [
        "en-US-AriaNeural",
        "en-US-DavisNeural",
        "en-US-GuyNeural",
        "en-US-JennyNeural",
        "en-US-TonyNeural",
        "en-GB-RyanNeural",
        "en-GB-SoniaNeural",
        "en-AU-NatashaNeural",
        "en-AU-WilliamNeural",
        "en-CA-ClaraNeural",
        "en-IN-NeerjaNeural",
    ],
}


def default_voice_map(engine_name: str) -> dict[str, str]:
    """Return a copy of the built-in voice map for an engine."""
    if engine_name not in VOICE_MAPS:
        raise ValueError(f"Unknown TTS engine: {engine_name}")
    return dict(VOICE_MAPS[engine_name])


def load_voice_map(path: str | None, engine_name: str) -> dict[str, str]:
    """Load a voices JSON file layered over the engine defaults.

    File format: {"host": "onyx", "guest": "shimmer"}. Role names are
    lower-cased. A missing path or malformed file falls back to defaults.
    """
    voice_map = default_voice_map(engine_name)
    if not path:
        return voice_map
    if not os.path.exists(path):
        logger.warning("Voices file not found: %s, using defaults", path)
        return voice_map
    try:
        with open(path) as f:
            overrides = json.load(f)
    except json.JSONDecodeError:
        logger.warning("Malformed voices file: %s, using defaults", path)
        return voice_map
    if not isinstance(overrides, dict):
        logger.warning("Voices file %s is not a JSON object, using defaults", path)
        return voice_map

    for role, voice in overrides.items():
        if isinstance(voice, str) and voice:
            voice_map[role.strip().lower()] = voice
    return voice_map


def resolve_voice(speaker: str, voice_map: dict[str, str]) -> str:
    """Voice for a speaker role; unknown roles get the default speaker's voice."""
    voice = voice_map.get(speaker.lower())
    if voice:
        return voice
    fallback = voice_map.get(DEFAULT_SPEAKER)
    if fallback:
        return fallback
    raise ConfigurationError(f"No voice configured for speaker '{speaker}'")
