"""Environment configuration, read once from the process environment and .env."""

import os

from dotenv import load_dotenv

from podcast_producer.constants import OUTPUT_DIR as DEFAULT_OUTPUT_DIR
from podcast_producer.errors import ConfigurationError

load_dotenv()

OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")
TTS_ENGINE = os.getenv("PODCAST_TTS_ENGINE", "openai")   # "openai" or "edge"
OUTPUT_DIR = os.getenv("PODCAST_OUTPUT_DIR", DEFAULT_OUTPUT_DIR)
FFMPEG_BINARY = os.getenv("PODCAST_FFMPEG", "ffmpeg")


def require_openai_key() -> str:
    """Return the OpenAI API key or raise if it is not configured."""
    # Re-read so a key exported after import is still honoured
    key = os.getenv("OPENAI_API_KEY", OPENAI_API_KEY)
    if not key:
        raise ConfigurationError("OPENAI_API_KEY is not configured")
    return key
