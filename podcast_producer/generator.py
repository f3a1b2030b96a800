"""Script and thumbnail generation through the OpenAI API."""

import logging

import openai

from podcast_producer.constants import (
    DEFAULT_DURATION_LABEL,
    DEFAULT_STYLE,
    OPENAI_IMAGE_MODEL,
    OPENAI_IMAGE_SIZE,
    OPENAI_SCRIPT_MODEL,
)
from podcast_producer.errors import GenerationError, InvalidInputError, ServiceError, error_for_status
from podcast_producer.models import GeneratedScript

logger = logging.getLogger(__name__)

SCRIPT_SYSTEM_PROMPT = """You are an expert podcast script writer. Create engaging, conversational podcast scripts with dialogue between a Host and an Interviewer.

FORMATTING RULES:
- Always put "Host:" or "Interviewer:" before each speaker's dialogue
- Write ONLY the spoken words: no stage directions, sound effects or music cues
- Never include text in parentheses like (pause), (laughs), (music fades)
- Never use asterisks or markers like **bold** or *italic*
- Keep the dialogue natural and flowing
- Use a {style} style and tone"""

SCRIPT_USER_PROMPT = """Write a {duration} podcast script about: {topic}

Format it as a dialogue between Host and Interviewer:
1. Start every line with "Host:" or "Interviewer:"
2. Write ONLY spoken dialogue, with no stage directions, parentheses or formatting
3. Include:
   - An introduction with both speakers
   - 3-4 key points explored through conversation
   - Natural back-and-forth with questions and answers
   - A memorable conclusion

Example:
Host: Welcome to today's episode where we explore {topic}.
Interviewer: Thanks for having me. This is a fascinating subject.
Host: Let's dive right in."""

THUMBNAIL_PROMPT = (
    'A professional podcast cover image for a podcast titled "{title}" about {topic}. '
    "Modern, vibrant and eye-catching, with abstract shapes, gradients and imagery "
    "that represents the topic. High quality, suitable for a podcast cover."
)


def _client(api_key: str | None = None, client=None):
    return client or openai.OpenAI(api_key=api_key)


def _map_openai_error(e: Exception) -> ServiceError:
    if isinstance(e, openai.APIStatusError):
        logger.error("OpenAI API error: %s %s", e.status_code, e.message)
        return error_for_status(e.status_code, e.message, default=GenerationError)
    return GenerationError(f"OpenAI API error: {e}")


def generate_script(
    topic: str,
    duration: str = DEFAULT_DURATION_LABEL,
    style: str = DEFAULT_STYLE,
    api_key: str | None = None,
    client=None,
) -> GeneratedScript:
    """Ask the chat model for a Host/Interviewer dialogue about a topic."""
    topic = topic.strip()
    if not topic:
        raise InvalidInputError("Topic is required")

    logger.info("Generating podcast script: topic=%r duration=%r style=%r", topic, duration, style)
    try:
        response = _client(api_key, client).chat.completions.create(
            model=OPENAI_SCRIPT_MODEL,
            messages=[
                {"role": "system", "content": SCRIPT_SYSTEM_PROMPT.format(style=style)},
                {"role": "user", "content": SCRIPT_USER_PROMPT.format(duration=duration, topic=topic)},
            ],
        )
    except (openai.APIStatusError, openai.APIConnectionError) as e:
        raise _map_openai_error(e) from e

    script = response.choices[0].message.content or ""
    if not script.strip():
        raise GenerationError("OpenAI returned an empty script")

    return GeneratedScript(
        script=script,
        title=topic,
        description=f"A {duration} podcast about {topic}",
    )


def generate_thumbnail(
    topic: str,
    title: str,
    api_key: str | None = None,
    client=None,
) -> str:
    """Generate cover art and return its URL."""
    logger.info("Generating thumbnail: topic=%r title=%r", topic, title)
    try:
        response = _client(api_key, client).images.generate(
            model=OPENAI_IMAGE_MODEL,
            prompt=THUMBNAIL_PROMPT.format(title=title, topic=topic),
            n=1,
            size=OPENAI_IMAGE_SIZE,
            quality="standard",
        )
    except (openai.APIStatusError, openai.APIConnectionError) as e:
        raise _map_openai_error(e) from e

    data = response.data or []
    url = data[0].url if data else None
    if not url:
        raise GenerationError("No image generated")
    return url
