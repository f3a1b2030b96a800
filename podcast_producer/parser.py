"""Parse a generated dialogue script into speaker-attributed segments."""

import re

from podcast_producer.constants import DEFAULT_SPEAKER, DEFAULT_SPEAKERS
from podcast_producer.models import ScriptSegment

# Stage directions: (pause), (laughs), (music fades)
_STAGE_DIRECTION_RE = re.compile(r"\([^)]*\)")
_EMPHASIS_RE = re.compile(r"\*+")
_WHITESPACE_RE = re.compile(r"\s+")


def clean_script_text(text: str) -> str:
    """Strip stage directions and emphasis markup, collapse whitespace, trim.

    Idempotent: cleaning already-clean text returns it unchanged.
    """
    text = _STAGE_DIRECTION_RE.sub("", text)
    text = _EMPHASIS_RE.sub("", text)
    text = _WHITESPACE_RE.sub(" ", text)
    return text.strip()


def _label_pattern(speakers) -> re.Pattern:
    # Longest label first so "host assistant" is not swallowed by "host"
    labels = sorted({s.strip().lower() for s in speakers if s.strip()}, key=len, reverse=True)
    alternation = "|".join(re.escape(label) for label in labels)
    return re.compile(rf"^({alternation})\s*:", re.IGNORECASE)


def parse_script(
    text: str,
    speakers=DEFAULT_SPEAKERS,
    default_speaker: str = DEFAULT_SPEAKER,
) -> list[ScriptSegment]:
    """Parse script text into an ordered list of ScriptSegments.

    Each non-blank line is matched against the speaker labels ("Host:",
    "Interviewer:", case-insensitive). Lines without a known label are
    attributed to `default_speaker` instead of being rejected. Lines that
    clean down to nothing produce no segment.
    """
    if not text:
        return []

    label_re = _label_pattern(speakers)
    segments = []

    for line in text.splitlines():
        stripped = line.strip()
        if not stripped:
            continue

        match = label_re.match(stripped)
        if match:
            speaker = match.group(1).lower()
            content = stripped[match.end():]
        else:
            speaker = default_speaker
            content = stripped

        cleaned = clean_script_text(content)
        if cleaned:
            segments.append(ScriptSegment(speaker=speaker, text=cleaned))

    return segments
